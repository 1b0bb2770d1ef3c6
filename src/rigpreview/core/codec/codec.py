"""Property codec: typed property values to transport-safe strings and back.

Every supported kind round-trips through ``serialize``/``deserialize``.
Object references are the exception: they are written as an identifier that
means nothing after the host rebuilds its objects, so deserializing one is a
no-op that logs a warning.

Usage:
    text = serialize(find_property(bone, "gravity"))  # "0.3"
    deserialize("0.7", PropertyKind.FLOAT, find_property(bone, "gravity"))
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any

from rigpreview.core.codec.kinds import NUMERIC_KINDS, PropertyKind, Referenceable
from rigpreview.core.codec.properties import PropertyAccessor
from rigpreview.core.component import type_name_of
from rigpreview.core.values import (
    Bounds,
    Color,
    Curve,
    ObjectRef,
    Quaternion,
    Rect,
    Vector2,
    Vector3,
    Vector4,
)

logger = logging.getLogger(__name__)

NULL_REFERENCE = "null"

_JSON_TYPES: dict[PropertyKind, Any] = {
    PropertyKind.VECTOR2: Vector2,
    PropertyKind.VECTOR3: Vector3,
    PropertyKind.VECTOR4: Vector4,
    PropertyKind.QUATERNION: Quaternion,
    PropertyKind.COLOR: Color,
    PropertyKind.RECT: Rect,
    PropertyKind.CURVE: Curve,
    PropertyKind.BOUNDS: Bounds,
}


class UnrestorableValueError(ValueError):
    """Raised when a serialized value cannot be turned back into a live value."""


def _encode_reference(value: Any) -> str:
    if value is None:
        return NULL_REFERENCE
    if isinstance(value, ObjectRef):
        return value.identifier
    if isinstance(value, Referenceable):
        return NULL_REFERENCE if value.instance_id is None else str(value.instance_id)
    return f"{type_name_of(value)}@{id(value):x}"


def encode_value(kind: PropertyKind, value: Any) -> str:
    """Encode a live value of the given kind.

    Args:
        kind: Kind of the value.
        value: Live value.

    Returns:
        Serialized string; empty for unsupported kinds.

    Raises:
        TypeError: If the value does not match the kind.
    """
    if kind is PropertyKind.BOOLEAN:
        return "True" if value else "False"
    if kind in (PropertyKind.INTEGER, PropertyKind.ARRAY_SIZE):
        return str(int(value))
    if kind is PropertyKind.FLOAT:
        return format(float(value), ".9g")
    if kind is PropertyKind.STRING:
        return str(value)
    if kind is PropertyKind.ENUM:
        if not isinstance(value, Enum):
            raise TypeError(f"Expected an Enum member, got {type(value).__name__}")
        return str(list(type(value)).index(value))
    if kind in _JSON_TYPES:
        return json.dumps(value.to_dict(), separators=(",", ":"))
    if kind is PropertyKind.OBJECT_REFERENCE:
        return _encode_reference(value)
    return ""


def decode_value(kind: PropertyKind, text: str, template: Any = None) -> Any:
    """Decode a serialized value of the given kind.

    Args:
        kind: Kind the text was encoded as.
        text: Serialized value.
        template: Current live value; required for ENUM to know the enum type.

    Returns:
        Live value.

    Raises:
        UnrestorableValueError: For object references and unsupported kinds.
        ValueError: If the text is malformed for the kind.
    """
    if kind is PropertyKind.BOOLEAN:
        return text.strip().lower() in ("true", "1")
    if kind in (PropertyKind.INTEGER, PropertyKind.ARRAY_SIZE):
        return int(text)
    if kind is PropertyKind.FLOAT:
        return float(text)
    if kind is PropertyKind.STRING:
        return text
    if kind is PropertyKind.ENUM:
        if not isinstance(template, Enum):
            raise ValueError("Decoding an enum index requires the current enum value")
        members = list(type(template))
        index = int(text)
        if not 0 <= index < len(members):
            raise ValueError(f"Enum index {index} out of range for {type(template).__name__}")
        return members[index]
    if kind in _JSON_TYPES:
        return _JSON_TYPES[kind].from_dict(json.loads(text))
    raise UnrestorableValueError(f"Values of kind {kind.value!r} cannot be restored")


def _coerce_number(value: Any, kind: PropertyKind) -> Any:
    if kind is PropertyKind.FLOAT:
        return float(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def serialize(accessor: PropertyAccessor) -> str:
    """Serialize the current value of a property.

    Never raises: unsupported kinds and read errors yield an empty string.
    """
    if accessor.kind is PropertyKind.UNSUPPORTED:
        return ""
    try:
        return encode_value(accessor.kind, accessor.get())
    except Exception as e:
        logger.error("Error serializing property %s: %s", accessor.path, e)
        return ""


def deserialize(text: str, kind: PropertyKind, accessor: PropertyAccessor) -> bool:
    """Write a serialized value into a live property.

    Args:
        text: Serialized value.
        kind: Kind the value was serialized as.
        accessor: Target property.

    Returns:
        True if the property was written. Object references, unsupported
        kinds, kind mismatches and malformed values are logged and skipped.
        Integer and float values are written into either kind, converted to
        the live kind when that loses nothing.
    """
    if kind is PropertyKind.OBJECT_REFERENCE:
        logger.warning(
            "Cannot restore object reference for property %s (was %s)", accessor.path, text
        )
        return False
    if kind is PropertyKind.UNSUPPORTED:
        logger.warning("Skipping property %s of unsupported kind", accessor.path)
        return False
    numeric = kind in NUMERIC_KINDS and accessor.kind in NUMERIC_KINDS
    # An unset slot (None) reads as a reference but accepts any kind
    if kind is not accessor.kind and not numeric and accessor.get() is not None:
        logger.warning(
            "Property %s changed kind from %s to %s; skipping",
            accessor.path,
            kind.value,
            accessor.kind.value,
        )
        return False
    try:
        template = accessor.get() if kind is PropertyKind.ENUM else None
        value = decode_value(kind, text, template)
        if numeric:
            value = _coerce_number(value, accessor.kind)
        accessor.set(value)
    except Exception as e:
        logger.error("Error deserializing property %s: %s", accessor.path, e)
        return False
    return True
