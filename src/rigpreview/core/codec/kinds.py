"""Property kinds and classification of live values."""

from __future__ import annotations

from dataclasses import is_dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

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


class PropertyKind(Enum):
    """Kind of a codec-visible property. Values are the persisted kind names."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    VECTOR2 = "vector2"
    VECTOR3 = "vector3"
    VECTOR4 = "vector4"
    QUATERNION = "quaternion"
    COLOR = "color"
    RECT = "rect"
    ENUM = "enum"
    CURVE = "curve"
    BOUNDS = "bounds"
    ARRAY_SIZE = "array_size"
    OBJECT_REFERENCE = "object_reference"
    UNSUPPORTED = "unsupported"


# A float field may hold a plain int, so these two kinds are interchangeable
NUMERIC_KINDS = frozenset({PropertyKind.INTEGER, PropertyKind.FLOAT})


@runtime_checkable
class Referenceable(Protocol):
    """Anything addressed by an in-memory instance id, e.g. a scene node."""

    instance_id: Any


# Order matters: bool and Enum members are also ints
_VALUE_KINDS: tuple[tuple[type, PropertyKind], ...] = (
    (bool, PropertyKind.BOOLEAN),
    (Enum, PropertyKind.ENUM),
    (int, PropertyKind.INTEGER),
    (float, PropertyKind.FLOAT),
    (str, PropertyKind.STRING),
    (Vector2, PropertyKind.VECTOR2),
    (Vector3, PropertyKind.VECTOR3),
    (Vector4, PropertyKind.VECTOR4),
    (Quaternion, PropertyKind.QUATERNION),
    (Color, PropertyKind.COLOR),
    (Rect, PropertyKind.RECT),
    (Curve, PropertyKind.CURVE),
    (Bounds, PropertyKind.BOUNDS),
    (ObjectRef, PropertyKind.OBJECT_REFERENCE),
)


def is_composite(value: Any) -> bool:
    """Check if a value is a nested record whose fields are visited individually."""
    if isinstance(value, type):
        return False
    if is_dataclass(value):
        return not hasattr(type(value), "__component_meta__")
    return hasattr(type(value), "model_fields") and hasattr(value, "model_copy")


def kind_of(value: Any) -> PropertyKind | None:
    """Classify a live value.

    Args:
        value: Field value read from a component.

    Returns:
        The value's kind, or None for containers (lists and nested records)
        that the property visitor walks into.
    """
    if value is None:
        return PropertyKind.OBJECT_REFERENCE
    for value_type, kind in _VALUE_KINDS:
        if isinstance(value, value_type):
            return kind
    if hasattr(type(value), "__component_meta__") or isinstance(value, Referenceable):
        return PropertyKind.OBJECT_REFERENCE
    if isinstance(value, list) or is_composite(value):
        return None
    return PropertyKind.UNSUPPORTED
