"""Property codec: kinds, generic property enumeration and value encoding."""

from rigpreview.core.codec.codec import (
    NULL_REFERENCE,
    UnrestorableValueError,
    decode_value,
    deserialize,
    encode_value,
    serialize,
)
from rigpreview.core.codec.kinds import NUMERIC_KINDS, PropertyKind, kind_of
from rigpreview.core.codec.properties import (
    PropertyAccessor,
    enumerate_properties,
    find_property,
    resize_list,
)

__all__ = [
    # Kinds
    "NUMERIC_KINDS",
    "PropertyKind",
    "kind_of",
    # Properties
    "PropertyAccessor",
    "enumerate_properties",
    "find_property",
    "resize_list",
    # Codec
    "NULL_REFERENCE",
    "UnrestorableValueError",
    "encode_value",
    "decode_value",
    "serialize",
    "deserialize",
]
