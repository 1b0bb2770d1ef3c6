"""Core functionalities: stateless primitives shared by every layer.

Architecture Note:
    core/ holds pure building blocks (identity, component registry, value
    types, property codec, path resolver) with no session state.
    For stateful services, see scene/, snapshot/, changes/ and session/.
"""

from rigpreview.core.codec import (
    PropertyAccessor,
    PropertyKind,
    decode_value,
    deserialize,
    encode_value,
    enumerate_properties,
    find_property,
    serialize,
)
from rigpreview.core.component import (
    ComponentRegistry,
    ComponentRole,
    component,
    get_registry,
    type_name_of,
)
from rigpreview.core.identity import ComponentKey, InstanceId
from rigpreview.core.path import (
    find_by_scene_path,
    hierarchy_path,
    relative_path,
    resolve,
    scene_path,
)

__all__ = [
    # Identity
    "ComponentKey",
    "InstanceId",
    # Component
    "component",
    "get_registry",
    "type_name_of",
    "ComponentRegistry",
    "ComponentRole",
    # Codec
    "PropertyKind",
    "PropertyAccessor",
    "enumerate_properties",
    "find_property",
    "encode_value",
    "decode_value",
    "serialize",
    "deserialize",
    # Path
    "relative_path",
    "resolve",
    "hierarchy_path",
    "scene_path",
    "find_by_scene_path",
]
