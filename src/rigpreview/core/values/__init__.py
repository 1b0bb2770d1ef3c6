"""Immutable value types for component fields."""

from rigpreview.core.values.models import (
    Bounds,
    Color,
    Curve,
    Keyframe,
    ObjectRef,
    Quaternion,
    Rect,
    Vector2,
    Vector3,
    Vector4,
)

__all__ = [
    "Vector2",
    "Vector3",
    "Vector4",
    "Quaternion",
    "Color",
    "Rect",
    "Bounds",
    "Keyframe",
    "Curve",
    "ObjectRef",
]
