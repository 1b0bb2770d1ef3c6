"""Immutable value types used by rig component fields.

Each value type converts to and from the plain dict used by the property
codec's JSON encoding.

Usage:
    offset = Vector3(0.0, 0.1, 0.0)
    radius = Curve(keys=(Keyframe(0.0, 1.0), Keyframe(1.0, 0.25)))
    data = offset.to_dict()  # {"x": 0.0, "y": 0.1, "z": 0.0}
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Vector2:
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Vector2:
        return cls(x=float(data["x"]), y=float(data["y"]))


@dataclass(frozen=True, slots=True)
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Vector3:
        return cls(x=float(data["x"]), y=float(data["y"]), z=float(data["z"]))


@dataclass(frozen=True, slots=True)
class Vector4:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Vector4:
        return cls(
            x=float(data["x"]), y=float(data["y"]), z=float(data["z"]), w=float(data["w"])
        )


@dataclass(frozen=True, slots=True)
class Quaternion:
    """Rotation quaternion. Defaults to identity."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Quaternion:
        return cls(
            x=float(data["x"]), y=float(data["y"]), z=float(data["z"]), w=float(data["w"])
        )


@dataclass(frozen=True, slots=True)
class Color:
    """Linear RGBA color with components in [0, 1]."""

    r: float = 1.0
    g: float = 1.0
    b: float = 1.0
    a: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Color:
        return cls(
            r=float(data["r"]), g=float(data["g"]), b=float(data["b"]), a=float(data["a"])
        )


@dataclass(frozen=True, slots=True)
class Rect:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Rect:
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )


@dataclass(frozen=True, slots=True)
class Bounds:
    """Axis-aligned box given by center and half-size."""

    center: Vector3 = field(default_factory=Vector3)
    extents: Vector3 = field(default_factory=Vector3)

    def to_dict(self) -> dict[str, Any]:
        return {"center": self.center.to_dict(), "extents": self.extents.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Bounds:
        return cls(
            center=Vector3.from_dict(data["center"]),
            extents=Vector3.from_dict(data["extents"]),
        )


@dataclass(frozen=True, slots=True)
class Keyframe:
    time: float
    value: float
    in_tangent: float = 0.0
    out_tangent: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Keyframe:
        return cls(
            time=float(data["time"]),
            value=float(data["value"]),
            in_tangent=float(data.get("in_tangent", 0.0)),
            out_tangent=float(data.get("out_tangent", 0.0)),
        )


@dataclass(frozen=True, slots=True)
class Curve:
    """Keyframed curve, e.g. a radius falloff along a bone chain.

    Wrap modes are stored as plain integers and only round-tripped.
    """

    keys: tuple[Keyframe, ...] = ()
    pre_wrap_mode: int = 0
    post_wrap_mode: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "keys": [key.to_dict() for key in self.keys],
            "pre_wrap_mode": self.pre_wrap_mode,
            "post_wrap_mode": self.post_wrap_mode,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Curve:
        return cls(
            keys=tuple(Keyframe.from_dict(k) for k in data.get("keys", [])),
            pre_wrap_mode=int(data.get("pre_wrap_mode", 0)),
            post_wrap_mode=int(data.get("post_wrap_mode", 0)),
        )


@dataclass(frozen=True, slots=True)
class ObjectRef:
    """Reference to another object by an in-memory identifier.

    Identifiers are not stable across a host reload, which is why referenced
    values are recorded but never restored.
    """

    identifier: str

    def __str__(self) -> str:
        return self.identifier
