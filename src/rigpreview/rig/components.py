"""Built-in rig runtime component types.

Physics components are tracked: they are snapshotted, edited on the preview
copy and written back. The avatar descriptor marks isolable roots. Renderers,
mesh data and the animator are essential so the preview copy still renders
and animates; every other component type is stripped from it.

Usage:
    avatar = Node("Avatar", AvatarDescriptor(), Animator())
    tail = avatar.add_child(Node("Tail", PhysBone(gravity=0.3)))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from rigpreview.core.component import component
from rigpreview.core.values import (
    Bounds,
    Curve,
    ObjectRef,
    Quaternion,
    Vector3,
)


class IntegrationType(Enum):
    SIMPLIFIED = "simplified"
    ADVANCED = "advanced"


class LimitType(Enum):
    NONE = "none"
    ANGLE = "angle"
    HINGE = "hinge"
    POLAR = "polar"


class ImmobileType(Enum):
    ALL_MOTION = "all_motion"
    WORLD = "world"


class ShapeType(Enum):
    SPHERE = "sphere"
    CAPSULE = "capsule"
    PLANE = "plane"


class ReceiverType(Enum):
    CONSTANT = "constant"
    ON_ENTER = "on_enter"
    PROXIMITY = "proximity"


@component(tracked=True)
@dataclass
class PhysBone:
    """Secondary-motion bone chain settings."""

    root_transform: ObjectRef | None = None
    integration_type: IntegrationType = IntegrationType.SIMPLIFIED
    pull: float = 0.2
    spring: float = 0.2
    stiffness: float = 0.2
    gravity: float = 0.0
    gravity_falloff: float = 0.0
    immobile_type: ImmobileType = ImmobileType.ALL_MOTION
    immobile: float = 0.0
    limit_type: LimitType = LimitType.NONE
    max_angle_x: float = 45.0
    max_angle_z: float = 45.0
    limit_rotation: Vector3 = field(default_factory=Vector3)
    radius: float = 0.0
    radius_curve: Curve = field(default_factory=Curve)
    colliders: list[ObjectRef | None] = field(default_factory=list)
    ignore_transforms: list[ObjectRef | None] = field(default_factory=list)
    allow_collision: bool = True
    allow_grabbing: bool = True
    allow_posing: bool = True
    grab_movement: float = 0.5
    max_stretch: float = 0.0
    parameter: str = ""
    is_animated: bool = False
    endpoint_position: Vector3 = field(default_factory=Vector3)
    enabled: bool = True


@component(tracked=True)
@dataclass
class PhysBoneCollider:
    root_transform: ObjectRef | None = None
    shape_type: ShapeType = ShapeType.SPHERE
    inside_bounds: bool = False
    radius: float = 0.5
    height: float = 2.0
    position: Vector3 = field(default_factory=Vector3)
    rotation: Quaternion = field(default_factory=Quaternion)
    bones_as_spheres: bool = False
    enabled: bool = True


@component(tracked=True)
@dataclass
class ContactSender:
    root_transform: ObjectRef | None = None
    shape_type: ShapeType = ShapeType.SPHERE
    radius: float = 0.5
    height: float = 2.0
    position: Vector3 = field(default_factory=Vector3)
    rotation: Quaternion = field(default_factory=Quaternion)
    collision_tags: list[str] = field(default_factory=list)
    enabled: bool = True


@component(tracked=True)
@dataclass
class ContactReceiver:
    root_transform: ObjectRef | None = None
    shape_type: ShapeType = ShapeType.SPHERE
    radius: float = 0.5
    height: float = 2.0
    position: Vector3 = field(default_factory=Vector3)
    rotation: Quaternion = field(default_factory=Quaternion)
    collision_tags: list[str] = field(default_factory=list)
    allow_self: bool = True
    allow_others: bool = True
    local_only: bool = False
    receiver_type: ReceiverType = ReceiverType.CONSTANT
    parameter: str = ""
    min_velocity: float = 0.05
    enabled: bool = True


@component(root=True)
@dataclass
class AvatarDescriptor:
    """Marks the top of an avatar rig."""

    view_position: Vector3 = field(default_factory=lambda: Vector3(0.0, 1.6, 0.0))
    enabled: bool = True


@component(essential=True)
@dataclass
class Animator:
    controller: ObjectRef | None = None
    apply_root_motion: bool = False
    enabled: bool = True


@component(essential=True)
@dataclass
class MeshFilter:
    mesh: ObjectRef | None = None


@component(essential=True)
@dataclass
class MeshRenderer:
    materials: list[ObjectRef | None] = field(default_factory=list)
    enabled: bool = True


@component(essential=True)
@dataclass
class SkinnedMeshRenderer:
    mesh: ObjectRef | None = None
    root_bone: ObjectRef | None = None
    local_bounds: Bounds = field(default_factory=Bounds)
    materials: list[ObjectRef | None] = field(default_factory=list)
    enabled: bool = True


PHYSICS_TYPES: tuple[type, ...] = (PhysBone, PhysBoneCollider, ContactSender, ContactReceiver)
