"""Built-in rig runtime component types."""

from rigpreview.rig.components import (
    PHYSICS_TYPES,
    Animator,
    AvatarDescriptor,
    ContactReceiver,
    ContactSender,
    ImmobileType,
    IntegrationType,
    LimitType,
    MeshFilter,
    MeshRenderer,
    PhysBone,
    PhysBoneCollider,
    ReceiverType,
    ShapeType,
    SkinnedMeshRenderer,
)

__all__ = [
    # Tracked
    "PhysBone",
    "PhysBoneCollider",
    "ContactSender",
    "ContactReceiver",
    "PHYSICS_TYPES",
    # Root
    "AvatarDescriptor",
    # Essential
    "Animator",
    "MeshFilter",
    "MeshRenderer",
    "SkinnedMeshRenderer",
    # Enums
    "IntegrationType",
    "LimitType",
    "ImmobileType",
    "ShapeType",
    "ReceiverType",
]
