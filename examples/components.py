"""Example rig with a custom tracked component."""

from dataclasses import dataclass, field

from rigpreview import AvatarDescriptor, Node, PhysBone, PhysBoneCollider, component
from rigpreview.core.values import Curve, Keyframe, ObjectRef
from rigpreview.rig import Animator, SkinnedMeshRenderer


@component(tracked=True)
@dataclass
class EarSway:
    """Custom secondary motion; tracked like the built-in physics types."""

    amplitude: float = 0.1
    frequency: float = 1.5
    falloff: Curve = field(
        default_factory=lambda: Curve(keys=(Keyframe(0.0, 1.0), Keyframe(1.0, 0.0)))
    )
    enabled: bool = True


def build_fox(name: str = "Fox") -> Node:
    fox = Node(name, AvatarDescriptor(), Animator())
    fox.add_child(Node("Body", SkinnedMeshRenderer()))
    head = fox.add_child(Node("Armature")).add_child(Node("Head", PhysBoneCollider(radius=0.08)))
    head.add_child(Node("EarL", EarSway()))
    head.add_child(Node("EarR", EarSway(amplitude=0.12)))
    fox.find_child("Armature").add_child(  # type: ignore[union-attr]
        Node("Tail", PhysBone(pull=0.3, gravity=0.2, colliders=[ObjectRef("head-collider")]))
    )
    return fox
