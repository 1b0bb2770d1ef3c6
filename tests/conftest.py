"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from rigpreview.changes import MemoryChangeBuffer
from rigpreview.config import PreviewSettings
from rigpreview.core import component
from rigpreview.core.values import Curve, Keyframe, ObjectRef, Vector3
from rigpreview.rig import (
    Animator,
    AvatarDescriptor,
    LimitType,
    PhysBone,
    PhysBoneCollider,
    SkinnedMeshRenderer,
)
from rigpreview.scene import LocalHost, Node, Scene
from rigpreview.session import GuardPolicy, PreviewSession


@component
@dataclass
class BuildMarker:
    """Stand-in for a third-party build component; not essential."""

    label: str = "fury"


@dataclass
class Unregistered:
    note: str = ""


def build_avatar(name: str = "Avatar", gravity: float = 0.3) -> Node:
    """Avatar rig with a tail chain, a collider and some non-physics components.

    Avatar [AvatarDescriptor, Animator, BuildMarker]
      Body [SkinnedMeshRenderer, Unregistered]
      Armature
        Hips [PhysBoneCollider]
          Tail [PhysBone]
            TailEnd (inactive) [PhysBone disabled]
    """
    avatar = Node(name, AvatarDescriptor(), Animator(), BuildMarker())
    avatar.add_child(Node("Body", SkinnedMeshRenderer(), Unregistered("x")))
    armature = avatar.add_child(Node("Armature"))
    hips = armature.add_child(Node("Hips", PhysBoneCollider(radius=0.1)))
    tail = hips.add_child(
        Node(
            "Tail",
            PhysBone(
                gravity=gravity,
                colliders=[ObjectRef("collider-1")],
                radius_curve=Curve(keys=(Keyframe(0.0, 1.0), Keyframe(1.0, 0.5))),
                limit_type=LimitType.ANGLE,
                endpoint_position=Vector3(0.0, 0.1, 0.0),
            ),
        )
    )
    tail.add_child(Node("TailEnd", PhysBone(enabled=False, pull=0.5), active=False))
    return avatar


@pytest.fixture
def avatar() -> Node:
    """Fresh avatar rig."""
    return build_avatar()


@pytest.fixture
def scene(avatar: Node) -> Scene:
    """Scene holding the avatar, a second avatar and a prop."""
    return Scene("Main", avatar, build_avatar("Other", gravity=0.0), Node("Prop"))


@pytest.fixture
def host(scene: Scene):
    """In-memory host without reload. Queued guard work is drained on teardown."""
    host = LocalHost(scene)
    yield host
    host.run_pending()


@pytest.fixture
def reloading_host(scene: Scene):
    """In-memory host that rebuilds every node when leaving simulated mode."""
    host = LocalHost(scene, reload_on_exit=True)
    yield host
    host.run_pending()


@pytest.fixture
def settings() -> PreviewSettings:
    """Default settings, ignoring any .env file."""
    return PreviewSettings(_env_file=None)


@pytest.fixture(autouse=True)
def _release_session():
    """Make sure every test starts and ends without a process-wide session."""
    existing = PreviewSession.current()
    if existing is not None:
        existing.dispose()
    yield
    existing = PreviewSession.current()
    if existing is not None:
        existing.dispose()


def make_session(
    host: LocalHost, settings: PreviewSettings, buffer: MemoryChangeBuffer | None = None
) -> PreviewSession:
    return PreviewSession.create(
        host,
        settings,
        buffer=buffer if buffer is not None else MemoryChangeBuffer(),
        guard_policy=GuardPolicy(max_ticks=3),
    )


@pytest.fixture
def session(host: LocalHost, settings: PreviewSettings) -> PreviewSession:
    """Session attached to the non-reloading host."""
    return make_session(host, settings)


def tail_of(root: Node) -> Node:
    node = root.find_child("Armature").find_child("Hips").find_child("Tail")  # type: ignore[union-attr]
    assert node is not None
    return node


@pytest.fixture
def tail(avatar: Node) -> Node:
    return tail_of(avatar)


@pytest.fixture
def bone(tail: Node) -> PhysBone:
    found = tail.get_component(PhysBone)
    assert found is not None
    return found
