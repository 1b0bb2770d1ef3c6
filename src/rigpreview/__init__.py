"""rigpreview: live physics preview sessions for avatar rigs.

Usage:
    from rigpreview import LocalHost, Node, PhysBone, PreviewSession, Scene
    from rigpreview.rig import AvatarDescriptor

    avatar = Node("Avatar", AvatarDescriptor())
    tail = avatar.add_child(Node("Tail", PhysBone(gravity=0.3)))
    host = LocalHost(Scene("Main", avatar))

    session = PreviewSession.create(host)
    session.request_start(node=tail)
    session.clone_root.find_child("Tail").get_component(PhysBone).gravity = 0.7
    session.save_and_exit()
    assert tail.get_component(PhysBone).gravity == 0.7
"""

__version__ = "0.1.0"

# Core primitives
from rigpreview.core import (
    ComponentKey,
    InstanceId,
    PropertyKind,
    component,
    get_registry,
)

# Changes
from rigpreview.changes import (
    ApplyReport,
    ChangeEntry,
    ChangeSet,
    FileChangeBuffer,
    MemoryChangeBuffer,
)

# Configuration
from rigpreview.config import PreviewSettings, configure_logging, load_settings

# Rig runtime
from rigpreview.rig import AvatarDescriptor, PhysBone, PhysBoneCollider

# Scene and host
from rigpreview.scene import Host, HostTransition, LocalHost, Node, Scene

# Session
from rigpreview.session import (
    PreviewSession,
    SessionExistsError,
    SessionMode,
    SessionState,
    ValidationResult,
)

# Snapshot
from rigpreview.snapshot import PropertySnapshot, SnapshotStore

__all__ = [
    # Version
    "__version__",
    # Core
    "ComponentKey",
    "InstanceId",
    "PropertyKind",
    "component",
    "get_registry",
    # Scene
    "Node",
    "Scene",
    "Host",
    "HostTransition",
    "LocalHost",
    # Snapshot
    "PropertySnapshot",
    "SnapshotStore",
    # Changes
    "ChangeEntry",
    "ChangeSet",
    "ApplyReport",
    "MemoryChangeBuffer",
    "FileChangeBuffer",
    # Session
    "PreviewSession",
    "SessionState",
    "SessionMode",
    "ValidationResult",
    "SessionExistsError",
    # Config
    "PreviewSettings",
    "load_settings",
    "configure_logging",
    # Rig
    "AvatarDescriptor",
    "PhysBone",
    "PhysBoneCollider",
]
