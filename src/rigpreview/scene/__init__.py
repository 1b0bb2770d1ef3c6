"""Scene graph and host layer.

The host abstracts the editor environment, enabling:
- In-memory scenes for tests and headless tooling (LocalHost)
- Editor integrations implementing the Host protocol
"""

from rigpreview.scene.allocator import InstanceAllocator
from rigpreview.scene.hooks import (
    BUILD_POSTPROCESS,
    BUILD_PREPROCESS,
    LIFECYCLE,
    SCENE_PROCESS,
    HookRegistry,
)
from rigpreview.scene.local import LocalHost
from rigpreview.scene.node import Node, Scene
from rigpreview.scene.protocol import Host, HostTransition

__all__ = [
    # Graph
    "Node",
    "Scene",
    "InstanceAllocator",
    # Hooks
    "HookRegistry",
    "LIFECYCLE",
    "BUILD_PREPROCESS",
    "BUILD_POSTPROCESS",
    "SCENE_PROCESS",
    # Host
    "Host",
    "HostTransition",
    "LocalHost",
]
