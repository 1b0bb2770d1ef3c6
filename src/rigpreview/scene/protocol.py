"""Host protocol: the editor environment a preview session runs inside.

The host owns the scenes, the selection and the simulated-mode lifecycle.
It may rebuild every in-memory object when simulated mode ends, so anything
the session must find again afterwards is addressed by scene path.

Usage:
    host = LocalHost(Scene("Main", avatar))
    session = PreviewSession.create(host)
"""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from enum import Enum, auto
from typing import Any, Protocol

from rigpreview.scene.hooks import HookRegistry
from rigpreview.scene.node import Node, Scene


class HostTransition(Enum):
    """Edges of the host's simulated-mode lifecycle, in firing order."""

    EXITING_EDIT = auto()  # About to enter simulated mode
    ENTERED_SIMULATION = auto()
    EXITING_SIMULATION = auto()  # About to leave simulated mode
    ENTERED_EDIT = auto()


TransitionListener = Callable[[HostTransition], None]


class Host(Protocol):
    """Abstract host interface. Implementations own the actual scene state."""

    @property
    def is_simulating(self) -> bool:
        """True while in simulated mode."""
        ...

    @property
    def hooks(self) -> HookRegistry:
        """Callback channels invoked at build and lifecycle points."""
        ...

    def scenes(self) -> list[Scene]:
        """Currently loaded scenes."""
        ...

    def get_selection(self) -> Node | None:
        """Currently selected node."""
        ...

    def set_selection(self, node: Node | None) -> None:
        """Replace the selection. Other writers may change it again at any time."""
        ...

    def instantiate(self, original: Node) -> Node:
        """Deep copy a subtree into the original's scene as a top-level node."""
        ...

    def destroy(self, node: Node) -> None:
        """Remove a subtree and release its instance ids."""
        ...

    def is_alive(self, node: Node) -> bool:
        """Check that a node reference still belongs to the live scene state."""
        ...

    def subscribe(self, listener: TransitionListener) -> None:
        """Register a lifecycle listener on the lifecycle hook channel."""
        ...

    def unsubscribe(self, listener: TransitionListener) -> None:
        """Remove a lifecycle listener."""
        ...

    def enter_simulation(self) -> None:
        """Request simulated mode. Fires EXITING_EDIT then ENTERED_SIMULATION."""
        ...

    def exit_simulation(self) -> None:
        """Request edit mode. Fires EXITING_SIMULATION then ENTERED_EDIT."""
        ...

    def notify(self, message: str) -> None:
        """Show a transient notification."""
        ...

    def show_blocking_message(self, title: str, message: str) -> None:
        """Show a message the user must dismiss."""
        ...

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        """Schedule a coroutine on the host's loop for later ticks."""
        ...
