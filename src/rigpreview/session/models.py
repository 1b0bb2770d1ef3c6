"""Session models: states, modes, start validation and errors."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from rigpreview.scene.node import Node


class SessionState(Enum):
    """Preview session lifecycle. Only the session state machine mutates it."""

    IDLE = auto()
    AWAITING_ISOLATION = auto()  # Start accepted, waiting for the host to leave edit mode
    ISOLATING = auto()
    ACTIVE = auto()  # Only state in which edits can be saved
    AWAITING_RESTORE = auto()  # Exit requested, waiting for the host to reach edit mode


class SessionMode(Enum):
    SAFE = auto()  # Original hidden, edits happen on an isolated copy
    FAST = auto()  # Edits happen on the original, nothing is isolated or saved


class SessionExistsError(RuntimeError):
    """Raised when a second preview session is created while one exists."""


class IsolationError(RuntimeError):
    """Raised inside isolation when a step cannot be completed."""


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validating a start request.

    On success ``root`` is the subtree to preview and ``trigger_node`` /
    ``trigger_component`` identify what the user started from, if anything.
    """

    ok: bool
    title: str = ""
    message: str = ""
    root: Node | None = None
    trigger_node: Node | None = None
    trigger_component: Any = None

    @classmethod
    def success(
        cls, root: Node, trigger_node: Node | None = None, trigger_component: Any = None
    ) -> ValidationResult:
        return cls(
            ok=True, root=root, trigger_node=trigger_node, trigger_component=trigger_component
        )

    @classmethod
    def failure(cls, title: str, message: str) -> ValidationResult:
        return cls(ok=False, title=title, message=message)

    def __bool__(self) -> bool:
        return self.ok
