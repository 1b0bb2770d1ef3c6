"""Change sets: diffing, durable buffering and re-application."""

from rigpreview.changes.apply import (
    ApplyReport,
    apply_change_set,
    apply_component_change,
    resolve_component_type,
)
from rigpreview.changes.buffer import (
    ChangeBuffer,
    FileChangeBuffer,
    MemoryChangeBuffer,
    PendingChanges,
)
from rigpreview.changes.builder import FLOAT_TOLERANCE, diff, diff_component, values_differ
from rigpreview.changes.models import (
    FORMAT_VERSION,
    ChangeEntry,
    ChangeSet,
    ChangeSetFormatError,
    ComponentChange,
)

__all__ = [
    # Models
    "FORMAT_VERSION",
    "ChangeEntry",
    "ComponentChange",
    "ChangeSet",
    "ChangeSetFormatError",
    # Builder
    "FLOAT_TOLERANCE",
    "diff",
    "diff_component",
    "values_differ",
    # Buffer
    "ChangeBuffer",
    "MemoryChangeBuffer",
    "FileChangeBuffer",
    "PendingChanges",
    # Apply
    "ApplyReport",
    "apply_change_set",
    "apply_component_change",
    "resolve_component_type",
]
