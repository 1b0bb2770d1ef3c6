"""Snapshot store: baseline capture of tracked components."""

from rigpreview.snapshot.models import Baseline, PropertySnapshot, SnapshotValue
from rigpreview.snapshot.store import (
    DENY_LIST,
    SnapshotStore,
    capture,
    component_key,
    iter_tracked,
    snapshot_component,
)

__all__ = [
    # Models
    "Baseline",
    "PropertySnapshot",
    "SnapshotValue",
    # Store
    "DENY_LIST",
    "SnapshotStore",
    "capture",
    "component_key",
    "iter_tracked",
    "snapshot_component",
]
