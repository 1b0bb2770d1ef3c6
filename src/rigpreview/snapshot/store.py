"""Snapshot capture of every tracked component below a root.

Capture has to run before the root is isolated: deactivating nodes and
disabling tooling can itself change observable values, and those changes
must not be mistaken for user edits.

Usage:
    store = SnapshotStore()
    baseline = store.capture(avatar)
    snapshot = baseline[ComponentKey("Hips/Tail", type_name_of(bone))]
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from rigpreview.core.codec import PropertyKind, enumerate_properties, serialize
from rigpreview.core.component import get_registry, type_name_of
from rigpreview.core.identity import ComponentKey
from rigpreview.core.path import relative_path, scene_path
from rigpreview.scene.node import Node
from rigpreview.snapshot.models import Baseline, PropertySnapshot, SnapshotValue

logger = logging.getLogger(__name__)

# Ownership, visibility and script bookkeeping; never meaningful to diff
DENY_LIST: frozenset[str] = frozenset(
    {
        "enabled",
        "hide_flags",
        "editor_hide_flags",
        "script",
        "owner",
        "prefab_source",
        "prefab_instance",
    }
)


def iter_tracked(root: Node) -> Iterator[tuple[Node, Any]]:
    """Every tracked component below root, including inactive nodes.

    Ordered by tracked type (registration order), then depth-first pre-order,
    then attachment order on each node.
    """
    for component_type in get_registry().tracked_types():
        for node in root.walk(include_inactive=True):
            for instance in node.get_components(component_type):
                yield node, instance


def component_key(node: Node, component: Any, root: Node) -> ComponentKey:
    return ComponentKey(path=relative_path(node, root), type_name=type_name_of(component))


def snapshot_component(component: Any, key: ComponentKey) -> PropertySnapshot:
    """Serialize every codec-visible property of one component.

    Unsupported kinds are left out; they could never be applied back.
    """
    values: dict[str, SnapshotValue] = {}
    for accessor in enumerate_properties(component, skip=DENY_LIST):
        if accessor.kind is PropertyKind.UNSUPPORTED:
            logger.debug("Skipping unsupported property %s on %s", accessor.path, key)
            continue
        values[accessor.path] = SnapshotValue(accessor.kind, serialize(accessor))
    return PropertySnapshot(key=key, values=values)


def capture(root: Node) -> Baseline:
    """Capture a snapshot of every tracked component below root.

    Idempotent: capturing an unmodified root twice yields equal results.
    Components sharing a key overwrite each other; the last one captured wins.

    Args:
        root: Subtree to capture.

    Returns:
        Snapshot per component key.
    """
    baseline: Baseline = {}
    for node, instance in iter_tracked(root):
        key = component_key(node, instance, root)
        if key in baseline:
            logger.warning("Duplicate component key %s; keeping the last instance", key)
        baseline[key] = snapshot_component(instance, key)
        logger.debug("Captured %d properties for %s", len(baseline[key]), key)
    return baseline


class SnapshotStore:
    """Holds the baseline of the current preview session.

    The baseline is kept together with the scene path of the root it was
    captured from, so a restored session can tell which root it belongs to.
    """

    def __init__(self) -> None:
        self._baseline: Baseline = {}
        self._root_path: str | None = None

    def capture(self, root: Node) -> Baseline:
        """Replace the stored baseline with a fresh capture of root."""
        self._baseline = capture(root)
        self._root_path = scene_path(root)
        logger.debug(
            "Captured baseline of %d components from %s", len(self._baseline), self._root_path
        )
        return self._baseline

    @property
    def baseline(self) -> Baseline:
        return self._baseline

    @property
    def root_path(self) -> str | None:
        return self._root_path

    @property
    def is_empty(self) -> bool:
        return not self._baseline

    def get(self, key: ComponentKey) -> PropertySnapshot | None:
        return self._baseline.get(key)

    def clear(self) -> None:
        self._baseline = {}
        self._root_path = None
