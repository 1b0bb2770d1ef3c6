"""Change set builder: diff a live subtree against a captured baseline.

Usage:
    baseline = capture(avatar)
    ...  # user edits the preview copy
    change_set = diff(preview_copy, baseline)
"""

from __future__ import annotations

import logging
import math
from typing import Any

from rigpreview.changes.models import ChangeEntry, ChangeSet
from rigpreview.core.codec import NUMERIC_KINDS, PropertyKind, enumerate_properties, serialize
from rigpreview.scene.node import Node
from rigpreview.snapshot import DENY_LIST, Baseline, PropertySnapshot, component_key, iter_tracked

logger = logging.getLogger(__name__)

FLOAT_TOLERANCE = 1e-4


def values_differ(
    kind: PropertyKind, current: str, original: str, tolerance: float = FLOAT_TOLERANCE
) -> bool:
    """Compare two serialized values of the same kind.

    Numbers differ when they are more than ``tolerance`` apart, so an int
    compares equal to the same float; every other kind compares by exact
    string equality.
    """
    if kind in NUMERIC_KINDS:
        try:
            a, b = float(current), float(original)
        except ValueError:
            return current != original
        if math.isnan(a) or math.isnan(b):
            return math.isnan(a) != math.isnan(b)
        return abs(a - b) > tolerance
    return current != original


def diff_component(
    component: Any, snapshot: PropertySnapshot, tolerance: float = FLOAT_TOLERANCE
) -> list[ChangeEntry]:
    """Changed properties of one live component relative to its snapshot.

    Properties missing from the snapshot are logged and skipped.
    """
    entries: list[ChangeEntry] = []
    for accessor in enumerate_properties(component, skip=DENY_LIST):
        if accessor.kind is PropertyKind.UNSUPPORTED:
            continue
        current = serialize(accessor)
        original = snapshot.get(accessor.path)
        if original is None:
            logger.warning(
                "Property %s not found in snapshot for %s; skipping", accessor.path, snapshot.key
            )
            continue
        if values_differ(accessor.kind, current, original.value, tolerance):
            logger.debug(
                "Changed %s.%s: %r -> %r", snapshot.key, accessor.path, original.value, current
            )
            entries.append(ChangeEntry(accessor.path, accessor.kind, current))
    return entries


def diff(root: Node, baseline: Baseline, tolerance: float = FLOAT_TOLERANCE) -> ChangeSet:
    """Build the change set of a live subtree against a baseline.

    Pure: neither the subtree nor the baseline is modified. Components with
    no baseline entry are logged and skipped.

    Args:
        root: Live subtree, usually the preview copy.
        baseline: Snapshot captured from the original before isolation.
        tolerance: Absolute tolerance for float comparison.

    Returns:
        Change set with one entry per component that has at least one change.
        Its ``root`` is left empty for the caller to fill in.
    """
    change_set = ChangeSet()
    for node, instance in iter_tracked(root):
        key = component_key(node, instance, root)
        snapshot = baseline.get(key)
        if snapshot is None:
            logger.warning("Component %s not found in snapshot; skipping", key)
            continue
        change_set.add(key, diff_component(instance, snapshot, tolerance))
    logger.debug(
        "Diff found %d changed properties on %d components",
        change_set.property_count,
        len(change_set),
    )
    return change_set
