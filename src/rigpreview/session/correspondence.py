"""Correspondence between the component a preview started from and its copy.

The triggering component is remembered by structural key plus its index
among same-type siblings on its node, so that its counterpart can be found
in the isolated copy.

Usage:
    tracker = CorrespondenceTracker()
    tracker.set_context(bone, tail, avatar, baseline)
    counterpart = tracker.resolve(preview_copy)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from rigpreview.core.component import type_name_of
from rigpreview.core.identity import ComponentKey
from rigpreview.core.path import relative_path, resolve
from rigpreview.scene.node import Node
from rigpreview.snapshot import Baseline, PropertySnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CorrespondenceContext:
    key: ComponentKey
    index: int  # Among components of the same type on the owning node
    baseline: PropertySnapshot | None


class CorrespondenceTracker:
    """Holds the context of the current session's triggering component."""

    def __init__(self) -> None:
        self._context: CorrespondenceContext | None = None

    @property
    def context(self) -> CorrespondenceContext | None:
        return self._context

    @property
    def has_context(self) -> bool:
        return self._context is not None

    @property
    def baseline(self) -> PropertySnapshot | None:
        """Snapshot of the triggering component taken at session start."""
        return self._context.baseline if self._context is not None else None

    def set_context(
        self, component: Any, node: Node, root: Node, baseline: Baseline | None = None
    ) -> CorrespondenceContext | None:
        """Remember the triggering component.

        Args:
            component: Component the preview was started from.
            node: Node carrying the component.
            root: Root of the previewed subtree.
            baseline: Session baseline to take the component's snapshot from.

        Returns:
            The stored context, or None if the component is not on the node.
        """
        same_type = [c for c in node.components if type(c) is type(component)]
        index = next((i for i, c in enumerate(same_type) if c is component), None)
        if index is None:
            logger.warning("%s is not attached to %r", type(component).__name__, node.name)
            self._context = None
            return None
        key = ComponentKey(relative_path(node, root), type_name_of(component))
        snapshot = baseline.get(key) if baseline is not None else None
        self._context = CorrespondenceContext(key=key, index=index, baseline=snapshot)
        logger.debug("Preview context set to %s[%d]", key, index)
        return self._context

    def resolve(self, root: Node) -> tuple[Node, Any] | None:
        """Find the counterpart of the triggering component below root.

        Returns:
            (node, component) of the counterpart, or None if there is no
            context or the counterpart cannot be found.
        """
        if self._context is None:
            return None
        key, index = self._context.key, self._context.index
        node = resolve(root, key.path)
        if node is None:
            logger.warning("No counterpart node for %s below %r", key, root.name)
            return None
        same_type = [c for c in node.components if type_name_of(c) == key.type_name]
        if index >= len(same_type):
            logger.warning("No counterpart component %s[%d] below %r", key, index, root.name)
            return None
        return node, same_type[index]

    def clear(self) -> None:
        self._context = None


def prepare_for_preview(component: Any) -> bool:
    """Force-enable a component that has an ``enabled`` flag.

    Returns:
        True if the component was switched on.
    """
    if getattr(component, "enabled", True) is False:
        component.enabled = True
        logger.debug("Enabled %s for preview", type(component).__name__)
        return True
    return False
