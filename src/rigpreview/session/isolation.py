"""Isolation of a rig subtree: root discovery, hiding and the preview copy.

Every isolable root in the loaded scenes is deactivated so that tooling
attached to them does not run, and the chosen root is replaced by an active
copy that only carries essential component types. Stale roots are found
again by scene path and their position among nodes sharing that path.

Usage:
    records = deactivate_roots(find_isolable_roots(host.scenes()))
    copy = prepare_preview_copy(host.instantiate(avatar), avatar)
    ...
    restore_activation(records, host)
    destroy_preview_copy(host, copy)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from rigpreview.core.component import component, get_registry
from rigpreview.core.path import find_by_scene_path, scene_path, scene_path_occurrence
from rigpreview.scene.node import Node, Scene
from rigpreview.scene.protocol import Host

logger = logging.getLogger(__name__)


@component(essential=True)
@dataclass
class PreviewCopy:
    """Marks the top node of a preview copy."""

    source_path: str = ""


@dataclass(slots=True)
class ActivationRecord:
    """Activation state of a root before isolation."""

    node: Node
    scene_path: str
    was_active: bool
    occurrence: int = 0


def is_preview_copy(node: Node) -> bool:
    return node.has_component(PreviewCopy)


def is_isolable_root(node: Node) -> bool:
    registry = get_registry()
    return any(registry.is_root(type(c)) for c in node.components)


def _walk_roots(node: Node) -> Iterator[Node]:
    if is_isolable_root(node):
        yield node
        return
    for child in node.children:
        yield from _walk_roots(child)


def find_isolable_roots(scenes: Iterable[Scene]) -> list[Node]:
    """Every isolable root in the scenes, active or not, excluding preview copies.

    Roots nested below another root are not listed separately.
    """
    roots: list[Node] = []
    for scene in scenes:
        for top in scene.roots:
            if is_preview_copy(top):
                continue
            roots.extend(_walk_roots(top))
    return roots


def owning_root(node: Node) -> Node:
    """Closest ancestor (or self) that is an isolable root, else the top node."""
    current: Node | None = node
    while current is not None:
        if is_isolable_root(current):
            return current
        current = current.parent
    return node.top


def has_tracked_components(root: Node, component_type: type | None = None) -> bool:
    """Check for tracked components below root, optionally of one type only."""
    registry = get_registry()
    for node in root.walk():
        for instance in node.components:
            if component_type is not None:
                if type(instance) is component_type:
                    return True
            elif registry.is_tracked(type(instance)):
                return True
    return False


def find_owner(scenes: Iterable[Scene], instance: Any) -> Node | None:
    """Node carrying a component instance, by identity."""
    for scene in scenes:
        for node in scene.walk():
            if node.owns(instance):
                return node
    return None


def path_occurrence(node: Node) -> int:
    """Position of node among same-path nodes of its scene, preview copies excluded."""
    scene = node.scene
    if scene is None:
        return 0
    return scene_path_occurrence([scene], node, exclude=is_preview_copy)


def deactivate_roots(
    roots: Iterable[Node], records: list[ActivationRecord] | None = None
) -> list[ActivationRecord]:
    """Deactivate roots, recording their prior state for ``restore_activation``.

    Each record is appended to ``records`` before its root is touched, so a
    caller holding that list can restore a partial run.
    """
    if records is None:
        records = []
    for root in roots:
        records.append(
            ActivationRecord(root, scene_path(root), root.active_self, path_occurrence(root))
        )
        root.set_active(False)
        logger.debug("Deactivated %s", records[-1].scene_path)
    return records


def restore_activation(records: Iterable[ActivationRecord], host: Host) -> int:
    """Put every recorded root back into its prior activation state.

    Roots whose reference went stale across a host reload are found again by
    scene path and their position among same-named nodes. Missing roots are
    logged and skipped.

    Returns:
        Number of roots restored.
    """
    restored = 0
    for record in records:
        node: Node | None = record.node
        if node is None or not host.is_alive(node):
            node = find_by_scene_path(
                host.scenes(),
                record.scene_path,
                exclude=is_preview_copy,
                occurrence=record.occurrence,
            )
        if node is None:
            logger.warning("Could not find %s to restore its activation", record.scene_path)
            continue
        node.set_active(record.was_active)
        restored += 1
    return restored


def strip_components(root: Node) -> int:
    """Remove every non-essential component below root.

    Returns:
        Number of components removed.
    """
    registry = get_registry()
    removed = 0
    for node in root.walk():
        for instance in list(node.components):
            if not registry.is_essential(type(instance)):
                node.remove_component(instance)
                removed += 1
    return removed


def prepare_preview_copy(copy: Node, original: Node) -> Node:
    """Turn a freshly instantiated copy into the preview copy of original.

    The copy keeps the original's name so structural paths match.
    """
    copy.name = original.name
    removed = strip_components(copy)
    copy.add_component(PreviewCopy(source_path=scene_path(original)))
    copy.set_active(True)
    logger.debug("Created preview copy of %s (%d components stripped)", copy.name, removed)
    return copy


def destroy_preview_copy(host: Host, copy: Node | None) -> int:
    """Destroy a preview copy, or every preview copy found if the reference went stale.

    Returns:
        Number of copies destroyed.
    """
    if copy is not None and host.is_alive(copy):
        host.destroy(copy)
        return 1
    stale = [top for scene in host.scenes() for top in scene.roots if is_preview_copy(top)]
    for node in stale:
        host.destroy(node)
    return len(stale)
