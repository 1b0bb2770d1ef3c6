"""Structural paths between nodes of a named hierarchy.

A relative path is the "/"-joined list of node names from a root (exclusive)
down to a node (inclusive); the root itself has the empty path. A scene path
prefixes the full hierarchy path with the scene name and is the only handle
on a node that survives the host rebuilding its objects.

Usage:
    path = relative_path(tail, avatar)            # "Armature/Hips/Tail"
    same = resolve(copy_of_avatar, path)          # counterpart in the copy
    key = scene_path(avatar)                      # "Main/Avatar"
    again = find_by_scene_path(host.scenes(), key)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import Protocol, Self, TypeVar

logger = logging.getLogger(__name__)

SEPARATOR = "/"


class HierarchyNode(Protocol):
    """Minimal shape of a named node in a tree."""

    name: str

    @property
    def parent(self) -> Self | None: ...

    @property
    def children(self) -> Sequence[Self]: ...

    @property
    def scene_name(self) -> str | None: ...


N = TypeVar("N", bound=HierarchyNode)


class SceneLike(Protocol):
    """A named container of top-level nodes."""

    name: str

    @property
    def roots(self) -> Sequence[HierarchyNode]: ...


def relative_path(node: N, root: N) -> str:
    """Path of a node relative to a root.

    If root is not an ancestor of node, the path runs up to the top of the
    node's hierarchy.

    Args:
        node: Node to address.
        root: Ancestor the path starts below.

    Returns:
        "/"-joined names from root (exclusive) to node (inclusive), "" for root.
    """
    names: list[str] = []
    current: N | None = node
    while current is not None and current is not root:
        names.append(current.name)
        current = current.parent
    return SEPARATOR.join(reversed(names))


def resolve(root: N, path: str) -> N | None:
    """Walk named children from a root.

    The first child with a matching name is taken at every step.

    Args:
        root: Node to start from.
        path: Relative path as produced by ``relative_path``.

    Returns:
        The addressed node, or None if any segment is missing.
    """
    if not path:
        return root
    current = root
    for segment in path.split(SEPARATOR):
        child = next((c for c in current.children if c.name == segment), None)
        if child is None:
            logger.debug("Path %r not found below %r: missing %r", path, root.name, segment)
            return None
        current = child
    return current


def hierarchy_path(node: HierarchyNode) -> str:
    """Full path from the top of the hierarchy down to node, inclusive."""
    names: list[str] = []
    current: HierarchyNode | None = node
    while current is not None:
        names.append(current.name)
        current = current.parent
    return SEPARATOR.join(reversed(names))


def scene_path(node: HierarchyNode) -> str:
    """Scene name followed by the full hierarchy path.

    Nodes outside any scene are addressed by their hierarchy path alone.
    """
    path = hierarchy_path(node)
    scene = node.scene_name
    return f"{scene}{SEPARATOR}{path}" if scene else path


def _resolve_all(node: N, segments: list[str]) -> Iterator[N]:
    if not segments:
        yield node
        return
    for child in node.children:
        if child.name == segments[0]:
            yield from _resolve_all(child, segments[1:])


def find_all_by_scene_path(
    scenes: Iterable[SceneLike],
    path: str,
    exclude: Callable[[N], bool] | None = None,
) -> list[N]:
    """Every node at a scene path, in scene order.

    Same-named siblings make a scene path ambiguous; the position of a node
    in this list tells them apart.

    Args:
        scenes: Scenes to search.
        path: Scene path as produced by ``scene_path``.
        exclude: Predicate for top-level nodes to ignore, e.g. preview copies
            that share their original's name.
    """
    scene_name, _, hierarchy = path.partition(SEPARATOR)
    if not hierarchy:
        logger.warning("Malformed scene path %r", path)
        return []
    top_name, _, rest = hierarchy.partition(SEPARATOR)
    segments = rest.split(SEPARATOR) if rest else []
    found: list[N] = []
    for scene in scenes:
        if scene.name != scene_name:
            continue
        for top in scene.roots:
            if top.name != top_name or (exclude is not None and exclude(top)):  # type: ignore[arg-type]
                continue
            found.extend(_resolve_all(top, segments))  # type: ignore[arg-type]
    return found


def find_by_scene_path(
    scenes: Iterable[SceneLike],
    path: str,
    exclude: Callable[[N], bool] | None = None,
    occurrence: int = 0,
) -> N | None:
    """Locate a node by scene path.

    Args:
        scenes: Scenes to search.
        path: Scene path as produced by ``scene_path``.
        exclude: Predicate for top-level nodes to ignore.
        occurrence: Which of several nodes sharing the path to return, as
            given by ``scene_path_occurrence``.

    Returns:
        The matching node, or None.
    """
    found = find_all_by_scene_path(scenes, path, exclude)
    if occurrence < len(found):
        return found[occurrence]
    logger.debug("No node at scene path %r (occurrence %d)", path, occurrence)
    return None


def scene_path_occurrence(
    scenes: Iterable[SceneLike],
    node: N,
    exclude: Callable[[N], bool] | None = None,
) -> int:
    """Position of a node among the nodes sharing its scene path.

    Returns 0 for nodes that cannot be found, e.g. detached ones.
    """
    found = find_all_by_scene_path(scenes, scene_path(node), exclude)
    return next((i for i, other in enumerate(found) if other is node), 0)
