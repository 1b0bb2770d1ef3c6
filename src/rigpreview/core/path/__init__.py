"""Path resolver: structural addressing of nodes below a root or in a scene."""

from rigpreview.core.path.resolver import (
    SEPARATOR,
    HierarchyNode,
    SceneLike,
    find_all_by_scene_path,
    find_by_scene_path,
    hierarchy_path,
    relative_path,
    resolve,
    scene_path,
    scene_path_occurrence,
)

__all__ = [
    "SEPARATOR",
    "HierarchyNode",
    "SceneLike",
    "relative_path",
    "resolve",
    "hierarchy_path",
    "scene_path",
    "find_by_scene_path",
    "find_all_by_scene_path",
    "scene_path_occurrence",
]
