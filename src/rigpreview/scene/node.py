"""Scene graph: named nodes carrying component instances, grouped in scenes.

Usage:
    avatar = Node("Avatar", AvatarDescriptor())
    hips = avatar.add_child(Node("Hips"))
    hips.add_child(Node("Tail", PhysBone(gravity=0.3)))
    scene = Scene("Main", avatar)
"""

from __future__ import annotations

import copy
from collections.abc import Iterator
from typing import Any, TypeVar

from rigpreview.core.identity import InstanceId

T = TypeVar("T")


class Node:
    """Named node with ordered children and components.

    ``instance_id`` is assigned by the host that owns the node's scene and is
    None for detached nodes.
    """

    def __init__(
        self,
        name: str,
        *components: Any,
        active: bool = True,
        children: tuple[Node, ...] = (),
    ) -> None:
        self.name = name
        self.active_self = active
        self.components: list[Any] = list(components)
        self.instance_id: InstanceId | None = None
        self._parent: Node | None = None
        self._children: list[Node] = []
        self._scene: Scene | None = None
        for child in children:
            self.add_child(child)

    def __repr__(self) -> str:
        return f"Node({self.name!r}, id={self.instance_id})"

    @property
    def parent(self) -> Node | None:
        return self._parent

    @property
    def children(self) -> list[Node]:
        return self._children

    @property
    def scene(self) -> Scene | None:
        return self.top._scene

    @property
    def scene_name(self) -> str | None:
        scene = self.scene
        return scene.name if scene is not None else None

    @property
    def top(self) -> Node:
        """Topmost ancestor, self for top-level nodes."""
        node = self
        while node._parent is not None:
            node = node._parent
        return node

    @property
    def active_in_hierarchy(self) -> bool:
        node: Node | None = self
        while node is not None:
            if not node.active_self:
                return False
            node = node._parent
        return True

    def set_active(self, active: bool) -> None:
        self.active_self = active

    def add_child(self, child: Node) -> Node:
        """Attach child as the last child, detaching it from any previous parent."""
        if child._parent is not None:
            child._parent.remove_child(child)
        elif child._scene is not None:
            child._scene.remove_root(child)
        child._parent = self
        self._children.append(child)
        return child

    def remove_child(self, child: Node) -> None:
        self._children.remove(child)
        child._parent = None

    def find_child(self, name: str) -> Node | None:
        return next((c for c in self._children if c.name == name), None)

    def is_descendant_of(self, ancestor: Node) -> bool:
        """True if ancestor is this node or one of its parents."""
        node: Node | None = self
        while node is not None:
            if node is ancestor:
                return True
            node = node._parent
        return False

    def walk(self, include_inactive: bool = True) -> Iterator[Node]:
        """Depth-first pre-order walk of the subtree, self first."""
        if not include_inactive and not self.active_self:
            return
        yield self
        for child in list(self._children):
            yield from child.walk(include_inactive)

    def add_component(self, component: T) -> T:
        self.components.append(component)
        return component

    def remove_component(self, component: Any) -> None:
        """Remove a component instance by identity."""
        for index, existing in enumerate(self.components):
            if existing is component:
                del self.components[index]
                return
        raise ValueError(f"{type(component).__name__} is not attached to {self.name!r}")

    def get_component(self, component_type: type[T]) -> T | None:
        """First component of exactly the given type, or None."""
        return next((c for c in self.components if type(c) is component_type), None)

    def get_components(self, component_type: type[T]) -> list[T]:
        """All components of exactly the given type, in attachment order."""
        return [c for c in self.components if type(c) is component_type]

    def has_component(self, component_type: type) -> bool:
        return any(type(c) is component_type for c in self.components)

    def owns(self, component: Any) -> bool:
        return any(c is component for c in self.components)

    def clone(self) -> Node:
        """Deep copy of this subtree as a detached top-level node.

        References from the subtree's components to nodes and components
        outside the subtree keep pointing at the originals. References inside
        the subtree are remapped to the copies. Instance ids are cleared.
        """
        memo: dict[int, Any] = {}
        subtree = {id(n) for n in self.walk()}
        scene = self.scene
        if scene is not None:
            memo[id(scene)] = None
            for outside in scene.walk():
                if id(outside) in subtree:
                    continue
                memo[id(outside)] = outside
                for component in outside.components:
                    memo[id(component)] = component
        parent = self._parent
        if parent is not None:
            memo[id(parent)] = parent
        copied = copy.deepcopy(self, memo)
        copied._parent = None
        copied._scene = None
        for node in copied.walk():
            node.instance_id = None
        return copied


class Scene:
    """Named container of top-level nodes."""

    def __init__(self, name: str, *roots: Node) -> None:
        self.name = name
        self._roots: list[Node] = []
        for root in roots:
            self.add_root(root)

    def __repr__(self) -> str:
        return f"Scene({self.name!r}, roots={len(self._roots)})"

    @property
    def roots(self) -> list[Node]:
        return self._roots

    def add_root(self, node: Node) -> Node:
        """Attach a node at top level, detaching it from any parent."""
        if node.parent is not None:
            node.parent.remove_child(node)
        node._scene = self
        self._roots.append(node)
        return node

    def remove_root(self, node: Node) -> None:
        self._roots.remove(node)
        node._scene = None

    def walk(self, include_inactive: bool = True) -> Iterator[Node]:
        """Every node of every root, depth-first pre-order."""
        for root in list(self._roots):
            yield from root.walk(include_inactive)
