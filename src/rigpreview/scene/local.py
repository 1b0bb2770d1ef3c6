"""In-memory host implementation.

LocalHost keeps scenes in process memory and drives the simulated-mode
lifecycle synchronously. With ``reload_on_exit`` it rebuilds every node when
leaving simulated mode, so node references held across the transition go
stale the way they do in a real editor.

Usage:
    host = LocalHost(Scene("Main", avatar), reload_on_exit=True)
    host.enter_simulation()
    host.exit_simulation()
    host.run_pending()
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Callable, Coroutine, Iterable
from typing import Any

from rigpreview.scene.allocator import InstanceAllocator
from rigpreview.scene.hooks import (
    BUILD_POSTPROCESS,
    BUILD_PREPROCESS,
    LIFECYCLE,
    SCENE_PROCESS,
    HookRegistry,
)
from rigpreview.scene.node import Node, Scene
from rigpreview.scene.protocol import HostTransition, TransitionListener

logger = logging.getLogger(__name__)

SelectionListener = Callable[[Node | None], None]


class LocalHost:
    """In-memory host with scenes, selection, hook channels and lifecycle.

    Args:
        *scenes: Scenes loaded at start.
        reload_on_exit: Rebuild all nodes between EXITING_SIMULATION and
            ENTERED_EDIT.
    """

    def __init__(self, *scenes: Scene, reload_on_exit: bool = False) -> None:
        self._allocator = InstanceAllocator()
        self._scenes: list[Scene] = []
        self._hooks = HookRegistry()
        self._selection: Node | None = None
        self._selection_listeners: list[SelectionListener] = []
        self._simulating = False
        self._reload_on_exit = reload_on_exit
        self._queued: list[Coroutine[Any, Any, Any]] = []
        self._tasks: set[asyncio.Task[Any]] = set()
        self.notifications: list[str] = []
        self.messages: list[tuple[str, str]] = []
        self.reload_count = 0
        for scene in scenes:
            self.add_scene(scene)

    # Scenes and nodes

    def add_scene(self, scene: Scene) -> Scene:
        self._scenes.append(scene)
        self._assign_ids(scene.walk())
        return scene

    def scenes(self) -> list[Scene]:
        return list(self._scenes)

    def _assign_ids(self, nodes: Iterable[Node]) -> None:
        for node in nodes:
            node.instance_id = self._allocator.allocate()

    def _release_ids(self, nodes: Iterable[Node]) -> None:
        for node in nodes:
            if node.instance_id is not None and self._allocator.is_alive(node.instance_id):
                self._allocator.deallocate(node.instance_id)

    def is_alive(self, node: Node) -> bool:
        return node.instance_id is not None and self._allocator.is_alive(node.instance_id)

    def instantiate(self, original: Node) -> Node:
        """Deep copy a subtree into the original's scene as a top-level node.

        Raises:
            ValueError: If the original is not in a scene and no scene is loaded.
        """
        scene = original.scene
        if scene is None:
            if not self._scenes:
                raise ValueError(f"Cannot instantiate {original.name!r}: no scene loaded")
            scene = self._scenes[0]
        clone = scene.add_root(original.clone())
        self._assign_ids(clone.walk())
        logger.debug("Instantiated %r into scene %r", clone, scene.name)
        return clone

    def destroy(self, node: Node) -> None:
        if node.parent is not None:
            node.parent.remove_child(node)
        elif node.scene is not None:
            node.scene.remove_root(node)
        if self._selection is not None and self._selection.is_descendant_of(node):
            self._selection = None
        self._release_ids(node.walk())
        logger.debug("Destroyed %r", node)

    def reload(self) -> None:
        """Rebuild every node with fresh instance ids.

        Node references taken before the reload stay readable but are no
        longer alive; state must be found again by path.
        """
        for scene in self._scenes:
            self._release_ids(scene.walk())
        self._scenes = copy.deepcopy(self._scenes)
        for scene in self._scenes:
            self._assign_ids(scene.walk())
        self._selection = None
        self.reload_count += 1
        logger.debug("Host reloaded (%d)", self.reload_count)

    # Selection

    def get_selection(self) -> Node | None:
        return self._selection

    def set_selection(self, node: Node | None) -> None:
        self._selection = node
        for listener in list(self._selection_listeners):
            listener(node)

    def add_selection_listener(self, listener: SelectionListener) -> None:
        self._selection_listeners.append(listener)

    # Hooks and lifecycle

    @property
    def hooks(self) -> HookRegistry:
        return self._hooks

    @property
    def is_simulating(self) -> bool:
        return self._simulating

    def subscribe(self, listener: TransitionListener) -> None:
        self._hooks.register(LIFECYCLE, listener)

    def unsubscribe(self, listener: TransitionListener) -> None:
        self._hooks.unregister(LIFECYCLE, listener)

    def enter_simulation(self) -> None:
        """Enter simulated mode, running build processing on active top-level nodes.

        Raises:
            RuntimeError: If already in simulated mode.
        """
        if self._simulating:
            raise RuntimeError("Host is already in simulated mode")
        self._hooks.fire(LIFECYCLE, HostTransition.EXITING_EDIT)
        for scene in self._scenes:
            self._hooks.fire(SCENE_PROCESS, scene)
            for top in list(scene.roots):
                if top.active_self:
                    self._hooks.fire(BUILD_PREPROCESS, top)
                    self._hooks.fire(BUILD_POSTPROCESS, top)
        self._simulating = True
        self._hooks.fire(LIFECYCLE, HostTransition.ENTERED_SIMULATION)

    def exit_simulation(self) -> None:
        """Return to edit mode.

        Raises:
            RuntimeError: If not in simulated mode.
        """
        if not self._simulating:
            raise RuntimeError("Host is not in simulated mode")
        self._hooks.fire(LIFECYCLE, HostTransition.EXITING_SIMULATION)
        self._simulating = False
        if self._reload_on_exit:
            self.reload()
        self._hooks.fire(LIFECYCLE, HostTransition.ENTERED_EDIT)

    # Messages

    def notify(self, message: str) -> None:
        logger.info("Notification: %s", message)
        self.notifications.append(message)

    def show_blocking_message(self, title: str, message: str) -> None:
        logger.warning("%s: %s", title, message)
        self.messages.append((title, message))

    # Scheduling

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        """Run a coroutine on the running loop, or queue it until ``drain``."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._queued.append(coro)
            return
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> list[Any]:
        """Await every spawned and queued coroutine. Returns their results."""
        queued, self._queued = self._queued, []
        pending = [asyncio.ensure_future(coro) for coro in queued]
        pending.extend(self._tasks)
        if not pending:
            return []
        return list(await asyncio.gather(*pending))

    def run_pending(self) -> list[Any]:
        """Drive queued coroutines to completion from synchronous code."""
        return asyncio.run(self.drain())
