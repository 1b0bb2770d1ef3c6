"""Named callback channels the host invokes at build and lifecycle points.

Third-party tooling registers here to run its own processing when the host
enters simulated mode. The preview session temporarily removes callbacks it
does not trust (see ``rigpreview.session.interception``).

Usage:
    hooks = HookRegistry()
    hooks.register(BUILD_PREPROCESS, my_processor)
    hooks.fire(BUILD_PREPROCESS, avatar)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Callback = Callable[..., Any]

LIFECYCLE = "lifecycle"
BUILD_PREPROCESS = "build_preprocess"
BUILD_POSTPROCESS = "build_postprocess"
SCENE_PROCESS = "scene_process"

DEFAULT_CHANNELS = (BUILD_PREPROCESS, BUILD_POSTPROCESS, SCENE_PROCESS, LIFECYCLE)


class HookRegistry:
    """Ordered callback lists keyed by channel name."""

    def __init__(self, channels: tuple[str, ...] = DEFAULT_CHANNELS) -> None:
        self._channels: dict[str, list[Callback]] = {name: [] for name in channels}

    def channels(self) -> list[str]:
        return list(self._channels)

    def callbacks(self, channel: str) -> list[Callback]:
        """Live callback list of a channel, created on first use."""
        return self._channels.setdefault(channel, [])

    def register(self, channel: str, callback: Callback) -> None:
        self.callbacks(channel).append(callback)

    def unregister(self, channel: str, callback: Callback) -> bool:
        """Remove the first registration of callback. Returns True if it was registered."""
        callbacks = self.callbacks(channel)
        try:
            callbacks.remove(callback)
        except ValueError:
            return False
        return True

    def fire(self, channel: str, *args: Any) -> int:
        """Invoke every callback of a channel in registration order.

        A failing callback is logged and does not stop the others.

        Returns:
            Number of callbacks invoked.
        """
        invoked = 0
        for callback in list(self.callbacks(channel)):
            invoked += 1
            try:
                callback(*args)
            except Exception:
                logger.exception("Hook %r on channel %r failed", callback, channel)
        return invoked
