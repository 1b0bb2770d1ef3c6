"""Suppression of untrusted hook callbacks during a preview.

Callbacks are trusted by the module that defines them. Everything else is
removed from the host's hook channels while the preview runs and put back at
its original position afterwards.

Usage:
    interceptor = HookInterceptor()
    interceptor.start(host.hooks)
    ...
    interceptor.stop()
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass

from rigpreview.scene.hooks import Callback, HookRegistry

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_PREFIXES: tuple[str, ...] = ("rigpreview", "builtins", "asyncio")


@dataclass(frozen=True, slots=True)
class InterceptionPolicy:
    allowed_prefixes: tuple[str, ...] = DEFAULT_ALLOWED_PREFIXES
    """Module name prefixes whose callbacks stay registered."""

    channels: tuple[str, ...] | None = None
    """Channels to filter; every channel of the registry if None."""


def owner_module(callback: Callback) -> str:
    """Name of the module a callback belongs to.

    Bound methods belong to their instance's class module, callable objects
    to their class module, functions to their defining module.
    """
    bound_to = getattr(callback, "__self__", None)
    if bound_to is not None and not inspect.ismodule(bound_to):
        owner = bound_to if isinstance(bound_to, type) else type(bound_to)
        return owner.__module__
    module = getattr(callback, "__module__", None)
    if module:
        return module
    return type(callback).__module__


def is_allowed(callback: Callback, policy: InterceptionPolicy) -> bool:
    module = owner_module(callback)
    return any(
        module == prefix or module.startswith(f"{prefix}.") for prefix in policy.allowed_prefixes
    )


class HookInterceptor:
    """Removes disallowed callbacks from a hook registry and restores them."""

    def __init__(self, policy: InterceptionPolicy | None = None) -> None:
        self._policy = policy or InterceptionPolicy()
        self._registry: HookRegistry | None = None
        self._removed: list[tuple[str, int, Callback]] = []

    @property
    def is_intercepting(self) -> bool:
        return self._registry is not None

    @property
    def removed(self) -> list[tuple[str, int, Callback]]:
        """(channel, original index, callback) of every suppressed callback."""
        return list(self._removed)

    def start(self, registry: HookRegistry) -> int:
        """Remove disallowed callbacks from every filtered channel.

        Starting twice restores the first interception before the second.

        Returns:
            Number of callbacks removed.
        """
        if self._registry is not None:
            self.stop()
        self._registry = registry
        channels = self._policy.channels or tuple(registry.channels())
        for channel in channels:
            callbacks = registry.callbacks(channel)
            kept: list[Callback] = []
            for index, callback in enumerate(callbacks):
                if is_allowed(callback, self._policy):
                    kept.append(callback)
                else:
                    self._removed.append((channel, index, callback))
                    logger.debug(
                        "Suppressed %s callback from %s", channel, owner_module(callback)
                    )
            callbacks[:] = kept
        logger.debug("Suppressed %d hook callbacks", len(self._removed))
        return len(self._removed)

    def stop(self) -> int:
        """Put every removed callback back at its original position.

        Returns:
            Number of callbacks restored.
        """
        if self._registry is None:
            return 0
        restored = 0
        for channel, index, callback in self._removed:
            callbacks = self._registry.callbacks(channel)
            callbacks.insert(min(index, len(callbacks)), callback)
            restored += 1
        self._removed = []
        self._registry = None
        logger.debug("Restored %d hook callbacks", restored)
        return restored
