"""Selection guard: keep the preview target selected for a few loop ticks.

Other parts of the host may change the selection right after the preview
starts. The guard re-asserts it on subsequent ticks until it holds or the
attempts run out.

Usage:
    guard = SelectionGuard(host, GuardPolicy(max_ticks=5))
    host.spawn(guard.hold(target))
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import tenacity

from rigpreview.scene.node import Node
from rigpreview.scene.protocol import Host

logger = logging.getLogger(__name__)


class SelectionLostError(RuntimeError):
    """The selection moved away from the guarded node."""


@dataclass(frozen=True, slots=True)
class GuardPolicy:
    """Configuration for re-asserting the selection."""

    max_ticks: int = 5
    """Ticks to re-assert on before giving up."""

    tick_delay: float = 0.0
    """Seconds between ticks; 0 yields to the loop once per tick."""


class SelectionGuard:
    """Re-asserts the selection of a node over several loop ticks."""

    def __init__(self, host: Host, policy: GuardPolicy | None = None) -> None:
        self._host = host
        self._policy = policy or GuardPolicy()

    def _build_retryer(self) -> tenacity.AsyncRetrying:
        wait: tenacity.wait.wait_base
        if self._policy.tick_delay > 0:
            wait = tenacity.wait_fixed(self._policy.tick_delay)
        else:
            wait = tenacity.wait_none()
        return tenacity.AsyncRetrying(
            stop=tenacity.stop_after_attempt(self._policy.max_ticks),
            wait=wait,
            retry=tenacity.retry_if_exception_type(SelectionLostError),
            reraise=False,
        )

    async def _assert_selection(self, target: Node) -> None:
        if self._host.get_selection() is not target:
            self._host.set_selection(target)
        await asyncio.sleep(0)
        if self._host.get_selection() is not target:
            raise SelectionLostError(f"Selection moved away from {target.name!r}")

    async def hold(self, target: Node) -> bool:
        """Keep target selected until it stays selected for one tick.

        Returns:
            True if the selection held, False if attempts ran out.
        """
        try:
            async for attempt in self._build_retryer():
                with attempt:
                    await self._assert_selection(target)
                    return True
        except tenacity.RetryError:
            logger.warning(
                "Could not keep %r selected after %d ticks", target.name, self._policy.max_ticks
            )
            return False
        return False  # pragma: no cover
