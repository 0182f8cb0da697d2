"""Delayed callbacks for enemy turns.

The game session never sleeps. It hands the enemy turn to a
``Scheduler`` and keeps the returned ``ScheduledTask`` so the turn can be
cancelled when the encounter ends first.

Two implementations are provided:

* ``AsyncioScheduler`` fires callbacks on a running event loop with
  ``loop.call_later``.
* ``ManualScheduler`` queues callbacks on a virtual clock that only moves
  when ``advance()`` or ``run_due()`` is called. Tests and the text
  console use it for deterministic turn order.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Callable
from typing import Protocol

from dm_companion.core.logging import get_logger


logger = get_logger(__name__)


class ScheduledTask(Protocol):
    """Handle for a pending callback."""

    def cancel(self) -> None: ...

    @property
    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    """Something that can run a callback after a delay."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask: ...


# =============================================================================
# asyncio
# =============================================================================


class AsyncioTask:
    """``ScheduledTask`` wrapping an ``asyncio.TimerHandle``."""

    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler:
    """Schedule callbacks on an asyncio event loop.

    Args:
        loop: Event loop to schedule on. Defaults to the running loop at
            the time ``call_later`` is invoked.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> AsyncioTask:
        loop = self._loop or asyncio.get_running_loop()
        return AsyncioTask(loop.call_later(delay, callback))


# =============================================================================
# Manual clock
# =============================================================================


class ManualTask:
    """``ScheduledTask`` queued on a ``ManualScheduler``."""

    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self._cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """Deterministic scheduler driven by an explicit virtual clock.

    Example:
        >>> scheduler = ManualScheduler()
        >>> fired = []
        >>> _ = scheduler.call_later(1.0, lambda: fired.append("turn"))
        >>> scheduler.advance(0.5)
        0
        >>> scheduler.advance(0.5)
        1
        >>> fired
        ['turn']
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, ManualTask]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTask:
        task = ManualTask(self.now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (task.due, next(self._counter), task))
        return task

    @property
    def pending(self) -> int:
        """Number of queued callbacks that have not been cancelled."""
        return sum(1 for _, _, task in self._queue if not task.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run every callback that became due.

        Returns:
            Number of callbacks run.
        """
        self.now += seconds
        return self._run_until(self.now)

    def run_due(self) -> int:
        """Run every queued callback regardless of its delay, in due order.

        Returns:
            Number of callbacks run.
        """
        ran = 0
        while self._queue:
            due = self._queue[0][0]
            self.now = max(self.now, due)
            ran += self._run_until(self.now)
        return ran

    def _run_until(self, deadline: float) -> int:
        ran = 0
        while self._queue and self._queue[0][0] <= deadline:
            _, _, task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            task.fired = True
            task.callback()
            ran += 1
        if ran:
            logger.debug("Scheduled callbacks run", count=ran, clock=self.now)
        return ran


__all__ = [
    "ScheduledTask",
    "Scheduler",
    "AsyncioTask",
    "AsyncioScheduler",
    "ManualTask",
    "ManualScheduler",
]
