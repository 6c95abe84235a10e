"""Cancellable delayed callbacks.

Anything with ``call_later(delay, callback)`` returning a handle with
``cancel()`` works as a scheduler, which includes an asyncio event loop.
ManualScheduler runs on virtual time for tests and the CLI tour.
"""

import heapq
import itertools
import logging
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class TimerSlot:
    """Holds at most one pending timer; scheduling replaces the previous one."""

    def __init__(self, scheduler: Scheduler, name: str = "timer") -> None:
        self.scheduler = scheduler
        self.name = name
        self._handle: TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, delay: float, callback: Callable[[], None]) -> None:
        self.cancel()

        def fire() -> None:
            if self._handle is not handle:
                return  # superseded
            self._handle = None
            callback()

        handle = self.scheduler.call_later(delay, fire)
        self._handle = handle
        logger.debug("%s scheduled in %.2fs", self.name, delay)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            logger.debug("%s cancelled", self.name)


class _ManualHandle:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-time scheduler. Nothing fires until ``advance`` is called."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, _ManualHandle]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle(self.now + max(delay, 0.0), callback)
        heapq.heappush(self._queue, (handle.due, next(self._seq), handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def advance(self, seconds: float) -> int:
        """Move time forward, firing due callbacks in order. Returns how many fired."""
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            if handle.cancelled:
                continue
            handle.callback()
            fired += 1
        self.now = target
        return fired

    def run_all(self) -> int:
        """Fire everything pending, including callbacks scheduled while running."""
        fired = 0
        while self._queue:
            due, _, handle = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            if not handle.cancelled:
                handle.callback()
                fired += 1
        return fired
