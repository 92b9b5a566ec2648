"""
Scheduler
=========

Cooperative, single-threaded timer queue on a virtual millisecond clock.

The game never sleeps: the front-end feeds elapsed frame time into
``advance()`` and tests drive it explicitly, so every run with the same
inputs fires the same callbacks in the same order.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Callable, List, Optional, Tuple


class TimerHandle:
    """Handle returned by Scheduler.call_later / call_every."""

    __slots__ = ("when", "interval", "callback", "_cancelled")

    def __init__(self, when: int, callback: Callable[[], None], interval: Optional[int] = None):
        self.when = when
        self.interval = interval
        self.callback = callback
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def periodic(self) -> bool:
        return self.interval is not None

    def cancel(self) -> None:
        """Cancel the timer. Safe to call more than once."""
        self._cancelled = True

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "pending"
        return f"TimerHandle(when={self.when}, interval={self.interval}, {state})"


class Scheduler:
    """
    Virtual-clock timer queue.

    Timers due at the same instant fire in the order they were scheduled.
    A cancelled handle never fires, including when it is cancelled by an
    earlier callback within the same ``advance()`` call.
    """

    def __init__(self, start_ms: int = 0):
        self._now: int = start_ms
        self._queue: List[Tuple[int, int, TimerHandle]] = []
        self._seq = itertools.count()

    @property
    def now_ms(self) -> int:
        """Current virtual time in milliseconds."""
        return self._now

    @property
    def pending(self) -> int:
        """Number of live (not cancelled) timers."""
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def _push(self, handle: TimerHandle) -> None:
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """
        Run callback once after delay_ms.

        Raises:
            ValueError: If delay_ms is negative.
        """
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be non-negative, got {delay_ms}")
        handle = TimerHandle(self._now + int(delay_ms), callback)
        self._push(handle)
        return handle

    def call_every(self, interval_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """
        Run callback every interval_ms, first firing one interval from now.

        Raises:
            ValueError: If interval_ms is not positive.
        """
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        handle = TimerHandle(self._now + int(interval_ms), callback, interval=int(interval_ms))
        self._push(handle)
        return handle

    def advance(self, ms: int) -> int:
        """
        Move the clock forward, firing every timer that falls due.

        The clock is set to each timer's due time before its callback runs,
        so callbacks observe the instant they were scheduled for.

        Args:
            ms: Milliseconds to advance (non-negative).

        Returns:
            Number of callbacks fired.
        """
        if ms < 0:
            raise ValueError(f"Cannot advance by a negative amount: {ms}")

        target = self._now + int(ms)
        fired = 0

        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue

            self._now = when
            handle.callback()
            fired += 1

            # Re-arm periodic timers unless the callback cancelled them
            if handle.periodic and not handle.cancelled:
                handle.when = when + handle.interval
                self._push(handle)

        self._now = target
        return fired

    def clear(self) -> None:
        """Cancel and drop every pending timer."""
        for _, _, handle in self._queue:
            handle.cancel()
        self._queue.clear()
