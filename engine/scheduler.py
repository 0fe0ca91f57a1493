"""
scheduler.py — Single-Threaded Timer Queue
===========================================
The controller needs exactly one thing from its environment:

    handle = scheduler.call_later(seconds, callback)
    handle.cancel()

`asyncio` event loops already provide that.  TickScheduler provides the
same API for hosts that own their own loop (the Flask app, tests): the
host calls `run_due()` periodically and every callback whose deadline
has passed fires, in deadline order, on the caller's thread.

Timing:
  While a callback runs, `time()` reports the callback's deadline rather
  than the wall clock, so a recurring timer that re-arms itself from its
  own callback keeps a fixed cadence and catches up on missed intervals.
  `max_callbacks` bounds the work done per `run_due()` call; with a
  zero delay a recurring timer would otherwise drain in one call.
  Like asyncio, a deadline within `resolution` of the clock counts as
  due, so float rounding in `now + delay` never postpones a tick.

Thread safety:
  None.  Call everything from one thread.
"""

import heapq
import itertools
import time
from typing import Callable, List, Optional, Tuple


class TimerHandle:
    """Returned by `call_later`; mirrors asyncio.TimerHandle."""

    __slots__ = ("when", "callback", "_cancelled")

    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "pending"
        return f"<TimerHandle when={self.when:.3f} {state}>"


class TickScheduler:
    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_callbacks: int = 1000,
        resolution: float = 1e-6,
    ):
        self._clock = clock
        self._resolution = resolution          # deadlines this close to now are due
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()          # FIFO among equal deadlines
        self._now: Optional[float] = None      # deadline of the running callback
        self.max_callbacks = max_callbacks

    def time(self) -> float:
        return self._now if self._now is not None else self._clock()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        handle = TimerHandle(self.time() + delay, callback)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    def run_due(self) -> int:
        """Fire every callback that is due now.  Returns how many fired."""
        now = self._clock()
        fired = 0
        while self._queue and fired < self.max_callbacks:
            when, _, handle = self._queue[0]
            if when >= now + self._resolution:
                break
            heapq.heappop(self._queue)
            if handle.cancelled():
                continue
            # a handle fires at most once
            handle.cancel()
            self._now = when
            try:
                handle.callback()
            finally:
                self._now = None
            fired += 1
        return fired

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled())

    def clear(self) -> None:
        for _, _, handle in self._queue:
            handle.cancel()
        self._queue.clear()
