"""Timed callbacks on a single cooperative event loop.

Nothing here runs in the background. The owner of a Scheduler calls
run_due() whenever it gets control (a test advancing a ManualClock, or the
HTTP layer at the start of each request), and every timer whose due time
has passed fires then, in (due time, scheduling order) order.
"""
import heapq
import itertools
import time
from dataclasses import dataclass, field
from typing import Callable, Protocol


class Clock(Protocol):
    """Millisecond clock."""

    def now_ms(self) -> float:
        ...


class MonotonicClock:
    """Wall clock for live sessions."""

    def now_ms(self) -> float:
        return time.monotonic() * 1000


class ManualClock:
    """Virtual clock for tests and simulations."""

    def __init__(self, start_ms: float = 0.0):
        self._now = start_ms

    def now_ms(self) -> float:
        return self._now

    def advance(self, ms: float) -> None:
        if ms < 0:
            raise ValueError("Cannot move a clock backwards")
        self._now += ms


@dataclass(order=True)
class Timer:
    """Handle for a scheduled callback."""

    due_ms: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    interval_ms: float | None = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)


class Scheduler:
    """
    Heap of one-shot and repeating timers.

    While a timer fires, "now" is that timer's due time, so anything the
    callback schedules is placed relative to when it should have fired
    rather than when run_due() happened to be called.
    """

    def __init__(self, clock: Clock | None = None):
        self.clock = clock or MonotonicClock()
        self._heap: list[Timer] = []
        self._seq = itertools.count()
        self._firing_at: float | None = None

    def now_ms(self) -> float:
        if self._firing_at is not None:
            return self._firing_at
        return self.clock.now_ms()

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> Timer:
        """Run callback once, delay_ms from now."""
        timer = Timer(self.now_ms() + max(delay_ms, 0), next(self._seq), callback)
        heapq.heappush(self._heap, timer)
        return timer

    def schedule_interval(self, interval_ms: float, callback: Callable[[], None]) -> Timer:
        """Run callback every interval_ms until cancelled. First run is one interval out."""
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        timer = Timer(
            self.now_ms() + interval_ms, next(self._seq), callback, interval_ms=interval_ms
        )
        heapq.heappush(self._heap, timer)
        return timer

    def cancel(self, timer: Timer | None) -> None:
        if timer is not None:
            timer.cancelled = True

    @property
    def pending(self) -> int:
        return sum(1 for t in self._heap if not t.cancelled)

    def next_due_ms(self) -> float | None:
        live = [t.due_ms for t in self._heap if not t.cancelled]
        return min(live) if live else None

    def run_due(self) -> int:
        """Fire every timer due by now. Returns how many callbacks ran."""
        now = self.clock.now_ms()
        fired = 0
        while self._heap and self._heap[0].due_ms <= now:
            timer = heapq.heappop(self._heap)
            if timer.cancelled:
                continue
            fired_at = timer.due_ms
            if timer.interval_ms is not None:
                # Re-arm before firing so the callback can cancel it.
                timer.due_ms += timer.interval_ms
                timer.seq = next(self._seq)
                heapq.heappush(self._heap, timer)
            self._firing_at = fired_at
            try:
                timer.callback()
            finally:
                self._firing_at = None
            fired += 1
        return fired
