"""Simulated-time primitives: countdown scalars and a one-shot timer queue.

Nothing here reads the wall clock. The tick driver advances every timer by
the frame delta, so a timer fires in the frame during which its threshold
is crossed and never earlier.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Countdown:
    """Milliseconds remaining on a timed window (cooldown, immunity, stun)."""

    remaining: float = 0.0

    @property
    def active(self) -> bool:
        return self.remaining > 0.0

    def start(self, duration_ms: float) -> None:
        self.remaining = duration_ms

    def clear(self) -> None:
        self.remaining = 0.0

    def advance(self, delta_ms: float) -> bool:
        """Tick down. Returns True only on the frame the window closes."""
        if self.remaining <= 0.0:
            return False
        self.remaining -= delta_ms
        if self.remaining <= 0.0:
            self.remaining = 0.0
            return True
        return False


class TimerHandle:
    """Cancel-able reference to a scheduled one-shot callback."""

    __slots__ = ("fire_at", "_callback", "_cancelled", "_fired")

    def __init__(self, fire_at: float, callback: Callable[[], None]) -> None:
        self.fire_at = fire_at
        self._callback = callback
        self._cancelled = False
        self._fired = False

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._fired)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> bool:
        """Suppress the callback. Returns False if it already fired."""
        if self._fired:
            return False
        self._cancelled = True
        return True

    def _fire(self) -> None:
        self._fired = True
        self._callback()


class TimerQueue:
    """Min-heap of one-shot callbacks keyed on simulated time."""

    __slots__ = ("_now", "_heap", "_seq")

    def __init__(self) -> None:
        self._now = 0.0
        self._heap: list[tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    def __len__(self) -> int:
        return sum(1 for _, _, h in self._heap if h.pending)

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self._now + max(delay_ms, 0.0), callback)
        heapq.heappush(self._heap, (handle.fire_at, next(self._seq), handle))
        return handle

    def advance(self, delta_ms: float) -> int:
        """Move time forward and fire every due callback in schedule order."""
        self._now += delta_ms
        fired = 0
        while self._heap and self._heap[0][0] <= self._now:
            _, _, handle = heapq.heappop(self._heap)
            if not handle.pending:
                continue
            try:
                handle._fire()
            except Exception:
                logger.exception("Timer callback failed at t=%.1fms", self._now)
            fired += 1
        return fired

    def clear(self) -> None:
        for _, _, handle in self._heap:
            handle.cancel()
        self._heap.clear()
