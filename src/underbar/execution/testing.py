"""Test harness for time-dependent decorators.

``ManualTimerFacility`` is a timer facility whose clock only moves when the
test says so. Nothing runs on another thread; callbacks fire inside
``advance()``/``run_all()`` on the caller's stack, in due-time order with
ties broken by scheduling order.

Example::

    from underbar import throttle
    from underbar.execution.testing import ManualTimerFacility

    def test_trailing_call():
        timers = ManualTimerFacility()
        calls = []
        throttled = throttle(calls.append, 100, timers=timers)
        throttled(1)
        throttled(2)
        timers.advance(100)
        assert calls == [1, 2]

Callback exceptions propagate out of ``advance()`` so tests see them.
"""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Callable
from typing import Any

from underbar.core.guards import require_callable, require_wait
from underbar.execution.timers import TimerHandle, next_timer_id


class ManualTimerFacility:
    """Deterministic timer facility driven by ``advance()``."""

    name = "manual"

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = float(start_ms)
        self._queue: list[tuple[float, int, TimerHandle, Callable[..., Any], tuple]] = []
        self._sequence = itertools.count()
        self.fired_count = 0

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        delay_ms = require_wait(delay_ms, "call_later", "delay_ms")
        require_callable(callback, "call_later", "callback")
        handle = TimerHandle(id=next_timer_id(), due_at=self._now + delay_ms)
        heapq.heappush(
            self._queue, (handle.due_at, next(self._sequence), handle, callback, args)
        )
        return handle

    def advance(self, ms: float) -> int:
        """Move the clock forward by ``ms``, firing every callback that comes due.

        Callbacks scheduled by other callbacks fire too if they fall due
        before the new time. Returns the number of callbacks fired.
        """
        ms = require_wait(ms, "advance", "ms")
        target = self._now + ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due_at, _, handle, callback, args = heapq.heappop(self._queue)
            self._now = max(self._now, due_at)
            if handle.claim():
                fired += 1
                self.fired_count += 1
                callback(*args)
        self._now = target
        return fired

    def stall(self, ms: float) -> None:
        """Move the clock forward by ``ms`` without firing anything.

        Models a host too busy to service its timer queue: callbacks that
        came due stay queued until the next ``advance()``.
        """
        self._now += require_wait(ms, "stall", "ms")

    def run_all(self) -> int:
        """Fire everything scheduled, jumping the clock to each due time."""
        fired = 0
        while self.pending:
            next_due = min(entry[0] for entry in self._queue if entry[2].active)
            fired += self.advance(max(0.0, next_due - self._now))
        return fired

    @property
    def pending(self) -> int:
        """Callbacks scheduled and neither fired nor cancelled."""
        return sum(1 for entry in self._queue if entry[2].active)


__all__ = ["ManualTimerFacility"]
