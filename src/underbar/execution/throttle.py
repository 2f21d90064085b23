"""Leading-edge throttle with one trailing call.

Manifesto:
    A throttled function runs immediately when it has been quiet for a
    whole window, and otherwise runs at most once more when the window
    closes, with the latest arguments it saw. Callers never block and never
    get an error for calling "too often"; they get the last known result.

ARCHITECTURE
────────────
::

    ┌──────────┐  call                 ┌────────────────┐
    │   Idle   │──────────────────────►│  Active window │
    └──────────┘  invoke now,          │  opened_at = t │
         ▲        opened_at = t        └───────┬────────┘
         │                                     │ call while active
         │ t - opened_at >= wait               ▼
         │ (next call invokes now)     ┌────────────────┐
    ┌────┴─────────┐                   │ Trailing        │  more calls:
    │Window expired│◄──────────────────│ scheduled at    │  args replaced
    └──────────────┘  timer fires:     │ opened_at+wait  │  (coalesced)
                      invoke with      └────────────────┘
                      latest args,
                      opened_at = fire time

    At most one trailing timer is outstanding. A call that finds the window
    expired while the trailing timer has not fired yet (late timer) runs
    immediately and cancels the trailing call.

Related modules:
    timers.py   ─ TimerFacility the trailing call is scheduled on
    testing.py  ─ ManualTimerFacility for deterministic tests

Example::

    timers = ManualTimerFacility()
    save = throttle(store.save, 1000, timers=timers)
    save(doc_v1)   # runs now
    save(doc_v2)   # schedules trailing call
    save(doc_v3)   # replaces trailing args
    timers.advance(1000)   # runs store.save(doc_v3)

Tags:
    underbar, execution, throttle, rate-limit, decorator
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from underbar.core.guards import require_callable, require_wait
from underbar.core.logging import get_logger
from underbar.execution.memo import _BindsLikeFunction
from underbar.execution.timers import TimerFacility, TimerHandle, get_default_timers

logger = get_logger(__name__)

R = TypeVar("R")


class Throttled(_BindsLikeFunction, Generic[R]):
    """Callable returned by ``throttle``.

    Window bookkeeping is guarded by a lock because thread-backed timer
    facilities fire the trailing call on a timer thread. The wrapped function
    itself is always called outside the lock.
    """

    def __init__(self, func: Callable[..., R], wait_ms: float, timers: TimerFacility) -> None:
        self._adopt(func)
        self._func = func
        self._wait = wait_ms
        self._timers = timers
        self._lock = threading.Lock()
        self._opened_at: float | None = None
        self._pending: TimerHandle | None = None
        self._pending_call: tuple[tuple, dict] | None = None
        self._generation = 0
        self._result: R | None = None

    def __call__(self, *args: Any, **kwargs: Any) -> R | None:
        with self._lock:
            now = self._timers.now()
            if self._opened_at is None or now - self._opened_at >= self._wait:
                self._opened_at = now
                if self._pending is not None:
                    self._pending.cancel()
                    self._pending = None
                    self._pending_call = None
                    logger.debug("throttle.superseded", function=self.__name__)
                leading = True
            else:
                self._pending_call = (args, kwargs)
                if self._pending is None:
                    remaining = self._opened_at + self._wait - now
                    self._generation += 1
                    self._pending = self._timers.call_later(
                        remaining, self._fire_trailing, self._generation
                    )
                    logger.debug(
                        "throttle.trailing_scheduled",
                        function=self.__name__,
                        timer_id=self._pending.id,
                        remaining_ms=remaining,
                    )
                leading = False
            if not leading:
                return self._result

        logger.debug("throttle.leading", function=self.__name__)
        result = self._func(*args, **kwargs)
        with self._lock:
            self._result = result
        return result

    def _fire_trailing(self, generation: int) -> None:
        with self._lock:
            # A timer thread may claim a handle just before a leading call
            # supersedes it; only the currently scheduled timer may run.
            if generation != self._generation or self._pending is None:
                return
            if self._pending_call is None:
                return
            args, kwargs = self._pending_call
            self._pending_call = None
            self._pending = None
            self._opened_at = self._timers.now()

        logger.debug("throttle.trailing_fired", function=self.__name__)
        result = self._func(*args, **kwargs)
        with self._lock:
            self._result = result

    @property
    def pending(self) -> bool:
        """Whether a trailing call is scheduled."""
        with self._lock:
            return self._pending is not None

    def __repr__(self) -> str:
        return f"<throttled {self.__name__} wait_ms={self._wait}>"


def throttle(
    func: Callable[..., R],
    wait_ms: float,
    timers: TimerFacility | None = None,
) -> Throttled[R]:
    """Wrap ``func`` so it runs at most once per ``wait_ms`` window.

    Args:
        func: Function to throttle
        wait_ms: Window length in milliseconds
        timers: Timer facility for the trailing call (default: process default)

    Returns:
        A callable that returns the most recent result of ``func``
    """
    require_callable(func, "throttle")
    wait_ms = require_wait(wait_ms, "throttle")
    return Throttled(func, wait_ms, timers or get_default_timers())


__all__ = ["throttle", "Throttled"]
