"""Host timer facilities for deferred callbacks.

``delay`` and the trailing edge of ``throttle`` never sleep; they ask a timer
facility to run a callback later. A facility owns two things only: a clock
and a way to schedule a callback. Everything the decorators do with time goes
through that pair, which is what lets tests swap in a virtual clock.

┌──────────────────────────────────────────────────────────────────────────────┐
│  TIMER FACILITY CONTRACT                                                     │
│                                                                              │
│   now() -> float                      monotonic clock, milliseconds          │
│   call_later(delay_ms, cb, *args)     run cb(*args) no earlier than delay_ms │
│        -> TimerHandle                 cancellable, identifies the timer      │
│                                                                              │
│  ┌────────────────────┐  ┌──────────────────────┐  ┌──────────────────────┐  │
│  │ ThreadTimerFacility│  │ AsyncioTimerFacility │  │ ManualTimerFacility  │  │
│  │ (default)          │  │ loop.call_later      │  │ (execution.testing)  │  │
│  │ threading.Timer    │  │ loop.time()          │  │ virtual clock,       │  │
│  │ time.monotonic()   │  │                      │  │ advance(ms)          │  │
│  └────────────────────┘  └──────────────────────┘  └──────────────────────┘  │
│                                                                              │
│  Default facility: built from settings.timer_backend on first use,          │
│  replaceable with set_default_timers().                                      │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import asyncio
import itertools
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from underbar.core.errors import TimerError
from underbar.core.guards import require_callable, require_wait
from underbar.core.logging import get_logger
from underbar.core.settings import get_settings

logger = get_logger(__name__)

_timer_ids = itertools.count(1)

_SCHEDULED = "scheduled"
_FIRED = "fired"
_CANCELLED = "cancelled"


def next_timer_id() -> int:
    """Allocate a process-unique, increasing timer id."""
    return next(_timer_ids)


@dataclass
class TimerHandle:
    """Handle to one scheduled callback.

    A handle moves from *scheduled* to exactly one of *fired* or
    *cancelled*. ``cancel()`` on a handle that already left *scheduled* is a
    no-op returning ``False``.

    Attributes:
        id: Process-unique timer id
        due_at: Facility clock time (ms) at which the callback is due
    """

    id: int
    due_at: float
    _state: str = field(default=_SCHEDULED, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _canceller: Callable[[], Any] | None = field(default=None, init=False, repr=False)

    def cancel(self) -> bool:
        """Cancel the callback if it has not fired yet."""
        with self._lock:
            if self._state != _SCHEDULED:
                return False
            self._state = _CANCELLED
        if self._canceller is not None:
            self._canceller()
        return True

    def claim(self) -> bool:
        """Mark the handle fired; ``False`` if it was cancelled or already fired.

        Facilities call this right before running the callback.
        """
        with self._lock:
            if self._state != _SCHEDULED:
                return False
            self._state = _FIRED
            return True

    def bind_canceller(self, canceller: Callable[[], Any]) -> None:
        """Attach the backend-specific cancellation hook."""
        self._canceller = canceller

    @property
    def cancelled(self) -> bool:
        return self._state == _CANCELLED

    @property
    def fired(self) -> bool:
        return self._state == _FIRED

    @property
    def active(self) -> bool:
        return self._state == _SCHEDULED


@runtime_checkable
class TimerFacility(Protocol):
    """Protocol for deferred-callback services.

    Implementations:
        - ThreadTimerFacility: one daemon ``threading.Timer`` per callback (default)
        - AsyncioTimerFacility: ``loop.call_later`` on an event loop
        - ManualTimerFacility: virtual clock for tests
    """

    name: str

    def now(self) -> float:
        """Current monotonic time in milliseconds."""
        ...

    def call_later(self, delay_ms: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        """Run ``callback(*args)`` no earlier than ``delay_ms`` from now."""
        ...


class ThreadTimerFacility:
    """Timer facility backed by daemon ``threading.Timer`` threads.

    Callbacks run on their timer thread. An exception raised by a callback is
    logged as ``timer.callback_failed``; there is no caller left to receive it.

    Example:
        >>> timers = ThreadTimerFacility()
        >>> handle = timers.call_later(50, print, "later")
        >>> handle.cancel()
        True
    """

    name = "thread"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._timers: dict[int, threading.Timer] = {}

    def now(self) -> float:
        return time.monotonic() * 1000.0

    def call_later(self, delay_ms: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        delay_ms = require_wait(delay_ms, "call_later", "delay_ms")
        require_callable(callback, "call_later", "callback")
        handle = TimerHandle(id=next_timer_id(), due_at=self.now() + delay_ms)

        def fire() -> None:
            with self._lock:
                self._timers.pop(handle.id, None)
            if not handle.claim():
                return
            try:
                callback(*args)
            except Exception:
                logger.exception(
                    "timer.callback_failed", timer_id=handle.id, backend=self.name
                )

        timer = threading.Timer(delay_ms / 1000.0, fire)
        timer.daemon = True
        timer.name = f"underbar-timer-{handle.id}"

        def cancel() -> None:
            timer.cancel()
            with self._lock:
                self._timers.pop(handle.id, None)

        handle.bind_canceller(cancel)
        with self._lock:
            self._timers[handle.id] = timer
        timer.start()
        return handle

    @property
    def pending(self) -> int:
        """Number of timers scheduled but not yet fired or cancelled."""
        with self._lock:
            return len(self._timers)


class AsyncioTimerFacility:
    """Timer facility backed by an asyncio event loop.

    Without an explicit ``loop`` the running loop at scheduling time is used;
    scheduling outside of a running loop raises ``TimerError``.
    """

    name = "asyncio"

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _resolve_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError as exc:
            raise TimerError(
                "AsyncioTimerFacility needs a running event loop", cause=exc
            ).with_context(operation="call_later") from exc

    def now(self) -> float:
        if self._loop is None:
            try:
                return asyncio.get_running_loop().time() * 1000.0
            except RuntimeError:
                return time.monotonic() * 1000.0
        return self._loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        delay_ms = require_wait(delay_ms, "call_later", "delay_ms")
        require_callable(callback, "call_later", "callback")
        loop = self._resolve_loop()
        handle = TimerHandle(id=next_timer_id(), due_at=loop.time() * 1000.0 + delay_ms)

        def fire() -> None:
            if handle.claim():
                callback(*args)

        scheduled = loop.call_later(delay_ms / 1000.0, fire)
        handle.bind_canceller(scheduled.cancel)
        return handle


_default_timers: TimerFacility | None = None
_default_lock = threading.Lock()


def build_timers(backend: str) -> TimerFacility:
    """Create a facility by backend name (``thread`` or ``asyncio``)."""
    if backend == "thread":
        return ThreadTimerFacility()
    if backend == "asyncio":
        return AsyncioTimerFacility()
    raise TimerError(f"unknown timer backend: {backend!r}").with_context(
        operation="build_timers", argument="backend", received=backend
    )


def get_default_timers() -> TimerFacility:
    """Return the process default facility, creating it from settings."""
    global _default_timers
    with _default_lock:
        if _default_timers is None:
            _default_timers = build_timers(get_settings().timer_backend)
        return _default_timers


def set_default_timers(timers: TimerFacility | None) -> TimerFacility | None:
    """Replace the process default facility; returns the previous one.

    Passing ``None`` makes the next ``get_default_timers()`` rebuild it from
    settings.
    """
    global _default_timers
    with _default_lock:
        previous, _default_timers = _default_timers, timers
        return previous


__all__ = [
    "TimerHandle",
    "TimerFacility",
    "ThreadTimerFacility",
    "AsyncioTimerFacility",
    "build_timers",
    "get_default_timers",
    "set_default_timers",
    "next_timer_id",
]
