"""Deferred invocation: ``delay``."""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any

from underbar.core.guards import require_callable, require_wait
from underbar.core.logging import get_logger
from underbar.execution.timers import TimerFacility, TimerHandle, get_default_timers

logger = get_logger(__name__)


def delay(
    func: Callable[..., Any],
    wait_ms: float,
    *args: Any,
    timers: TimerFacility | None = None,
    **kwargs: Any,
) -> TimerHandle:
    """Call ``func(*args, **kwargs)`` once, ``wait_ms`` milliseconds from now.

    Returns immediately with a cancellable ``TimerHandle``. The call runs on
    ``timers`` (default: the process default facility). Its return value is
    discarded; exceptions are handled by the facility.

    Example:
        >>> handle = delay(print, 500, "a", "b")   # prints "a b" after 500ms
        >>> handle.cancel()
        True
    """
    require_callable(func, "delay")
    wait_ms = require_wait(wait_ms, "delay")
    timers = timers or get_default_timers()

    handle = timers.call_later(wait_ms, functools.partial(func, *args, **kwargs))
    logger.debug(
        "delay.scheduled",
        function=getattr(func, "__name__", repr(func)),
        timer_id=handle.id,
        wait_ms=wait_ms,
    )
    return handle


__all__ = ["delay"]
