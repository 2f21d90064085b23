"""underbar.execution - function decorators and the timer facilities behind them.

MODULE MAP
──────────
  1. timers.py    ─ TimerFacility protocol, thread/asyncio facilities, TimerHandle
  2. memo.py      ─ once, memoize
  3. delay.py     ─ delay
  4. throttle.py  ─ throttle (leading call + one trailing call)
  5. testing.py   ─ ManualTimerFacility (virtual clock)
"""

from underbar.execution.delay import delay
from underbar.execution.memo import Memoized, Once, memoize, once
from underbar.execution.throttle import Throttled, throttle
from underbar.execution.timers import (
    AsyncioTimerFacility,
    ThreadTimerFacility,
    TimerFacility,
    TimerHandle,
    build_timers,
    get_default_timers,
    set_default_timers,
)

__all__ = [
    "once",
    "memoize",
    "delay",
    "throttle",
    "Once",
    "Memoized",
    "Throttled",
    "TimerFacility",
    "TimerHandle",
    "ThreadTimerFacility",
    "AsyncioTimerFacility",
    "build_timers",
    "get_default_timers",
    "set_default_timers",
]
