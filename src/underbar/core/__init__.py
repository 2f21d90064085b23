"""
underbar.core - errors, logging, settings and shared value types.

Modules:
    errors    ─ UnderbarError, InvalidArgument, TimerError
    logging   ─ structlog configuration and get_logger
    settings  ─ UnderbarSettings (pydantic-settings, UNDERBAR_ prefix)
    types     ─ ABSENT marker, KeySelector (ByName | ByFunction)
    guards    ─ argument validation helpers
"""

from underbar.core.errors import (
    ErrorCategory,
    ErrorContext,
    InvalidArgument,
    TimerError,
    UnderbarError,
    categorize_error,
)
from underbar.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_default_logging,
    configure_logging,
    get_logger,
    unbind_context,
)
from underbar.core.settings import UnderbarSettings, get_settings, reset_settings
from underbar.core.types import ABSENT, ByFunction, ByName, KeySelector, as_selector

__all__ = [
    # errors
    "ErrorCategory",
    "ErrorContext",
    "UnderbarError",
    "InvalidArgument",
    "TimerError",
    "categorize_error",
    # logging
    "configure_default_logging",
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
    # settings
    "UnderbarSettings",
    "get_settings",
    "reset_settings",
    # types
    "ABSENT",
    "ByName",
    "ByFunction",
    "KeySelector",
    "as_selector",
]
