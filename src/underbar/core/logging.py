"""
Structured logging for underbar.

The collection helpers are silent; only the function decorators and the
timer facilities log, and only at ``debug`` (plus ``error`` when a deferred
callback raises on a timer thread). This module configures structlog once
and hands out loggers. Importing it applies the settings level (INFO unless
``UNDERBAR_LOG_LEVEL`` says otherwise) when structlog is still unconfigured,
so debug events are opt-in.

Architecture:
    ::

        configure_logging(level="DEBUG", json_format=False)
             │
             ▼
        structlog processor chain:
          1. TimeStamper(fmt="iso")
          2. merge_contextvars
          3. add_log_level
          4. StackInfoRenderer / set_exc_info
          5. _add_library_metadata
          6. JSONRenderer (or ConsoleRenderer for a TTY)

        get_logger(name) binds ``logger=name`` on the lazy proxy, so the
        logger name survives reconfiguration.

Examples:
    >>> from underbar.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=True)
    >>> logger = get_logger(__name__)
    >>> logger.debug("memoize.miss", function="fib", key=10)

Tags:
    logging, structlog, observability, underbar
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog._config import BoundLoggerLazyProxy
from structlog.types import EventDict, Processor, WrappedLogger

from underbar.core.settings import get_settings

_LIBRARY_NAME = "underbar"


def _add_library_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag every event with the emitting library."""
    event_dict.setdefault("library", _LIBRARY_NAME)
    return event_dict


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR); defaults to settings
        json_format: True for JSON, False for console, None for settings/auto
        add_timestamp: Include ISO timestamp in logs
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    if json_format is None:
        json_format = settings.json_logs
    if json_format is None:
        json_format = not sys.stdout.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_library_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``).

    The name is carried on every event as ``logger``.
    """
    if name is None:
        return structlog.get_logger()
    # structlog.get_logger(name, logger=name) clashes with wrap_logger's
    # ``logger`` parameter, so build the same lazy proxy directly.
    return BoundLoggerLazyProxy(
        None, logger_factory_args=(name,), initial_values={"logger": name}
    )


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(caller="report_builder"):
            rows = underbar.sort_by(rows, "name")
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context.keys())


def configure_default_logging() -> bool:
    """Apply settings-level logging unless the application configured structlog.

    Runs on import so the decorators' ``debug`` events stay quiet until a
    caller asks for them. Returns True when a configuration was applied.
    """
    if structlog.is_configured():
        return False
    configure_logging()
    return True


configure_default_logging()


__all__ = [
    "configure_logging",
    "configure_default_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
