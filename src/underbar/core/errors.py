"""
Structured error types for underbar.

Every operation in underbar validates its inputs and fails with a typed
error instead of handing back an undefined or empty result. The hierarchy is
intentionally shallow: a library of collection helpers has two ways to fail
on its own (bad arguments, a timer that cannot be scheduled); everything else
is an exception raised by the caller's own function and propagates as is.

Manifesto:
    - **Fail loudly:** wrong argument types raise, never return ``None``
    - **Typed hierarchy:** one base class, one subclass per failure domain
    - **Rich context:** errors carry the operation and argument at fault
    - **Stdlib friendly:** ``InvalidArgument`` is also a ``TypeError``

Architecture:
    ::

        ┌──────────────────────────────────────────────────────┐
        │                    UnderbarError                       │
        │          (category, context, cause)                    │
        ├──────────────────────────────────────────────────────┤
        │                                                        │
        │  InvalidArgument            TimerError                 │
        │  (VALIDATION, TypeError)    (TIMER)                    │
        │                                                        │
        └──────────────────────────────────────────────────────┘

Examples:
    >>> error = InvalidArgument("expected a sequence")
    >>> error.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>
    >>> isinstance(error, TypeError)
    True

    >>> error.with_context(operation="filter_", argument="collection")
    InvalidArgument('expected a sequence', category=VALIDATION)
    >>> error.context.operation
    'filter_'

Tags:
    error-handling, exception-hierarchy, error-context, underbar

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories for classification."""

    VALIDATION = "VALIDATION"  # Wrong argument type or value
    TIMER = "TIMER"            # Deferred callback could not be scheduled
    INTERNAL = "INTERNAL"      # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        operation: Public operation that rejected its input (e.g. ``"zip_"``)
        argument: Name of the offending parameter
        expected: Human-readable description of what was expected
        received: Type name of what was actually passed
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    argument: str | None = None
    expected: str | None = None
    received: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "argument", "expected", "received"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class UnderbarError(Exception):
    """
    Base exception for all underbar errors.

    Subclasses set ``default_category`` to classify themselves.

    Examples:
        >>> error = UnderbarError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["error_type"]
        'UnderbarError'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> UnderbarError:
        """
        Add context to this error (fluent API).

        Usage:
            raise InvalidArgument("expected a mapping").with_context(
                operation="extend", argument="target"
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class InvalidArgument(UnderbarError, TypeError):
    """
    An operation received an argument of the wrong type or shape.

    Replaces the "silently undefined" results of the reference library:
    ``filter_`` on a non-sequence, ``zip_`` on a scalar, ``sort_by`` with
    incomparable keys and so on all raise this.
    """

    default_category = ErrorCategory.VALIDATION


class TimerError(UnderbarError):
    """A timer facility could not schedule a deferred callback."""

    default_category = ErrorCategory.TIMER


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error, ``INTERNAL`` for foreign exceptions."""
    if isinstance(error, UnderbarError):
        return error.category
    return ErrorCategory.INTERNAL


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "UnderbarError",
    "InvalidArgument",
    "TimerError",
    "categorize_error",
]
