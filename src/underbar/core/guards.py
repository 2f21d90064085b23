"""Argument guards shared by the public operations.

Each guard returns its argument unchanged when it is acceptable and raises
``InvalidArgument`` (with the operation and argument name filled in)
otherwise.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, MutableMapping, Sequence
from numbers import Real
from typing import Any

from underbar.core.errors import InvalidArgument


def _reject(operation: str, argument: str, expected: str, value: Any) -> InvalidArgument:
    received = type(value).__name__
    return InvalidArgument(
        f"{operation}() expected {expected} for {argument!r}, got {received}"
    ).with_context(
        operation=operation,
        argument=argument,
        expected=expected,
        received=received,
    )


def require_sequence(value: Any, operation: str, argument: str = "sequence") -> Sequence:
    if not isinstance(value, Sequence):
        raise _reject(operation, argument, "a sequence", value)
    return value


def require_collection(
    value: Any, operation: str, argument: str = "collection"
) -> Sequence | Mapping:
    if not isinstance(value, (Sequence, Mapping)):
        raise _reject(operation, argument, "a sequence or mapping", value)
    return value


def require_mapping(value: Any, operation: str, argument: str = "source") -> Mapping:
    if not isinstance(value, Mapping):
        raise _reject(operation, argument, "a mapping", value)
    return value


def require_mutable_mapping(
    value: Any, operation: str, argument: str = "target"
) -> MutableMapping:
    if not isinstance(value, MutableMapping):
        raise _reject(operation, argument, "a mutable mapping", value)
    return value


def require_callable(value: Any, operation: str, argument: str = "func") -> Callable:
    if not callable(value):
        raise _reject(operation, argument, "a callable", value)
    return value


def require_wait(value: Any, operation: str, argument: str = "wait_ms") -> float:
    """Accept a non-negative real number of milliseconds."""
    if isinstance(value, bool) or not isinstance(value, Real) or not value >= 0:
        raise _reject(operation, argument, "a non-negative number of milliseconds", value)
    return float(value)


def require_count(value: Any, operation: str, argument: str = "n") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise _reject(operation, argument, "an int", value)
    return value


def values_of(collection: Sequence | Mapping) -> list:
    """Values of a collection in enumeration order."""
    if isinstance(collection, Mapping):
        return list(collection.values())
    return list(collection)
