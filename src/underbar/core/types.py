"""Shared value types: the ``ABSENT`` padding marker and key selectors.

``sort_by``, ``pluck`` and ``invoke`` accept either a name or a function to
pick a value out of each element. Instead of branching on the runtime type of
that argument at every call site, it is normalized once into a
``KeySelector``:

    KeySelector = ByName(name) | ByFunction(fn)

Example::

    >>> as_selector("age").resolve({"age": 42})
    42
    >>> as_selector(len).resolve("abc")
    3
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Final, Union

from underbar.core.errors import InvalidArgument


class _Absent:
    """Type of the ``ABSENT`` marker."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "ABSENT"


ABSENT: Final = _Absent()
"""Padding for positions an input does not have (see ``zip_``)."""


@dataclass(frozen=True)
class ByName:
    """Select a mapping key, or an attribute for non-mappings."""

    name: str

    def resolve(self, item: Any) -> Any:
        """Return the named value of ``item``, ``None`` when it has none."""
        if isinstance(item, Mapping):
            return item.get(self.name)
        return getattr(item, self.name, None)


@dataclass(frozen=True)
class ByFunction:
    """Select by calling ``fn(item)``."""

    fn: Callable[[Any], Any]

    def resolve(self, item: Any) -> Any:
        return self.fn(item)


KeySelector = Union[ByName, ByFunction]


def as_selector(value: Any, *, operation: str | None = None) -> KeySelector:
    """Normalize a name, a callable or an existing selector into a ``KeySelector``.

    Raises:
        InvalidArgument: ``value`` is neither a string nor callable.
    """
    if isinstance(value, (ByName, ByFunction)):
        return value
    if isinstance(value, str):
        return ByName(value)
    if callable(value):
        return ByFunction(value)
    raise InvalidArgument(
        f"expected a name or a callable, got {type(value).__name__}"
    ).with_context(
        operation=operation,
        argument="selector",
        expected="str | callable",
        received=type(value).__name__,
    )


__all__ = ["ABSENT", "ByName", "ByFunction", "KeySelector", "as_selector"]
