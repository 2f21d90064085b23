"""Iteration primitives over sequences and mappings.

Everything else in ``underbar.collection`` is built on these. A *collection*
is either a ``Sequence`` (keys are integer positions) or a ``Mapping`` (keys
are the mapping's keys, in its own iteration order). Other iterables are
rejected with ``InvalidArgument`` rather than being half-supported.

Example::

    >>> reduce_([1, 2, 3], lambda total, n: total + n)
    6
    >>> some({"a": 0, "b": 3}, lambda v: v > 2)
    True
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

from underbar.core.guards import (
    require_callable,
    require_collection,
    require_sequence,
)

T = TypeVar("T")
R = TypeVar("R")

Collection = Sequence | Mapping


def each(collection: Collection, fn: Callable[[Any, Any, Collection], Any]) -> None:
    """Call ``fn(value, key, collection)`` for every entry of ``collection``."""
    require_collection(collection, "each")
    require_callable(fn, "each", "fn")
    if isinstance(collection, Mapping):
        for key in list(collection):
            fn(collection[key], key, collection)
    else:
        for index in range(len(collection)):
            fn(collection[index], index, collection)


def map_(collection: Collection, fn: Callable[[Any], R]) -> list[R]:
    """Return ``[fn(value) ...]`` over the values of ``collection``."""
    require_callable(fn, "map_", "fn")
    results: list[R] = []
    each(collection, lambda value, _key, _coll: results.append(fn(value)))
    return results


def reduce_(
    collection: Collection,
    fn: Callable[[Any, Any], Any],
    initial: Any = 0,
) -> Any:
    """Fold the values of ``collection`` left to right into one value.

    ``fn(accumulator, value)`` must return the next accumulator. The seed
    defaults to ``0``.
    """
    require_callable(fn, "reduce_", "fn")
    accumulator = initial

    def step(value: Any, _key: Any, _coll: Collection) -> None:
        nonlocal accumulator
        accumulator = fn(accumulator, value)

    each(collection, step)
    return accumulator


def filter_(sequence: Sequence[T], predicate: Callable[[T], Any]) -> list[T]:
    """Return the elements of ``sequence`` for which ``predicate`` is truthy."""
    require_sequence(sequence, "filter_")
    require_callable(predicate, "filter_", "predicate")
    kept: list[T] = []

    def keep(value: T, _key: int, _coll: Sequence[T]) -> None:
        if predicate(value):
            kept.append(value)

    each(sequence, keep)
    return kept


def reject(sequence: Sequence[T], predicate: Callable[[T], Any]) -> list[T]:
    """Inverse of ``filter_``: the elements that fail ``predicate``."""
    require_sequence(sequence, "reject")
    require_callable(predicate, "reject", "predicate")
    return filter_(sequence, lambda value: not predicate(value))


def every(collection: Collection, predicate: Callable[[Any], Any] | None = None) -> bool:
    """True when every value passes ``predicate`` (truthiness when omitted)."""
    require_collection(collection, "every")
    if predicate is None:
        predicate = bool
    require_callable(predicate, "every", "predicate")
    for value in _values(collection):
        if not predicate(value):
            return False
    return True


def some(collection: Collection, predicate: Callable[[Any], Any] | None = None) -> bool:
    """True when at least one value passes ``predicate`` (truthiness when omitted)."""
    if predicate is None:
        predicate = bool
    require_callable(predicate, "some", "predicate")
    return not every(collection, lambda value: not predicate(value))


def contains(collection: Collection, target: Any) -> bool:
    """True when some value of ``collection`` equals ``target``."""
    return some(collection, lambda value: value == target)


def index_of(sequence: Sequence, target: Any) -> int:
    """Position of the first element equal to ``target``, or -1."""
    require_sequence(sequence, "index_of")
    for index, value in enumerate(sequence):
        if value == target:
            return index
    return -1


def _values(collection: Collection):
    if isinstance(collection, Mapping):
        return collection.values()
    return collection


__all__ = [
    "each",
    "map_",
    "reduce_",
    "filter_",
    "reject",
    "every",
    "some",
    "contains",
    "index_of",
]
