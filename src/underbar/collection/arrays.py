"""Array utilities built on the iteration primitives.

All functions return new lists and leave their inputs untouched.

Features:
    - **Slicing:** ``first``, ``last``
    - **Set-like:** ``uniq``, ``intersection``, ``difference``
    - **Reshaping:** ``flatten``, ``zip_``
    - **Ordering:** ``sort_by``, ``shuffle``
    - **Projection:** ``pluck``, ``invoke``

Examples:
    >>> flatten([1, [2, [3, [4]]], 5])
    [1, 2, 3, 4, 5]
    >>> zip_(["a", "b", "c"], [1, 2])
    [['a', 1], ['b', 2], ['c', ABSENT]]
    >>> intersection([1, 2, 3], [2, 3, 4])
    [2, 3]
    >>> sort_by([{"n": 3}, {"n": 1}], "n")
    [{'n': 1}, {'n': 3}]

Tags:
    collections, arrays, underbar
"""

from __future__ import annotations

import random
import threading
from collections.abc import Callable, Hashable, Mapping, Sequence
from typing import Any, TypeVar

from underbar.collection.iteration import contains, every, map_, reduce_
from underbar.core.errors import InvalidArgument
from underbar.core.guards import (
    require_collection,
    require_count,
    require_sequence,
    values_of,
)
from underbar.core.settings import get_settings
from underbar.core.types import ABSENT, ByFunction, ByName, KeySelector, as_selector

T = TypeVar("T")

_NESTED_TYPES = (list, tuple)

_rng: random.Random | None = None
_rng_lock = threading.Lock()


# ------------------------------------------------------------------ #
# Slicing
# ------------------------------------------------------------------ #


def first(sequence: Sequence[T], n: int | None = None) -> T | list[T] | None:
    """First element of ``sequence``, or a list of its first ``n`` elements.

    With ``n`` omitted an empty sequence yields ``None``. ``n`` follows
    slice semantics, so a negative ``n`` drops that many trailing elements.
    """
    require_sequence(sequence, "first")
    if n is None:
        return sequence[0] if len(sequence) else None
    require_count(n, "first")
    return list(sequence[:n])


def last(sequence: Sequence[T], n: int | None = None) -> T | list[T] | None:
    """Last element of ``sequence``, or a list of its last ``n`` elements.

    ``n <= 0`` yields an empty list.
    """
    require_sequence(sequence, "last")
    if n is None:
        return sequence[-1] if len(sequence) else None
    require_count(n, "last")
    if n <= 0:
        return []
    return list(sequence[-n:])


# ------------------------------------------------------------------ #
# Set-like operations
# ------------------------------------------------------------------ #


def uniq(sequence: Sequence[T]) -> list[T]:
    """Duplicate-free copy of ``sequence`` keeping first occurrences in order.

    Equality is ``==``; unhashable elements are compared linearly.
    """
    require_sequence(sequence, "uniq")
    seen: set = set()
    unhashable_seen: list = []
    result: list[T] = []
    for value in sequence:
        if isinstance(value, Hashable):
            try:
                if value in seen:
                    continue
                seen.add(value)
            except TypeError:
                # Hashable by type, unhashable by content (tuple holding a list)
                if contains(unhashable_seen, value):
                    continue
                unhashable_seen.append(value)
        else:
            if contains(unhashable_seen, value):
                continue
            unhashable_seen.append(value)
        result.append(value)
    return result


def intersection(*sequences: Sequence) -> list:
    """Values present in every sequence, deduplicated and sorted ascending."""
    for index, sequence in enumerate(sequences):
        require_sequence(sequence, "intersection", f"sequences[{index}]")
    if not sequences:
        return []

    shortest = reduce_(
        sequences,
        lambda best, candidate: candidate if len(candidate) < len(best) else best,
        sequences[0],
    )
    shared = [
        value
        for value in uniq(shortest)
        if every(sequences, lambda other, value=value: contains(other, value))
    ]
    try:
        return sorted(shared)
    except TypeError as exc:
        raise InvalidArgument(
            "intersection() found values that cannot be ordered", cause=exc
        ).with_context(operation="intersection") from exc


def difference(sequence: Sequence[T], *others: Sequence) -> list[T]:
    """Values of ``sequence`` that appear in none of ``others``.

    Order and multiplicity of ``sequence`` are kept.
    """
    require_sequence(sequence, "difference")
    for index, other in enumerate(others):
        require_sequence(other, "difference", f"others[{index}]")
    return [
        value
        for value in sequence
        if every(others, lambda other, value=value: not contains(other, value))
    ]


# ------------------------------------------------------------------ #
# Reshaping
# ------------------------------------------------------------------ #


def flatten(nested: Any) -> list:
    """Flatten arbitrarily nested lists/tuples depth-first.

    Strings and every other non list/tuple value are leaves. A bare leaf
    flattens to ``[leaf]``. Traversal uses an explicit stack, so nesting
    depth is not bounded by the recursion limit.
    """
    if not isinstance(nested, _NESTED_TYPES):
        return [nested]

    result: list = []
    stack = [iter(nested)]
    while stack:
        for value in stack[-1]:
            if isinstance(value, _NESTED_TYPES):
                stack.append(iter(value))
                break
            result.append(value)
        else:
            stack.pop()
    return result


def zip_(*sequences: Sequence) -> list[list]:
    """Group elements by position, padding short inputs with ``ABSENT``."""
    for index, sequence in enumerate(sequences):
        require_sequence(sequence, "zip_", f"sequences[{index}]")
    longest = reduce_(sequences, lambda length, seq: max(length, len(seq)), 0)
    return [
        [seq[position] if position < len(seq) else ABSENT for seq in sequences]
        for position in range(longest)
    ]


# ------------------------------------------------------------------ #
# Ordering
# ------------------------------------------------------------------ #


def _default_rng() -> random.Random:
    global _rng
    with _rng_lock:
        if _rng is None:
            _rng = random.Random(get_settings().shuffle_seed)
        return _rng


def reset_shuffle_rng() -> None:
    """Forget the process-wide shuffle generator (re-seeded from settings)."""
    global _rng
    with _rng_lock:
        _rng = None


def shuffle(sequence: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Uniformly random permutation of ``sequence`` as a new list.

    Fisher-Yates over a copy; ``rng`` defaults to a process-wide generator
    seeded from ``UNDERBAR_SHUFFLE_SEED`` when it is set.
    """
    require_sequence(sequence, "shuffle")
    rng = rng or _default_rng()
    shuffled = list(sequence)
    for index in range(len(shuffled) - 1, 0, -1):
        swap = rng.randrange(index + 1)
        shuffled[index], shuffled[swap] = shuffled[swap], shuffled[index]
    return shuffled


def sort_by(
    collection: Sequence[T] | Mapping[Any, T],
    selector: str | Callable[[T], Any] | KeySelector,
) -> list[T]:
    """Values of ``collection`` sorted stably ascending by ``selector``.

    ``selector`` is a key/attribute name or a function of the element.
    Elements whose key is ``None`` (missing) sort last.
    """
    require_collection(collection, "sort_by")
    key = as_selector(selector, operation="sort_by")

    def sort_key(value: T) -> tuple[bool, Any]:
        resolved = key.resolve(value)
        return (resolved is None, 0 if resolved is None else resolved)

    try:
        return sorted(values_of(collection), key=sort_key)
    except TypeError as exc:
        raise InvalidArgument(
            "sort_by() produced keys that cannot be ordered", cause=exc
        ).with_context(operation="sort_by") from exc


# ------------------------------------------------------------------ #
# Projection
# ------------------------------------------------------------------ #


def pluck(sequence: Sequence, name: str) -> list:
    """The ``name`` key (or attribute) of every element, ``None`` where missing."""
    require_sequence(sequence, "pluck")
    if not isinstance(name, str):
        raise InvalidArgument(
            f"pluck() expected a str name, got {type(name).__name__}"
        ).with_context(operation="pluck", argument="name")
    return map_(sequence, ByName(name).resolve)


def invoke(
    sequence: Sequence,
    method: str | Callable[..., Any] | KeySelector,
    *args: Any,
) -> list:
    """Call a method on every element and collect the results.

    A name calls ``element.<name>(*args)``; a function is called as
    ``method(element, *args)``, the element taking the place of ``self``.
    """
    require_sequence(sequence, "invoke")
    selector = as_selector(method, operation="invoke")

    if isinstance(selector, ByFunction):
        return map_(sequence, lambda element: selector.fn(element, *args))

    def call_named(element: Any) -> Any:
        bound = getattr(element, selector.name, None)
        if not callable(bound):
            raise InvalidArgument(
                f"{type(element).__name__} has no method {selector.name!r}"
            ).with_context(operation="invoke", argument="method", received=type(element).__name__)
        return bound(*args)

    return map_(sequence, call_named)


__all__ = [
    "first",
    "last",
    "uniq",
    "intersection",
    "difference",
    "flatten",
    "zip_",
    "shuffle",
    "reset_shuffle_rng",
    "sort_by",
    "pluck",
    "invoke",
]
