"""Shallow merge helpers for mappings.

Unlike the rest of ``underbar.collection`` these mutate their first argument
and return it, so they can be used both as statements and in expressions.

Example::

    >>> options = {"retries": 1}
    >>> defaults(options, {"retries": 3, "timeout": 30})
    {'retries': 1, 'timeout': 30}
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any, TypeVar

from underbar.collection.iteration import each
from underbar.core.guards import require_mapping, require_mutable_mapping

M = TypeVar("M", bound=MutableMapping)


def _check_sources(operation: str, sources: tuple[Mapping, ...]) -> None:
    for index, source in enumerate(sources):
        require_mapping(source, operation, f"sources[{index}]")


def extend(target: M, *sources: Mapping[Any, Any]) -> M:
    """Copy every key of every source into ``target``; later sources win."""
    require_mutable_mapping(target, "extend")
    _check_sources("extend", sources)

    def assign(value: Any, key: Any, _source: Mapping) -> None:
        target[key] = value

    for source in sources:
        each(source, assign)
    return target


def defaults(target: M, *sources: Mapping[Any, Any]) -> M:
    """Fill in keys missing from ``target``; existing keys are never overwritten."""
    require_mutable_mapping(target, "defaults")
    _check_sources("defaults", sources)

    def fill(value: Any, key: Any, _source: Mapping) -> None:
        if key not in target:
            target[key] = value

    for source in sources:
        each(source, fill)
    return target


__all__ = ["extend", "defaults"]
