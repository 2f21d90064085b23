"""Result-caching decorators: ``once`` and ``memoize``.

Both wrap a caller-supplied function in a small callable object that owns
its hidden state. The wrappers bind like plain functions, so they can
decorate methods; the state then lives on the class attribute and is shared
by every instance.

Example::

    >>> @once
    ... def connect():
    ...     print("connecting")
    ...     return "conn"
    >>> connect(), connect()
    connecting
    ('conn', 'conn')

    >>> @memoize
    ... def fib(n):
    ...     return n if n < 2 else fib(n - 1) + fib(n - 2)
    >>> fib(80)
    23416728348467685
"""

from __future__ import annotations

import functools
import threading
import types
from collections.abc import Callable, Hashable, Mapping
from typing import Any, Generic, TypeVar

from underbar.core.errors import InvalidArgument
from underbar.core.guards import require_callable
from underbar.core.logging import get_logger

logger = get_logger(__name__)

R = TypeVar("R")


class _BindsLikeFunction:
    """Descriptor support so wrapped functions work as methods."""

    def _adopt(self, func: Callable[..., Any]) -> None:
        self.__name__ = getattr(func, "__name__", type(func).__name__)
        functools.update_wrapper(self, func)

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return types.MethodType(self, instance)


class Once(_BindsLikeFunction, Generic[R]):
    """Callable returned by ``once``.

    Attributes:
        called: Whether the wrapped function has run to completion
    """

    def __init__(self, func: Callable[..., R]) -> None:
        self._adopt(func)
        self._func = func
        self._has_run = False
        self._result: R | None = None
        # Held across the call; reentrant for recursive calls.
        self._lock = threading.RLock()

    def __call__(self, *args: Any, **kwargs: Any) -> R | None:
        with self._lock:
            if not self._has_run:
                result = self._func(*args, **kwargs)
                self._result = result
                self._has_run = True
                logger.debug("once.invoked", function=self.__name__)
            return self._result

    @property
    def called(self) -> bool:
        return self._has_run

    def __repr__(self) -> str:
        return f"<once {self.__name__} called={self._has_run}>"


class Memoized(_BindsLikeFunction, Generic[R]):
    """Callable returned by ``memoize``.

    The cache is keyed by the first positional argument, or by
    ``resolver(*args, **kwargs)`` when a resolver is given. Entries are never
    evicted.
    """

    def __init__(
        self,
        func: Callable[..., R],
        resolver: Callable[..., Hashable] | None = None,
    ) -> None:
        self._adopt(func)
        self._func = func
        self._resolver = resolver
        self._cache: dict[Hashable, R] = {}

    def _key(self, args: tuple, kwargs: dict) -> Hashable:
        if self._resolver is not None:
            return self._resolver(*args, **kwargs)
        if not args:
            raise InvalidArgument(
                f"{self.__name__}() is memoized on its first argument; none was given"
            ).with_context(operation="memoize", argument="args[0]")
        return args[0]

    def __call__(self, *args: Any, **kwargs: Any) -> R:
        key = self._key(args, kwargs)
        try:
            if key in self._cache:
                return self._cache[key]
        except TypeError as exc:
            raise InvalidArgument(
                f"memoize key must be hashable, got {type(key).__name__}", cause=exc
            ).with_context(
                operation="memoize",
                argument="key",
                expected="hashable",
                received=type(key).__name__,
            ) from exc

        logger.debug("memoize.miss", function=self.__name__, cache_size=len(self._cache))
        result = self._func(*args, **kwargs)
        self._cache[key] = result
        return result

    @property
    def cache(self) -> Mapping[Hashable, R]:
        """Read-only view of the cache."""
        return types.MappingProxyType(self._cache)

    def __repr__(self) -> str:
        return f"<memoized {self.__name__} entries={len(self._cache)}>"


def once(func: Callable[..., R]) -> Once[R]:
    """Wrap ``func`` so it runs at most once.

    The first call runs ``func`` with its arguments and stores the result;
    every later call ignores its arguments and returns that result. If the
    first call raises, nothing is stored and the next call tries again.
    """
    require_callable(func, "once")
    return Once(func)


def memoize(
    func: Callable[..., R],
    resolver: Callable[..., Hashable] | None = None,
) -> Memoized[R]:
    """Wrap ``func`` so each distinct key is computed only once.

    Args:
        func: Function to cache; called with every received argument on a miss
        resolver: Optional function computing the cache key from the call's
            arguments. Without it the key is the first positional argument.

    Raises:
        InvalidArgument: (from the wrapper) no key argument, or an unhashable key
    """
    require_callable(func, "memoize")
    if resolver is not None:
        require_callable(resolver, "memoize", "resolver")
    return Memoized(func, resolver)


__all__ = ["once", "memoize", "Once", "Memoized"]
