"""
underbar - collection and function-decoration utilities.

Usage::

    import underbar as _

    _.uniq([1, 2, 1, 3])                     # [1, 2, 3]
    _.sort_by(people, "age")
    fetch = _.throttle(fetch_quotes, 1000)   # at most once per second
"""

__version__ = "0.1.0"

from underbar.collection import *  # noqa: F401,F403
from underbar.collection import __all__ as _collection_all
from underbar.core import (
    ABSENT,
    ByFunction,
    ByName,
    InvalidArgument,
    KeySelector,
    TimerError,
    UnderbarError,
    configure_logging,
    get_settings,
)
from underbar.execution import *  # noqa: F401,F403
from underbar.execution import __all__ as _execution_all

__all__ = [
    *_collection_all,
    *_execution_all,
    "ABSENT",
    "ByName",
    "ByFunction",
    "KeySelector",
    "UnderbarError",
    "InvalidArgument",
    "TimerError",
    "configure_logging",
    "get_settings",
    "__version__",
]
