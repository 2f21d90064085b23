"""underbar.collection - stateless helpers over sequences and mappings."""

from underbar.collection.arrays import (
    difference,
    first,
    flatten,
    intersection,
    invoke,
    last,
    pluck,
    reset_shuffle_rng,
    shuffle,
    sort_by,
    uniq,
    zip_,
)
from underbar.collection.iteration import (
    contains,
    each,
    every,
    filter_,
    index_of,
    map_,
    reduce_,
    reject,
    some,
)
from underbar.collection.objects import defaults, extend

__all__ = [
    # iteration
    "each",
    "map_",
    "reduce_",
    "filter_",
    "reject",
    "every",
    "some",
    "contains",
    "index_of",
    # arrays
    "first",
    "last",
    "uniq",
    "flatten",
    "zip_",
    "intersection",
    "difference",
    "shuffle",
    "reset_shuffle_rng",
    "sort_by",
    "pluck",
    "invoke",
    # objects
    "extend",
    "defaults",
]
