"""Strategies, value trees and the generic combinators.

Python 3.13+. Zero external dependencies.
"""

from .filter import Filter, FilterMap, FilterMapValueTree, FilterValueTree
from .flatten import Flatten, FlattenValueTree, IndFlatten, IndFlattenMap
from .fuse import Fuse, NoShrink, NoShrinkValueTree
from .just import Just, JustValueTree, LazyJust, just, lazy_just
from .lazy import LazyValueTree
from .map import Map, MapValueTree, Perturb, PerturbValueTree
from .product import ArrayStrategy, ProductValueTree, TupleStrategy, array, tuples, uniform_array
from .sanity import CheckStrategySanityOptions, check_strategy_sanity
from .traits import NEW_TREE_FAILURES, Strategy, ValueTree
from .union import Union, UnionValueTree, union, weighted_union

__all__ = [
    "NEW_TREE_FAILURES",
    "ArrayStrategy",
    "CheckStrategySanityOptions",
    "Filter",
    "FilterMap",
    "FilterMapValueTree",
    "FilterValueTree",
    "Flatten",
    "FlattenValueTree",
    "Fuse",
    "IndFlatten",
    "IndFlattenMap",
    "Just",
    "JustValueTree",
    "LazyJust",
    "LazyValueTree",
    "Map",
    "MapValueTree",
    "NoShrink",
    "NoShrinkValueTree",
    "Perturb",
    "PerturbValueTree",
    "ProductValueTree",
    "Strategy",
    "TupleStrategy",
    "Union",
    "UnionValueTree",
    "ValueTree",
    "array",
    "check_strategy_sanity",
    "just",
    "lazy_just",
    "tuples",
    "union",
    "uniform_array",
    "weighted_union",
]
