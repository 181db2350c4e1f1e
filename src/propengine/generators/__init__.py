"""Leaf strategies: numbers, booleans, samples, collections and options.

Python 3.13+. Zero external dependencies.
"""

from .boolean import BoolValueTree, Weighted, booleans, weighted
from .collection import SizeRange, Vec, VecValueTree, vec
from .num import (
    FloatRange,
    FloatValueTree,
    IntRange,
    IntValueTree,
    floats,
    integers,
    integers_inclusive,
)
from .option import optional
from .sample import select

__all__ = [
    "BoolValueTree",
    "FloatRange",
    "FloatValueTree",
    "IntRange",
    "IntValueTree",
    "SizeRange",
    "Vec",
    "VecValueTree",
    "Weighted",
    "booleans",
    "floats",
    "integers",
    "integers_inclusive",
    "optional",
    "select",
    "vec",
    "weighted",
]
