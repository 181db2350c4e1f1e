"""Boolean strategies. True simplifies to False, once."""

from __future__ import annotations

from typing import TYPE_CHECKING

from propengine.strategy.traits import Strategy, ValueTree

if TYPE_CHECKING:
    from propengine.runner.runner import TestRunner

__all__ = ["BoolValueTree", "Weighted", "booleans", "weighted"]

_UNTOUCHED = 0
_SIMPLIFIED = 1
_FINAL = 2


class BoolValueTree(ValueTree[bool]):
    def __init__(self, value: bool) -> None:
        self.value = value
        self.state = _UNTOUCHED

    def current(self) -> bool:
        return self.value

    def simplify(self) -> bool:
        if self.value and self.state == _UNTOUCHED:
            self.value = False
            self.state = _SIMPLIFIED
            return True
        return False

    def complicate(self) -> bool:
        if self.state == _SIMPLIFIED:
            self.value = True
            self.state = _FINAL
            return True
        return False

    def __repr__(self) -> str:
        return f"BoolValueTree({self.value})"


class Weighted(Strategy[bool]):
    """True with a fixed probability."""

    def __init__(self, probability: float) -> None:
        if not 0.0 <= probability <= 1.0:
            msg = f"probability must be within [0, 1], got {probability}"
            raise ValueError(msg)
        self.probability = probability

    def new_tree(self, runner: TestRunner) -> BoolValueTree:
        return BoolValueTree(runner.rng.gen_bool(self.probability))

    def __repr__(self) -> str:
        return f"Weighted({self.probability})"


def booleans() -> Weighted:
    """True or False with equal probability."""
    return Weighted(0.5)


def weighted(probability: float) -> Weighted:
    """True with the given probability.

    Raises:
        ValueError: If probability is outside [0, 1]
    """
    return Weighted(probability)
