"""Fixed-size products: tuples and arrays of independent strategies.

Every slot owns its own tree. Shrinking works through the slots left to
right: the shrinker position only moves forward once a slot can no longer
simplify, and complicate() only ever retries the slot touched by the last
simplify(), so one slot is minimised at a time.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING, Any

from .traits import Strategy, ValueTree

if TYPE_CHECKING:
    from propengine.runner.runner import TestRunner

__all__ = [
    "ArrayStrategy",
    "ProductValueTree",
    "TupleStrategy",
    "array",
    "tuples",
    "uniform_array",
]


class ProductValueTree[V](ValueTree[V]):
    """Tree over a fixed sequence of slot trees.

    Attributes:
        trees: One tree per slot
        build: Assembles the slot values into the product value
        shrinker: Index of the slot currently being simplified
        prev_shrinker: Slot touched by the last successful simplify()
    """

    def __init__(
        self, trees: list[ValueTree[Any]], build: Callable[[Iterable[Any]], V]
    ) -> None:
        self.trees = trees
        self.build = build
        self.shrinker = 0
        self.prev_shrinker: int | None = None

    def current(self) -> V:
        return self.build(tree.current() for tree in self.trees)

    def simplify(self) -> bool:
        while self.shrinker < len(self.trees):
            if self.trees[self.shrinker].simplify():
                self.prev_shrinker = self.shrinker
                return True
            self.shrinker += 1
        return False

    def complicate(self) -> bool:
        if self.prev_shrinker is None:
            return False
        if self.trees[self.prev_shrinker].complicate():
            # The same slot may complicate again; keep prev_shrinker.
            self.shrinker = self.prev_shrinker
            return True
        self.prev_shrinker = None
        return False

    def clone(self) -> ProductValueTree[V]:
        other = ProductValueTree([tree.clone() for tree in self.trees], self.build)
        other.shrinker = self.shrinker
        other.prev_shrinker = self.prev_shrinker
        return other

    def __repr__(self) -> str:
        return (
            f"ProductValueTree({self.trees!r}, shrinker={self.shrinker}, "
            f"prev_shrinker={self.prev_shrinker})"
        )


class _Product[V](Strategy[V]):
    _build: Callable[[Iterable[Any]], V]

    def __init__(self, strategies: Sequence[Strategy[Any]]) -> None:
        self.strategies = tuple(strategies)

    def new_tree(self, runner: TestRunner) -> ProductValueTree[V]:
        return ProductValueTree(
            [strategy.new_tree(runner) for strategy in self.strategies], type(self)._build
        )


class TupleStrategy(_Product[tuple[Any, ...]]):
    """Strategy producing a tuple with one element per strategy."""

    _build = tuple

    def __repr__(self) -> str:
        return f"TupleStrategy({list(self.strategies)!r})"


class ArrayStrategy(_Product[list[Any]]):
    """Strategy producing a fixed-length list with one element per strategy."""

    _build = list

    def __repr__(self) -> str:
        return f"ArrayStrategy({list(self.strategies)!r})"


def tuples(*strategies: Strategy[Any]) -> TupleStrategy:
    """Tuple of one value drawn from each strategy, in order.

    Example:
        tuples(just(1), just("a")) always generates (1, "a").
    """
    return TupleStrategy(strategies)


def array(*strategies: Strategy[Any]) -> ArrayStrategy:
    """List of one value drawn from each strategy, in order."""
    return ArrayStrategy(strategies)


def uniform_array[V](strategy: Strategy[V], size: int) -> ArrayStrategy:
    """List of exactly `size` independent draws from one strategy.

    Raises:
        ValueError: If size is negative
    """
    if size < 0:
        msg = f"size must be non-negative, got {size}"
        raise ValueError(msg)
    return ArrayStrategy([strategy] * size)
