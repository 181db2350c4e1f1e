"""Union: weighted choice between strategies.

The picked branch is drawn immediately. Every branch listed before it is
kept as a pending LazyValueTree, since earlier branches are considered
simpler: shrinking first tries to switch to the earliest branch that can
still be drawn, and only then shrinks within the active branch.

Invariant: simplify() never moves the active branch to a higher index.
complicate() undoes a branch switch by returning to the previous branch
and raising min_pick above the branch that was tried, so a rejected switch
is never attempted again.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from .lazy import LazyValueTree
from .traits import Strategy, ValueTree

if TYPE_CHECKING:
    from propengine.runner.runner import TestRunner

__all__ = ["Union", "UnionValueTree", "union", "weighted_union"]


class UnionValueTree[V](ValueTree[V]):
    """Tree over the branches up to and including the picked one.

    Attributes:
        options: Lazy trees for branches 0..pick (the picked one initialized)
        pick: Index of the active branch
        min_pick: Lowest branch index simplify() may still switch to
        prev_pick: Branch active before the last switch, if the last
            simplify() switched branches
    """

    def __init__(self, options: list[LazyValueTree[V]], pick: int) -> None:
        self.options = options
        self.pick = pick
        self.min_pick = 0
        self.prev_pick: int | None = None

    def current(self) -> V:
        return self.options[self.pick].current()

    def simplify(self) -> bool:
        original = self.pick
        for index in range(self.min_pick, original):
            option = self.options[index]
            option.maybe_init()
            if option.is_initialized:
                self.pick = index
                self.prev_pick = original
                return True

        if self.options[original].simplify():
            self.prev_pick = None
            return True
        return False

    def complicate(self) -> bool:
        if self.prev_pick is not None:
            self.min_pick = self.pick + 1
            self.pick = self.prev_pick
            self.prev_pick = None
            return True
        return self.options[self.pick].complicate()

    def clone(self) -> UnionValueTree[V]:
        other = UnionValueTree([option.clone() for option in self.options], self.pick)
        other.min_pick = self.min_pick
        other.prev_pick = self.prev_pick
        return other

    def __repr__(self) -> str:
        return (
            f"UnionValueTree(pick={self.pick}, min_pick={self.min_pick}, "
            f"prev_pick={self.prev_pick}, active={self.options[self.pick]!r})"
        )


class Union[V](Strategy[V]):
    """Weighted choice between strategies producing the same kind of value.

    Attributes:
        options: (weight, strategy) pairs; earlier entries are simpler
    """

    def __init__(self, options: Iterable[Strategy[V] | tuple[int, Strategy[V]]]) -> None:
        """Initialize Union.

        Args:
            options: Strategies (weight 1) or (weight, strategy) pairs

        Raises:
            ValueError: If there are no options, a weight is negative, or
                every weight is zero
        """
        pairs: list[tuple[int, Strategy[V]]] = []
        for option in options:
            if isinstance(option, Strategy):
                pairs.append((1, option))
            else:
                weight, strategy = option
                if weight < 0:
                    msg = f"Union weight must be non-negative, got {weight}"
                    raise ValueError(msg)
                pairs.append((weight, strategy))
        if not pairs:
            msg = "Union requires at least one option"
            raise ValueError(msg)
        self.options = tuple(pairs)
        self.total_weight = sum(weight for weight, _ in pairs)
        if self.total_weight == 0:
            msg = "Union requires a positive total weight"
            raise ValueError(msg)

    def _pick(self, runner: TestRunner) -> int:
        point = runner.rng.below(self.total_weight)
        for index, (weight, _) in enumerate(self.options):
            if point < weight:
                return index
            point -= weight
        # below() guarantees point < total_weight
        raise AssertionError(point)  # pragma: no cover

    def new_tree(self, runner: TestRunner) -> UnionValueTree[V]:
        pick = self._pick(runner)
        options: list[LazyValueTree[V]] = [
            LazyValueTree.pending(strategy, runner) for _, strategy in self.options[:pick]
        ]
        options.append(LazyValueTree.initialized(self.options[pick][1].new_tree(runner)))
        return UnionValueTree(options, pick)

    def or_(self, other: Strategy[V], weight: int = 1) -> Union[V]:
        """New union with one more option appended."""
        return Union([*self.options, (weight, other)])

    def __or__(self, other: Strategy[Any]) -> Union[Any]:
        return self.or_(other)

    def __repr__(self) -> str:
        return f"Union({list(self.options)!r})"


def union[V](*strategies: Strategy[V]) -> Union[V]:
    """Choose uniformly between strategies; earlier ones are simpler."""
    return Union(strategies)


def weighted_union[V](*options: tuple[int, Strategy[V]]) -> Union[V]:
    """Choose between strategies in proportion to their weights.

    Example:
        weighted_union((9, just(0)), (1, integers(1, 100))) yields 0 about
        90% of the time.
    """
    return Union(options)
