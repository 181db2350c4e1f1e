"""Flatten: strategies that produce strategies.

A FlattenValueTree holds two trees: the meta tree, whose current() is itself
a Strategy, and the inner tree drawn from that strategy. Shrinking has two
axes:

    meta axis   simplify the meta value, then draw a brand-new inner tree
                (a different meta value means a structurally different
                inner strategy, so the old inner tree is meaningless)
    inner axis  simplify the inner tree in place

simplify() tries the meta axis first and falls back to the inner axis.
complicate() mirrors it: regenerate from the current meta value while the
per-tree retry allowance and the run-wide regeneration budget last, then
complicate the meta value and regenerate, then complicate the inner tree,
and finally restore the inner tree remembered before the last simplify().

The run-wide budget (Config.max_flat_map_regens) is owned by the TestRunner
and shared by every runner clone, so deeply nested flat_map() chains cannot
regenerate without bound.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from .fuse import Fuse
from .product import ProductValueTree
from .traits import NEW_TREE_FAILURES, Strategy, ValueTree

if TYPE_CHECKING:
    from propengine.runner.runner import TestRunner

__all__ = ["Flatten", "FlattenValueTree", "IndFlatten", "IndFlattenMap"]


class FlattenValueTree[V](ValueTree[V]):
    """Tree over a meta tree of strategies and the inner tree drawn from it.

    Attributes:
        meta: Fused tree whose value is the inner strategy
        inner: Fused tree currently providing the value
        last_complication: Inner tree to restore as the last complicate() resort
        runner: Private runner clone used for regeneration
        complicate_regen_remaining: Regenerations still allowed for the current meta value
    """

    def __init__(self, runner: TestRunner, meta: ValueTree[Strategy[V]]) -> None:
        """Draw the first inner tree from meta's current strategy.

        Raises:
            TestCaseReject: If the inner strategy rejects the draw
        """
        inner = meta.current().new_tree(runner)
        self.meta = Fuse(meta)
        self.inner = Fuse(inner)
        self.last_complication: Fuse[V] | None = None
        self.runner = runner.partial_clone()
        self.complicate_regen_remaining = 0

    def _regenerate(self) -> ValueTree[V] | None:
        try:
            return self.meta.current().new_tree(self.runner)
        except NEW_TREE_FAILURES:
            return None

    def current(self) -> V:
        return self.inner.current()

    def simplify(self) -> bool:
        self.inner.disallow_complicate()

        if self.meta.simplify():
            fresh = self._regenerate()
            if fresh is not None:
                self.last_complication = self.inner
                self.inner = Fuse(fresh)
                self.complicate_regen_remaining = self.runner.config.cases
                return True
            self.meta.disallow_simplify()

        self.complicate_regen_remaining = 0
        previous = self.inner.clone()
        previous.disallow_simplify()

        if self.inner.simplify():
            self.last_complication = previous
            return True
        return False

    def complicate(self) -> bool:
        if self.complicate_regen_remaining > 0:
            if self.runner.flat_map_regen():
                self.complicate_regen_remaining -= 1
                fresh = self._regenerate()
                if fresh is not None:
                    self.inner = Fuse(fresh)
                    return True
            else:
                self.complicate_regen_remaining = 0

        if self.meta.complicate():
            fresh = self._regenerate()
            if fresh is not None:
                self.inner = Fuse(fresh)
                self.complicate_regen_remaining = self.runner.config.cases
                return True

        if self.inner.complicate():
            return True

        if self.last_complication is not None:
            self.inner = self.last_complication
            self.last_complication = None
            return True
        return False

    def clone(self) -> FlattenValueTree[V]:
        other = FlattenValueTree.__new__(FlattenValueTree)
        other.meta = self.meta.clone()
        other.inner = self.inner.clone()
        other.last_complication = (
            self.last_complication.clone() if self.last_complication is not None else None
        )
        other.runner = self.runner.clone()
        other.complicate_regen_remaining = self.complicate_regen_remaining
        return other

    def __repr__(self) -> str:
        return (
            f"FlattenValueTree(meta={self.meta!r}, inner={self.inner!r}, "
            f"last_complication={self.last_complication!r}, "
            f"complicate_regen_remaining={self.complicate_regen_remaining})"
        )


class Flatten[V](Strategy[V]):
    """Flatten a strategy of strategies. See Strategy.flat_map()."""

    def __init__(self, source: Strategy[Strategy[V]]) -> None:
        self.source = source

    def new_tree(self, runner: TestRunner) -> FlattenValueTree[V]:
        meta = self.source.new_tree(runner)
        return FlattenValueTree(runner, meta)

    def __repr__(self) -> str:
        return f"Flatten({self.source!r})"


class IndFlatten[V](Strategy[V]):
    """Flatten without shrinking the outer strategy. See Strategy.ind_flat_map()."""

    def __init__(self, source: Strategy[Strategy[V]]) -> None:
        self.source = source

    def new_tree(self, runner: TestRunner) -> ValueTree[V]:
        outer = self.source.new_tree(runner)
        return outer.current().new_tree(runner)

    def __repr__(self) -> str:
        return f"IndFlatten({self.source!r})"


class IndFlattenMap[V, U](Strategy[tuple[V, U]]):
    """See Strategy.ind_flat_map2()."""

    def __init__(self, source: Strategy[V], fn: Callable[[V], Strategy[U]]) -> None:
        self.source = source
        self.fn = fn

    def new_tree(self, runner: TestRunner) -> ProductValueTree[tuple[V, U]]:
        left = self.source.new_tree(runner)
        right = self.fn(left.current()).new_tree(runner)
        return ProductValueTree([left, right], tuple)

    def __repr__(self) -> str:
        return f"IndFlattenMap({self.source!r}, <function>)"
