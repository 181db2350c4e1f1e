"""Filter and FilterMap: rejection-sampling combinators.

Generation draws source trees until one is acceptable, recording every
unacceptable draw as a local reject on the runner (which aborts the run
once the local budget is spent).

Shrinking keeps the invariant that the current value is acceptable: after
delegating a shrink step to the source, the tree complicates the source
until the predicate holds again. Since the source only ever complicates
back toward values that were already accepted, running out of
complications means the source tree broke its contract; that is reported
as StrategyContractError, never as a test failure.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from propengine.diagnostics import Reason
from propengine.integrity import IntegrityContext, StrategyContractError

from .traits import Strategy, ValueTree

if TYPE_CHECKING:
    from propengine.runner.runner import TestRunner

__all__ = ["Filter", "FilterMap", "FilterMapValueTree", "FilterValueTree"]


def _contract_error(component: str, tree: ValueTree[object]) -> StrategyContractError:
    msg = f"Unable to complicate {component} strategy back into acceptable value"
    return StrategyContractError(
        msg,
        IntegrityContext(component=component, operation="complicate", detail=repr(tree)),
    )


class FilterValueTree[V](ValueTree[V]):
    """Tree whose current value always satisfies pred."""

    def __init__(self, source: ValueTree[V], pred: Callable[[V], bool]) -> None:
        self.source = source
        self.pred = pred

    def _ensure_acceptable(self) -> None:
        while not self.pred(self.source.current()):
            if not self.source.complicate():
                raise _contract_error("filter", self.source)

    def current(self) -> V:
        return self.source.current()

    def simplify(self) -> bool:
        if self.source.simplify():
            self._ensure_acceptable()
            return True
        return False

    def complicate(self) -> bool:
        if self.source.complicate():
            self._ensure_acceptable()
            return True
        return False

    def clone(self) -> FilterValueTree[V]:
        return FilterValueTree(self.source.clone(), self.pred)

    def __repr__(self) -> str:
        return f"FilterValueTree({self.source!r})"


class Filter[V](Strategy[V]):
    """See Strategy.filter()."""

    def __init__(
        self, source: Strategy[V], whence: str | Reason, pred: Callable[[V], bool]
    ) -> None:
        self.source = source
        self.whence = whence if isinstance(whence, Reason) else Reason(whence)
        self.pred = pred

    def new_tree(self, runner: TestRunner) -> FilterValueTree[V]:
        while True:
            tree = self.source.new_tree(runner)
            if self.pred(tree.current()):
                return FilterValueTree(tree, self.pred)
            runner.reject_local(self.whence)

    def __repr__(self) -> str:
        return f"Filter({self.source!r}, whence={self.whence.message!r})"


class FilterMapValueTree[V, U](ValueTree[U]):
    """Tree caching fn(source.current()) for the last acceptable source value."""

    def __init__(self, source: ValueTree[V], fn: Callable[[V], U | None], current: U) -> None:
        self.source = source
        self.fn = fn
        self._current = current

    def _ensure_acceptable(self) -> None:
        while True:
            mapped = self.fn(self.source.current())
            if mapped is not None:
                self._current = mapped
                return
            if not self.source.complicate():
                raise _contract_error("filter_map", self.source)

    def current(self) -> U:
        return self._current

    def simplify(self) -> bool:
        if self.source.simplify():
            self._ensure_acceptable()
            return True
        return False

    def complicate(self) -> bool:
        if self.source.complicate():
            self._ensure_acceptable()
            return True
        return False

    def clone(self) -> FilterMapValueTree[V, U]:
        return FilterMapValueTree(self.source.clone(), self.fn, self._current)


class FilterMap[V, U](Strategy[U]):
    """See Strategy.filter_map()."""

    def __init__(
        self, source: Strategy[V], whence: str | Reason, fn: Callable[[V], U | None]
    ) -> None:
        self.source = source
        self.whence = whence if isinstance(whence, Reason) else Reason(whence)
        self.fn = fn

    def new_tree(self, runner: TestRunner) -> FilterMapValueTree[V, U]:
        while True:
            tree = self.source.new_tree(runner)
            mapped = self.fn(tree.current())
            if mapped is not None:
                return FilterMapValueTree(tree, self.fn, mapped)
            runner.reject_local(self.whence)

    def __repr__(self) -> str:
        return f"FilterMap({self.source!r}, whence={self.whence.message!r})"
