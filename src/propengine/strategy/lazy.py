"""LazyValueTree: a tree drawn only when first needed.

Union keeps one of these for every branch below the picked one. Drawing a
branch's tree is deferred until shrinking actually wants to switch to it,
using a runner clone taken when the union value was generated so the draw
stays deterministic.

Python 3.13+.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from propengine.integrity import IntegrityContext, StrategyContractError

from .traits import NEW_TREE_FAILURES, Strategy, ValueTree

if TYPE_CHECKING:
    from propengine.runner.runner import TestRunner

__all__ = ["LazyValueTree"]


class LazyValueTree[V](ValueTree[V]):
    """Tree that is uninitialized, initialized, or failed to initialize.

    Only an initialized tree may be used as a ValueTree; call maybe_init()
    and check is_initialized first.
    """

    def __init__(
        self,
        strategy: Strategy[V] | None,
        runner: TestRunner | None,
        tree: ValueTree[V] | None = None,
    ) -> None:
        self._strategy = strategy
        self._runner = runner
        self._tree = tree
        self._failed = False

    @classmethod
    def pending(cls, strategy: Strategy[V], runner: TestRunner) -> LazyValueTree[V]:
        """Defer drawing from strategy; runner is cloned now."""
        return cls(strategy, runner.partial_clone())

    @classmethod
    def initialized(cls, tree: ValueTree[V]) -> LazyValueTree[V]:
        """Wrap an already drawn tree."""
        return cls(None, None, tree)

    @property
    def is_initialized(self) -> bool:
        return self._tree is not None

    def maybe_init(self) -> None:
        """Draw the tree if that has not been attempted yet.

        A rejected draw leaves the tree permanently failed.
        """
        if self._tree is not None or self._failed:
            return
        assert self._strategy is not None and self._runner is not None
        try:
            self._tree = self._strategy.new_tree(self._runner)
        except NEW_TREE_FAILURES:
            self._failed = True
        self._strategy = None
        self._runner = None

    def _require(self, operation: str) -> ValueTree[V]:
        if self._tree is None:
            msg = "LazyValueTree used before successful initialization"
            raise StrategyContractError(
                msg, IntegrityContext(component="union", operation=operation)
            )
        return self._tree

    def current(self) -> V:
        return self._require("current").current()

    def simplify(self) -> bool:
        return self._require("simplify").simplify()

    def complicate(self) -> bool:
        return self._require("complicate").complicate()

    def clone(self) -> LazyValueTree[V]:
        other = LazyValueTree(
            self._strategy,
            self._runner.clone() if self._runner is not None else None,
            self._tree.clone() if self._tree is not None else None,
        )
        other._failed = self._failed
        return other

    def __repr__(self) -> str:
        if self._tree is not None:
            return f"LazyValueTree({self._tree!r})"
        state = "failed" if self._failed else "pending"
        return f"LazyValueTree(<{state}>)"
