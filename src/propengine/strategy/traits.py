"""Strategy and ValueTree: the generation/shrinking contract.

A Strategy is an immutable description of how to produce values. Each call
to new_tree() turns the runner's random source into a ValueTree: a mutable
cursor over one generated value that knows how to move toward simpler
values (simplify) and to partially undo that move (complicate).

Contract:
    - current() is pure between shrink calls: it only changes as a direct
      result of simplify() or complicate().
    - simplify() returns True if it moved to a simpler candidate.
    - complicate() undoes part of the last successful simplify(). Once it
      returns False it keeps returning False until a later simplify()
      succeeds.
    - new_tree() draws randomness only through runner.rng and raises
      TestCaseReject when the draw is unusable.

Combinators compose by ownership: each wrapping tree exclusively owns the
tree(s) it wraps.

Python 3.13+.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from propengine.diagnostics import TestAbort, TestCaseReject

if TYPE_CHECKING:
    from propengine.rng import TestRng
    from propengine.runner.runner import TestRunner

__all__ = ["NEW_TREE_FAILURES", "Strategy", "ValueTree"]

# What a combinator may get back when it draws a tree on its own during
# shrinking: a rejected draw, or a runner clone out of local rejects. Either
# way the candidate simply does not exist.
NEW_TREE_FAILURES: tuple[type[Exception], ...] = (TestCaseReject, TestAbort)


class ValueTree[V](ABC):
    """Cursor over one generated value supporting shrink and shrink-undo."""

    __slots__ = ()

    @abstractmethod
    def current(self) -> V:
        """Return the value at the cursor."""

    @abstractmethod
    def simplify(self) -> bool:
        """Move to a simpler candidate; return whether the value changed."""

    @abstractmethod
    def complicate(self) -> bool:
        """Partially undo the last simplify(); return whether the value changed."""

    def clone(self) -> ValueTree[V]:
        """Independent copy of this tree and its shrink state.

        The default shallow copy suits leaf trees whose state is immutable
        scalars. Trees that own other trees override this.
        """
        return copy.copy(self)


class Strategy[V](ABC):
    """Immutable, shareable factory of ValueTrees.

    Combinator methods return new strategies and never modify self.
    """

    __slots__ = ()

    @abstractmethod
    def new_tree(self, runner: TestRunner) -> ValueTree[V]:
        """Draw a new value tree.

        Raises:
            TestCaseReject: If this draw is unusable
        """

    def map[U](self, fn: Callable[[V], U]) -> Strategy[U]:
        """Transform generated values with a pure function.

        Shrinking happens on the source values; fn is re-applied to each
        candidate.
        """
        from .map import Map

        return Map(self, fn)

    def perturb[U](self, fn: Callable[[V, TestRng], U]) -> Strategy[U]:
        """Transform values with access to a per-tree random source.

        fn receives a copy of the same forked TestRng on every call, so the
        result is still a pure function of the shrunk source value.
        """
        from .map import Perturb

        return Perturb(self, fn)

    def filter(self, whence: str, pred: Callable[[V], bool]) -> Strategy[V]:
        """Only generate values for which pred holds.

        Every rejected draw counts as a local reject against the runner's
        budget; whence describes the filter in reject statistics.
        """
        from .filter import Filter

        return Filter(self, whence, pred)

    def filter_map[U](self, whence: str, fn: Callable[[V], U | None]) -> Strategy[U]:
        """Map values through fn, rejecting those for which fn returns None."""
        from .filter import FilterMap

        return FilterMap(self, whence, fn)

    def flat_map[U](self, fn: Callable[[V], Strategy[U]]) -> Strategy[U]:
        """Generate a value, then generate from the strategy fn builds from it.

        Both the outer value and the inner value shrink. Changing the outer
        value regenerates the inner value from scratch.
        """
        from .flatten import Flatten
        from .map import Map

        return Flatten(Map(self, fn))

    def ind_flat_map[U](self, fn: Callable[[V], Strategy[U]]) -> Strategy[U]:
        """Like flat_map(), but only the inner value shrinks."""
        from .flatten import IndFlatten
        from .map import Map

        return IndFlatten(Map(self, fn))

    def ind_flat_map2[U](self, fn: Callable[[V], Strategy[U]]) -> Strategy[tuple[V, U]]:
        """Like ind_flat_map(), also yielding the outer value: (outer, inner)."""
        from .flatten import IndFlattenMap

        return IndFlattenMap(self, fn)

    def no_shrink(self) -> Strategy[V]:
        """Generate the same values but never shrink them."""
        from .fuse import NoShrink

        return NoShrink(self)

    def union(self, other: Strategy[Any]) -> Strategy[Any]:
        """Choose between self and other with equal weight."""
        from .union import Union

        return Union([self, other])

    def __or__(self, other: Strategy[Any]) -> Strategy[Any]:
        return self.union(other)
