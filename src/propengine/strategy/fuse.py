"""Fuse and NoShrink: trees with switchable shrink axes.

Fuse lets a parent combinator pin one shrink direction of a child tree.
Flatten uses it to stop an inner tree from complicating back past a point
the parent has already committed to.

Python 3.13+.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .traits import Strategy, ValueTree

if TYPE_CHECKING:
    from propengine.runner.runner import TestRunner

__all__ = ["Fuse", "NoShrink", "NoShrinkValueTree"]


class Fuse[V](ValueTree[V]):
    """Wrapper whose simplify/complicate can each be switched off.

    An axis that returns False stays off until the opposite axis moves the
    value: a successful simplify() re-enables complicate() and a successful
    complicate() re-enables simplify().
    """

    def __init__(self, inner: ValueTree[V]) -> None:
        self.inner = inner
        self.may_simplify = True
        self.may_complicate = True

    def disallow_simplify(self) -> None:
        """Make simplify() return False until a complicate() succeeds."""
        self.may_simplify = False

    def disallow_complicate(self) -> None:
        """Make complicate() return False until a simplify() succeeds."""
        self.may_complicate = False

    def current(self) -> V:
        return self.inner.current()

    def simplify(self) -> bool:
        if not self.may_simplify:
            return False
        if self.inner.simplify():
            self.may_complicate = True
            return True
        self.may_simplify = False
        return False

    def complicate(self) -> bool:
        if not self.may_complicate:
            return False
        if self.inner.complicate():
            self.may_simplify = True
            return True
        self.may_complicate = False
        return False

    def clone(self) -> Fuse[V]:
        other = Fuse(self.inner.clone())
        other.may_simplify = self.may_simplify
        other.may_complicate = self.may_complicate
        return other

    def __repr__(self) -> str:
        return (
            f"Fuse({self.inner!r}, may_simplify={self.may_simplify}, "
            f"may_complicate={self.may_complicate})"
        )


class NoShrinkValueTree[V](ValueTree[V]):
    """Tree that reports the source value and refuses to shrink."""

    def __init__(self, inner: ValueTree[V]) -> None:
        self.inner = inner

    def current(self) -> V:
        return self.inner.current()

    def simplify(self) -> bool:
        return False

    def complicate(self) -> bool:
        return False

    def clone(self) -> NoShrinkValueTree[V]:
        return NoShrinkValueTree(self.inner.clone())


class NoShrink[V](Strategy[V]):
    """Strategy wrapper that disables shrinking. See Strategy.no_shrink()."""

    def __init__(self, source: Strategy[V]) -> None:
        self.source = source

    def new_tree(self, runner: TestRunner) -> NoShrinkValueTree[V]:
        return NoShrinkValueTree(self.source.new_tree(runner))

    def __repr__(self) -> str:
        return f"NoShrink({self.source!r})"
