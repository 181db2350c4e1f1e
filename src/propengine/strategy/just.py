"""Constant strategies."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from .traits import Strategy, ValueTree

if TYPE_CHECKING:
    from propengine.runner.runner import TestRunner

__all__ = ["Just", "JustValueTree", "LazyJust", "just", "lazy_just"]


class JustValueTree[V](ValueTree[V]):
    """Tree over a single value; nothing to shrink."""

    def __init__(self, value: V) -> None:
        self.value = value

    def current(self) -> V:
        return self.value

    def simplify(self) -> bool:
        return False

    def complicate(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"JustValueTree({self.value!r})"


class Just[V](Strategy[V]):
    """Always generate the same value. Consumes no randomness."""

    def __init__(self, value: V) -> None:
        self.value = value

    def new_tree(self, runner: TestRunner) -> JustValueTree[V]:
        return JustValueTree(self.value)

    def __repr__(self) -> str:
        return f"Just({self.value!r})"


class _LazyJustValueTree[V](ValueTree[V]):
    def __init__(self, factory: Callable[[], V]) -> None:
        self.factory = factory

    def current(self) -> V:
        return self.factory()

    def simplify(self) -> bool:
        return False

    def complicate(self) -> bool:
        return False


class LazyJust[V](Strategy[V]):
    """Generate factory() on every current() call.

    Useful for mutable constants: each case gets a fresh object.
    """

    def __init__(self, factory: Callable[[], V]) -> None:
        self.factory = factory

    def new_tree(self, runner: TestRunner) -> ValueTree[V]:
        return _LazyJustValueTree(self.factory)

    def __repr__(self) -> str:
        return f"LazyJust({self.factory!r})"


def just[V](value: V) -> Just[V]:
    """Strategy always producing value."""
    return Just(value)


def lazy_just[V](factory: Callable[[], V]) -> LazyJust[V]:
    """Strategy producing factory() anew for every use."""
    return LazyJust(factory)
