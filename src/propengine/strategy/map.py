"""Map and Perturb: value transformation combinators.

Both keep the source tree's shrinking untouched and re-apply the
transformation to every candidate. The transformation must be pure and
total; an exception inside it surfaces when the runner evaluates current()
and becomes the case's failure.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from .traits import Strategy, ValueTree

if TYPE_CHECKING:
    from propengine.rng import TestRng
    from propengine.runner.runner import TestRunner

__all__ = ["Map", "MapValueTree", "Perturb", "PerturbValueTree"]


class MapValueTree[V, U](ValueTree[U]):
    """Tree whose value is fn(source.current())."""

    def __init__(self, source: ValueTree[V], fn: Callable[[V], U]) -> None:
        self.source = source
        self.fn = fn

    def current(self) -> U:
        return self.fn(self.source.current())

    def simplify(self) -> bool:
        return self.source.simplify()

    def complicate(self) -> bool:
        return self.source.complicate()

    def clone(self) -> MapValueTree[V, U]:
        return MapValueTree(self.source.clone(), self.fn)

    def __repr__(self) -> str:
        return f"MapValueTree({self.source!r})"


class Map[V, U](Strategy[U]):
    """See Strategy.map()."""

    def __init__(self, source: Strategy[V], fn: Callable[[V], U]) -> None:
        self.source = source
        self.fn = fn

    def new_tree(self, runner: TestRunner) -> MapValueTree[V, U]:
        return MapValueTree(self.source.new_tree(runner), self.fn)

    def __repr__(self) -> str:
        return f"Map({self.source!r}, <function>)"


class PerturbValueTree[V, U](ValueTree[U]):
    """Tree whose value is fn(source.current(), copy of a fixed rng)."""

    def __init__(self, source: ValueTree[V], fn: Callable[[V, TestRng], U], rng: TestRng) -> None:
        self.source = source
        self.fn = fn
        self.rng = rng

    def current(self) -> U:
        return self.fn(self.source.current(), self.rng.clone())

    def simplify(self) -> bool:
        return self.source.simplify()

    def complicate(self) -> bool:
        return self.source.complicate()

    def clone(self) -> PerturbValueTree[V, U]:
        return PerturbValueTree(self.source.clone(), self.fn, self.rng)


class Perturb[V, U](Strategy[U]):
    """See Strategy.perturb()."""

    def __init__(self, source: Strategy[V], fn: Callable[[V, TestRng], U]) -> None:
        self.source = source
        self.fn = fn

    def new_tree(self, runner: TestRunner) -> PerturbValueTree[V, U]:
        source = self.source.new_tree(runner)
        return PerturbValueTree(source, self.fn, runner.new_rng())

    def __repr__(self) -> str:
        return f"Perturb({self.source!r}, <function>)"
