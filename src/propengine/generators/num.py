"""Numeric leaf strategies with binary-search shrinking.

Both trees keep an interval [lo, hi] in which the simplest failing value is
known to lie: hi is the last value seen to fail, lo the simplest value not
yet ruled out. simplify() moves to the midpoint and assumes it fails;
complicate() rules the midpoint out and moves up again. The value converges
on the failing value closest to zero that the range allows.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from propengine.strategy.traits import Strategy, ValueTree

if TYPE_CHECKING:
    from propengine.runner.runner import TestRunner

__all__ = [
    "FloatRange",
    "FloatValueTree",
    "IntRange",
    "IntValueTree",
    "floats",
    "integers",
    "integers_inclusive",
]


def _half_toward_zero(interval: int) -> int:
    return interval // 2 if interval >= 0 else -(-interval // 2)


class IntValueTree(ValueTree[int]):
    """Binary search from the drawn integer toward the simplest in-range value.

    Attributes:
        lo: Simplest value not yet ruled out
        curr: Current value
        hi: Last value assumed to fail
    """

    def __init__(self, lo: int, curr: int, hi: int) -> None:
        self.lo = lo
        self.curr = curr
        self.hi = hi

    @classmethod
    def new_clamped(cls, start: int, value: int, stop: int) -> IntValueTree:
        """Tree shrinking value toward the point of [start, stop) nearest zero."""
        lo = min(0, stop - 1) if value < 0 else max(0, start)
        return cls(lo, value, value)

    def _magnitude_greater(self) -> bool:
        if self.hi == 0:
            return False
        if self.hi < 0:
            return self.hi < self.lo
        return self.hi > self.lo

    def _reposition(self) -> bool:
        mid = self.lo + _half_toward_zero(self.hi - self.lo)
        if mid == self.curr:
            return False
        self.curr = mid
        return True

    def current(self) -> int:
        return self.curr

    def simplify(self) -> bool:
        if not self._magnitude_greater():
            return False
        self.hi = self.curr
        return self._reposition()

    def complicate(self) -> bool:
        if not self._magnitude_greater():
            return False
        self.lo = self.curr + (-1 if self.hi < 0 else 1)
        return self._reposition()

    def __repr__(self) -> str:
        return f"IntValueTree(lo={self.lo}, curr={self.curr}, hi={self.hi})"


class IntRange(Strategy[int]):
    """Uniform integers in [start, stop)."""

    def __init__(self, start: int, stop: int) -> None:
        if stop <= start:
            msg = f"empty integer range {start}..{stop}"
            raise ValueError(msg)
        self.start = start
        self.stop = stop

    def new_tree(self, runner: TestRunner) -> IntValueTree:
        value = runner.rng.gen_range(self.start, self.stop)
        return IntValueTree.new_clamped(self.start, value, self.stop)

    def __repr__(self) -> str:
        return f"IntRange({self.start}, {self.stop})"


def integers(start: int, stop: int) -> IntRange:
    """Integers in the half-open range [start, stop).

    Raises:
        ValueError: If the range is empty
    """
    return IntRange(start, stop)


def integers_inclusive(lo: int, hi: int) -> IntRange:
    """Integers in the closed range [lo, hi].

    Raises:
        ValueError: If lo > hi
    """
    return IntRange(lo, hi + 1)


class FloatValueTree(ValueTree[float]):
    """Binary search from the drawn float toward the simplest in-range value."""

    def __init__(self, lo: float, curr: float, hi: float) -> None:
        self.lo = lo
        self.curr = curr
        self.hi = hi

    @classmethod
    def new_clamped(cls, start: float, value: float, stop: float) -> FloatValueTree:
        if value < 0:
            lo = 0.0 if stop > 0 else math.nextafter(stop, -math.inf)
        else:
            lo = max(0.0, start)
        return cls(lo, value, value)

    def _done(self) -> bool:
        return abs(self.hi) <= abs(self.lo)

    def _reposition(self) -> bool:
        mid = self.lo + (self.hi - self.lo) / 2
        if mid == self.curr:
            return False
        self.curr = mid
        return True

    def current(self) -> float:
        return self.curr

    def simplify(self) -> bool:
        if self._done():
            return False
        self.hi = self.curr
        return self._reposition()

    def complicate(self) -> bool:
        if self._done():
            return False
        self.lo = self.curr
        if self._reposition():
            return True
        # No representable midpoint left: settle on the last failing bound.
        if self.curr == self.hi:
            return False
        self.lo = self.curr = self.hi
        return True

    def __repr__(self) -> str:
        return f"FloatValueTree(lo={self.lo}, curr={self.curr}, hi={self.hi})"


class FloatRange(Strategy[float]):
    """Finite floats in [start, stop), biased toward boundary values.

    With probability runner.edge_bias the draw is one of: start, the largest
    float below stop, or 0.0 when the range contains it.
    """

    def __init__(self, start: float, stop: float) -> None:
        if not (math.isfinite(start) and math.isfinite(stop)) or stop <= start:
            msg = f"invalid float range {start}..{stop}"
            raise ValueError(msg)
        self.start = float(start)
        self.stop = float(stop)
        edges = [self.start, math.nextafter(self.stop, self.start)]
        if self.start <= 0.0 < self.stop:
            edges.append(0.0)
        self.edges = tuple(edges)

    def _draw(self, runner: TestRunner) -> float:
        rng = runner.rng
        if rng.gen_bool(runner.edge_bias):
            return self.edges[rng.below(len(self.edges))]
        value = self.start + rng.gen_float() * (self.stop - self.start)
        if not self.start <= value < self.stop:
            return self.start
        return value

    def new_tree(self, runner: TestRunner) -> FloatValueTree:
        return FloatValueTree.new_clamped(self.start, self._draw(runner), self.stop)

    def __repr__(self) -> str:
        return f"FloatRange({self.start}, {self.stop})"


def floats(start: float, stop: float) -> FloatRange:
    """Finite floats in the half-open range [start, stop).

    Raises:
        ValueError: If a bound is not finite or the range is empty
    """
    return FloatRange(start, stop)
