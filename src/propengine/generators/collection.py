"""Variable-length collections.

A VecValueTree shrinks in two phases. First it tries deleting each element
in turn (never going below the minimum size); a deletion the test does not
like is undone and the search moves on to the next element. Then it
shrinks the remaining elements one at a time, left to right.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from propengine.strategy.traits import Strategy, ValueTree

if TYPE_CHECKING:
    from propengine.runner.runner import TestRunner

__all__ = ["SizeRange", "Vec", "VecValueTree", "vec"]

_DELETE = "delete"
_SHRINK = "shrink"


@dataclass(frozen=True, slots=True)
class SizeRange:
    """Half-open range of collection sizes [start, stop).

    Example:
        >>> SizeRange.of(3)
        SizeRange(start=3, stop=4)
        >>> SizeRange.of(range(1, 5))
        SizeRange(start=1, stop=5)
    """

    start: int
    stop: int

    def __post_init__(self) -> None:
        """Validate the bounds.

        Raises:
            ValueError: If start is negative or the range is empty
        """
        if self.start < 0 or self.stop <= self.start:
            msg = f"invalid size range {self.start}..{self.stop}"
            raise ValueError(msg)

    @classmethod
    def of(cls, size: int | range | tuple[int, int] | SizeRange) -> SizeRange:
        """Normalize an exact size, a range, or an inclusive (lo, hi) pair."""
        match size:
            case SizeRange():
                return size
            case int():
                return cls(size, size + 1)
            case range(step=1):
                return cls(size.start, size.stop)
            case (int() as lo, int() as hi):
                return cls(lo, hi + 1)
            case _:
                msg = f"unsupported size specification: {size!r}"
                raise ValueError(msg)


class VecValueTree[V](ValueTree[list[V]]):
    """Tree over a list of element trees with deletable slots.

    Attributes:
        elements: One tree per generated element
        included: Whether each element is still part of the value
        min_size: Size below which no element is deleted
        shrink: (phase, index) of the next shrink step
        prev_shrink: (phase, index) of the last successful simplify(), or None
    """

    def __init__(self, elements: list[ValueTree[V]], min_size: int) -> None:
        self.elements = elements
        self.included = [True] * len(elements)
        self.min_size = min_size
        self.shrink: tuple[str, int] = (_DELETE, 0)
        self.prev_shrink: tuple[str, int] | None = None

    def current(self) -> list[V]:
        return [
            tree.current()
            for tree, included in zip(self.elements, self.included, strict=True)
            if included
        ]

    def simplify(self) -> bool:
        phase, index = self.shrink
        if phase == _DELETE:
            if index >= len(self.elements) or sum(self.included) <= self.min_size:
                self.shrink = (_SHRINK, 0)
            else:
                self.included[index] = False
                self.prev_shrink = self.shrink
                self.shrink = (_DELETE, index + 1)
                return True

        _, index = self.shrink
        while index < len(self.elements):
            if self.included[index] and self.elements[index].simplify():
                self.shrink = (_SHRINK, index)
                self.prev_shrink = self.shrink
                return True
            index += 1
            self.shrink = (_SHRINK, index)
        return False

    def complicate(self) -> bool:
        if self.prev_shrink is None:
            return False
        phase, index = self.prev_shrink
        if phase == _DELETE:
            self.included[index] = True
            self.prev_shrink = None
            return True
        if self.elements[index].complicate():
            return True
        self.prev_shrink = None
        return False

    def clone(self) -> VecValueTree[V]:
        other = VecValueTree([tree.clone() for tree in self.elements], self.min_size)
        other.included = list(self.included)
        other.shrink = self.shrink
        other.prev_shrink = self.prev_shrink
        return other

    def __repr__(self) -> str:
        return (
            f"VecValueTree(len={sum(self.included)}/{len(self.elements)}, "
            f"shrink={self.shrink}, prev_shrink={self.prev_shrink})"
        )


class Vec[V](Strategy[list[V]]):
    """Lists of independently drawn elements."""

    def __init__(self, element: Strategy[V], size: SizeRange | None) -> None:
        self.element = element
        self.size = size

    def _size_range(self, runner: TestRunner) -> SizeRange:
        if self.size is not None:
            return self.size
        return SizeRange(0, max(1, runner.config.max_default_size_range))

    def new_tree(self, runner: TestRunner) -> VecValueTree[V]:
        size = self._size_range(runner)
        length = runner.rng.gen_range(size.start, size.stop)
        elements = [self.element.new_tree(runner) for _ in range(length)]
        return VecValueTree(elements, size.start)

    def __repr__(self) -> str:
        return f"Vec({self.element!r}, size={self.size!r})"


def vec[V](element: Strategy[V], size: Any = None) -> Vec[V]:
    """Lists of values from element.

    Args:
        element: Strategy for each element
        size: Exact size, range of sizes, inclusive (lo, hi) pair, SizeRange,
            or None for 0 up to config.max_default_size_range (exclusive)

    Raises:
        ValueError: If size is not a valid size specification
    """
    return Vec(element, SizeRange.of(size) if size is not None else None)
