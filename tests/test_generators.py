"""Tests for the leaf strategies: integers, floats, booleans, select, vec.

Python 3.13+.
"""

from __future__ import annotations

import math

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from propengine import TestCaseFail, TestFail
from propengine.generators import (
    BoolValueTree,
    FloatValueTree,
    IntValueTree,
    SizeRange,
    booleans,
    floats,
    integers,
    integers_inclusive,
    select,
    vec,
    weighted,
)
from propengine.runner import Config, TestRunner
from propengine.strategy import CheckStrategySanityOptions, check_strategy_sanity


def _minimal(strategy, fails) -> object:
    """Run strategy against a test failing when fails(value) and return the shrunk value."""

    def test(value: object) -> None:
        if fails(value):
            raise TestCaseFail("fails")

    with pytest.raises(TestFail) as info:
        TestRunner.deterministic().run(strategy, test)
    return info.value.value


class TestIntegers:
    """integers() and integers_inclusive()."""

    @given(start=st.integers(-(2**40), 2**40), width=st.integers(1, 1000))
    @settings(max_examples=50, deadline=None)
    def test_values_in_range(self, start: int, width: int) -> None:
        """Drawn values stay in [start, stop)."""
        runner = TestRunner.deterministic()
        strategy = integers(start, start + width)
        for _ in range(10):
            assert start <= strategy.new_tree(runner).current() < start + width

    def test_inclusive_upper_bound(self) -> None:
        """integers_inclusive() includes hi."""
        runner = TestRunner.deterministic()
        assert integers_inclusive(3, 3).new_tree(runner).current() == 3
        values = {integers_inclusive(0, 1).new_tree(runner).current() for _ in range(100)}
        assert values == {0, 1}

    def test_empty_range(self) -> None:
        """An empty range is refused at construction."""
        with pytest.raises(ValueError, match="empty integer range"):
            integers(5, 5)

    def test_shrinks_to_positive_threshold(self) -> None:
        """x >= 500 shrinks to exactly 500."""
        assert _minimal(integers(0, 1000), lambda x: x >= 500) == 500

    def test_shrinks_to_negative_threshold(self) -> None:
        """x <= -500 shrinks to exactly -500."""
        assert _minimal(integers(-1000, 0), lambda x: x <= -500) == -500

    def test_shrinks_toward_range_start(self) -> None:
        """An always-failing range above zero shrinks to its start."""
        assert _minimal(integers(40, 60), lambda _: True) == 40

    def test_negative_values_shrink_toward_zero(self) -> None:
        """Binary search moves a negative value halfway toward zero."""
        tree = IntValueTree.new_clamped(-100, -37, 100)
        assert tree.simplify()
        assert tree.current() == -18
        assert tree.complicate()
        assert -37 <= tree.current() < -18

    def test_unsimplifiable_at_zero(self) -> None:
        """Zero is already minimal."""
        tree = IntValueTree.new_clamped(-10, 0, 10)
        assert not tree.simplify()
        assert not tree.complicate()

    def test_sanity(self) -> None:
        """Integer trees honour the tree contract."""
        check_strategy_sanity(integers(-1000, 1000), CheckStrategySanityOptions(cases=256))
        check_strategy_sanity(integers(-1000, -10), CheckStrategySanityOptions(cases=64))


class TestFloats:
    """floats()."""

    def test_values_in_range(self) -> None:
        """Drawn values are finite and within [start, stop)."""
        runner = TestRunner.deterministic()
        strategy = floats(-2.5, 7.0)
        for _ in range(300):
            value = strategy.new_tree(runner).current()
            assert math.isfinite(value)
            assert -2.5 <= value < 7.0

    def test_edge_bias_one_yields_edges(self) -> None:
        """With edge_bias 1.0 every draw is a boundary value."""
        runner = TestRunner.deterministic()
        runner.edge_bias = 1.0
        strategy = floats(-1.0, 1.0)
        edges = {-1.0, math.nextafter(1.0, -1.0), 0.0}
        seen = {strategy.new_tree(runner).current() for _ in range(100)}
        assert seen <= edges
        assert len(seen) > 1

    def test_edge_bias_zero_avoids_edges(self) -> None:
        """With edge_bias 0.0 draws are uniform."""
        runner = TestRunner.deterministic()
        runner.edge_bias = 0.0
        strategy = floats(10.0, 20.0)
        values = [strategy.new_tree(runner).current() for _ in range(100)]
        assert len(set(values)) > 90

    @pytest.mark.parametrize(
        ("start", "stop"),
        [(1.0, 1.0), (2.0, 1.0), (0.0, math.inf), (-math.inf, 0.0), (math.nan, 1.0)],
    )
    def test_invalid_range(self, start: float, stop: float) -> None:
        """Empty or non-finite ranges are refused."""
        with pytest.raises(ValueError, match="invalid float range"):
            floats(start, stop)

    def test_shrinks_to_positive_threshold(self) -> None:
        """x >= 500 shrinks to (just about) 500."""
        value = _minimal(floats(0.0, 1000.0), lambda x: x >= 500.0)
        assert isinstance(value, float)
        assert 500.0 <= value < 500.001

    def test_shrinks_to_negative_threshold(self) -> None:
        """x <= -500 shrinks to (just about) -500."""
        value = _minimal(floats(-1000.0, 0.0), lambda x: x <= -500.0)
        assert isinstance(value, float)
        assert -500.001 < value <= -500.0

    def test_float_tree_settles_on_failing_bound(self) -> None:
        """Without a representable midpoint complicate() lands on hi."""
        tree = FloatValueTree(1.0, 1.0, math.nextafter(1.0, 2.0))
        assert tree.complicate()
        assert tree.current() == math.nextafter(1.0, 2.0)
        assert not tree.simplify()

    def test_sanity(self) -> None:
        """Float trees honour the tree contract."""
        check_strategy_sanity(floats(-1000.0, 1000.0), CheckStrategySanityOptions(cases=128))
        check_strategy_sanity(floats(-10.0, -1.0), CheckStrategySanityOptions(cases=64))


class TestBooleans:
    """booleans() and weighted()."""

    def test_true_simplifies_once(self) -> None:
        """True -> False, back to True, then no further movement."""
        tree = BoolValueTree(True)
        assert tree.simplify()
        assert tree.current() is False
        assert tree.complicate()
        assert tree.current() is True
        assert not tree.simplify()
        assert not tree.complicate()

    def test_false_is_minimal(self) -> None:
        """False cannot shrink."""
        tree = BoolValueTree(False)
        assert not tree.simplify()
        assert not tree.complicate()

    def test_weighted_extremes(self) -> None:
        """weighted(0) is always False; weighted(1) always True."""
        runner = TestRunner.deterministic()
        assert not any(weighted(0.0).new_tree(runner).current() for _ in range(50))
        assert all(weighted(1.0).new_tree(runner).current() for _ in range(50))

    def test_both_values_generated(self) -> None:
        """booleans() produces both values."""
        runner = TestRunner.deterministic()
        assert {booleans().new_tree(runner).current() for _ in range(100)} == {True, False}

    @pytest.mark.parametrize("probability", [-0.5, 1.01])
    def test_invalid_probability(self, probability: float) -> None:
        """Probabilities outside [0, 1] are refused."""
        with pytest.raises(ValueError, match="probability"):
            weighted(probability)

    def test_failing_true_stays_true(self) -> None:
        """A failure that needs True reports True."""
        assert _minimal(booleans(), lambda b: b) is True

    def test_sanity(self) -> None:
        """Boolean trees honour the tree contract."""
        check_strategy_sanity(booleans(), CheckStrategySanityOptions(cases=64))


class TestSelect:
    """select()."""

    def test_values_from_sequence(self) -> None:
        """Every drawn value is one of the options."""
        runner = TestRunner.deterministic()
        options = ["a", "b", "c"]
        seen = {select(options).new_tree(runner).current() for _ in range(100)}
        assert seen == set(options)

    def test_shrinks_to_first(self) -> None:
        """The first option is the simplest."""
        assert _minimal(select(["a", "b", "c"]), lambda _: True) == "a"

    def test_empty(self) -> None:
        """At least one option is required."""
        with pytest.raises(ValueError, match="at least one value"):
            select([])


class TestSizeRange:
    """SizeRange normalisation."""

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (3, SizeRange(3, 4)),
            (range(1, 5), SizeRange(1, 5)),
            ((1, 4), SizeRange(1, 5)),
            (SizeRange(2, 9), SizeRange(2, 9)),
        ],
    )
    def test_of(self, size: object, expected: SizeRange) -> None:
        """Exact sizes, ranges and inclusive pairs normalise to half-open ranges."""
        assert SizeRange.of(size) == expected  # type: ignore[arg-type]

    @pytest.mark.parametrize("size", [-1, range(0, 10, 2), (5, 2), "3"])
    def test_invalid(self, size: object) -> None:
        """Unsupported or empty specifications are refused."""
        with pytest.raises(ValueError):
            SizeRange.of(size)  # type: ignore[arg-type]


class TestVec:
    """vec()."""

    def test_exact_and_bounded_sizes(self) -> None:
        """Lengths respect the requested size."""
        runner = TestRunner.deterministic()
        for _ in range(50):
            assert len(vec(booleans(), size=3).new_tree(runner).current()) == 3
            assert 1 <= len(vec(booleans(), size=(1, 4)).new_tree(runner).current()) <= 4

    def test_default_size_follows_config(self) -> None:
        """Without a size the config's max_default_size_range bounds the length."""
        runner = TestRunner.deterministic(Config(max_default_size_range=5))
        lengths = {len(vec(booleans()).new_tree(runner).current()) for _ in range(200)}
        assert lengths == {0, 1, 2, 3, 4}

    def test_shrinks_to_single_failing_element(self) -> None:
        """Irrelevant elements are deleted and the culprit shrinks to the threshold."""
        assert _minimal(vec(integers(0, 10)), lambda xs: any(x >= 5 for x in xs)) == [5]

    def test_never_below_min_size(self) -> None:
        """Deletion stops at the minimum size."""
        assert _minimal(vec(integers(0, 10), size=(2, 5)), lambda _: True) == [0, 0]

    def test_delete_then_restore(self) -> None:
        """complicate() after a deletion puts the element back."""
        runner = TestRunner.deterministic()
        tree = vec(integers(0, 10), size=3).new_tree(runner)
        tree_min = vec(integers(0, 10), size=(0, 3)).new_tree(runner)
        before = tree_min.current()
        if before:
            assert tree_min.simplify()
            assert len(tree_min.current()) == len(before) - 1
            assert tree_min.complicate()
            assert tree_min.current() == before
        while tree.simplify():
            assert len(tree.current()) == 3

    def test_sanity(self) -> None:
        """Vec trees honour the tree contract."""
        check_strategy_sanity(
            vec(integers(0, 10), size=(0, 8)), CheckStrategySanityOptions(cases=64)
        )
