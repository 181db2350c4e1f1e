"""Tests for Union, LazyValueTree and optional().

Python 3.13+.
"""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from propengine import StrategyContractError, TestCaseFail, TestFail
from propengine.generators import integers, optional
from propengine.rng import FixedSeed
from propengine.runner import Config, TestRunner
from propengine.strategy import (
    CheckStrategySanityOptions,
    LazyValueTree,
    Union,
    UnionValueTree,
    check_strategy_sanity,
    just,
    union,
    weighted_union,
)


def _three_bands() -> Union[int]:
    return union(integers(0, 10), integers(100, 110), integers(1000, 1010))


def _always_fail(_: object) -> None:
    raise TestCaseFail("always")


class TestUnionGeneration:
    """Branch selection."""

    def test_values_come_from_branches(self) -> None:
        """Every value belongs to one of the bands."""
        runner = TestRunner.deterministic()
        seen = set()
        for _ in range(300):
            value = _three_bands().new_tree(runner).current()
            band = value // 100
            assert band in (0, 1, 10)
            seen.add(band)
        assert seen == {0, 1, 10}

    def test_zero_weight_branch_never_picked(self) -> None:
        """A zero-weight branch is kept but never drawn."""
        runner = TestRunner.deterministic()
        strategy = weighted_union((0, just("never")), (1, just("always")))
        for _ in range(100):
            assert strategy.new_tree(runner).current() == "always"

    def test_lower_branches_are_pending(self) -> None:
        """Branches before the pick are not drawn until shrinking needs them."""
        runner = TestRunner.deterministic()
        strategy = weighted_union((1, integers(0, 10)), (1_000_000, integers(100, 110)))
        tree = strategy.new_tree(runner)
        assert isinstance(tree, UnionValueTree)
        assert tree.pick == 1
        assert not tree.options[0].is_initialized
        assert tree.options[1].is_initialized

    @pytest.mark.parametrize(
        "options",
        [
            [],
            [(-1, just(1))],
            [(0, just(1)), (0, just(2))],
        ],
    )
    def test_invalid_options(self, options: list[tuple[int, object]]) -> None:
        """Empty unions, negative weights and zero total weight are refused."""
        with pytest.raises(ValueError, match="Union"):
            Union(options)  # type: ignore[arg-type]

    def test_or_operators(self) -> None:
        """| and or_() append options with the given weight."""
        combined = just(1) | just(2)
        assert isinstance(combined, Union)
        extended = combined.or_(just(3), weight=5)
        assert [weight for weight, _ in extended.options] == [1, 1, 5]
        assert len((combined | just(4)).options) == 3

    def test_strategy_union_method(self) -> None:
        """Strategy.union() builds a two-way Union."""
        strategy = integers(0, 5).union(integers(10, 15))
        assert isinstance(strategy, Union)
        assert len(strategy.options) == 2


class TestUnionShrinking:
    """Shrinking across branches."""

    @given(seed=st.integers(0, 2**64 - 1))
    @settings(max_examples=30, deadline=None)
    def test_simplify_never_raises_pick(self, seed: int) -> None:
        """simplify() only ever moves to an equal or lower branch."""
        runner = TestRunner(Config(rng_seed=FixedSeed(seed)))
        tree = _three_bands().new_tree(runner)
        assert isinstance(tree, UnionValueTree)
        for step in range(200):
            before = tree.pick
            if step % 3 == 2:
                tree.complicate()
                continue
            if not tree.simplify():
                break
            assert tree.pick <= before

    def test_rejected_switch_is_not_retried(self) -> None:
        """complicate() after a branch switch raises min_pick past that branch."""
        runner = TestRunner.deterministic()
        strategy = weighted_union((1, integers(0, 10)), (1_000_000, integers(100, 110)))
        tree = strategy.new_tree(runner)
        assert isinstance(tree, UnionValueTree)
        assert tree.simplify()
        assert tree.pick == 0
        assert tree.complicate()
        assert tree.pick == 1
        assert tree.min_pick == 1
        while tree.simplify():
            assert tree.pick == 1

    def test_always_failing_union_shrinks_to_first_branch_minimum(self) -> None:
        """An always-failing test shrinks to the simplest value of branch 0."""
        runner = TestRunner.deterministic()
        with pytest.raises(TestFail) as info:
            runner.run(_three_bands(), _always_fail)
        assert info.value.value == 0

    def test_sanity(self) -> None:
        """Union trees honour the tree contract."""
        check_strategy_sanity(_three_bands(), CheckStrategySanityOptions(cases=256))


class TestLazyValueTree:
    """Deferred branch trees."""

    def test_maybe_init_draws_once(self) -> None:
        """maybe_init() draws on first call and is a no-op afterwards."""
        lazy = LazyValueTree.pending(integers(0, 100), TestRunner.deterministic())
        assert not lazy.is_initialized
        lazy.maybe_init()
        assert lazy.is_initialized
        value = lazy.current()
        lazy.maybe_init()
        assert lazy.current() == value

    def test_failed_draw_stays_failed(self) -> None:
        """A rejected draw leaves the tree permanently uninitialized."""
        runner = TestRunner.deterministic(Config(max_local_rejects=1))
        lazy = LazyValueTree.pending(integers(0, 10).filter("never", lambda _: False), runner)
        lazy.maybe_init()
        assert not lazy.is_initialized
        assert "failed" in repr(lazy)

    def test_use_before_init_is_contract_error(self) -> None:
        """Reading an uninitialized tree is a strategy defect."""
        lazy = LazyValueTree.pending(just(1), TestRunner.deterministic())
        with pytest.raises(StrategyContractError, match="before successful initialization"):
            lazy.current()

    def test_pending_draw_is_deterministic(self) -> None:
        """A pending tree and its clone draw the same value."""
        lazy = LazyValueTree.pending(integers(0, 1_000_000), TestRunner.deterministic())
        twin = lazy.clone()
        lazy.maybe_init()
        twin.maybe_init()
        assert lazy.current() == twin.current()


class TestOptional:
    """optional()."""

    def test_probability_extremes(self) -> None:
        """Probability 0 always gives None; probability 1 never does."""
        runner = TestRunner.deterministic()
        for _ in range(50):
            assert optional(integers(0, 10), 0.0).new_tree(runner).current() is None
            assert optional(integers(0, 10), 1.0).new_tree(runner).current() is not None

    @pytest.mark.parametrize("probability", [-0.1, 1.5])
    def test_invalid_probability(self, probability: float) -> None:
        """Probabilities outside [0, 1] are refused."""
        with pytest.raises(ValueError, match="probability"):
            optional(just(1), probability)

    def test_shrinks_to_none(self) -> None:
        """None is the simplest optional value."""
        runner = TestRunner.deterministic()
        with pytest.raises(TestFail) as info:
            runner.run(optional(integers(1, 100), 0.9), _always_fail)
        assert info.value.value is None
