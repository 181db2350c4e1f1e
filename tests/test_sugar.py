"""Tests for property_test() and the prop_assert helpers.

Python 3.13+.
"""

from __future__ import annotations

import inspect

import pytest

from propengine import (
    TestCaseFail,
    TestCaseReject,
    TestFail,
    prop_assert,
    prop_assert_eq,
    prop_assert_ne,
    prop_assume,
    property_test,
)
from propengine.generators import integers, vec
from propengine.runner import Config, MapFailurePersistence


@property_test(integers(-1000, 1000), integers(-1000, 1000), config=Config(cases=64))
def test_addition_commutes(a: int, b: int) -> None:
    prop_assert_eq(a + b, b + a)


class TestPropertyTest:
    """The property_test() decorator."""

    def test_passing_property(self) -> None:
        """A property that holds returns None."""
        calls: list[tuple[int, list[int]]] = []

        @property_test(integers(0, 10), vec(integers(0, 5), size=3), config=Config(cases=20))
        def check(n: int, xs: list[int]) -> None:
            calls.append((n, xs))
            prop_assert(len(xs) == 3)

        assert check() is None
        assert len(calls) == 20

    def test_failing_property(self) -> None:
        """Failures surface as TestFail with the tuple of shrunk arguments."""

        @property_test(integers(0, 1000), config=Config())
        def check(x: int) -> None:
            prop_assert(x < 500, "x too large")

        with pytest.raises(TestFail) as info:
            check()
        assert info.value.value == (500,)
        assert info.value.reason.message == "x too large"

    def test_source_file_and_name_filled_in(self) -> None:
        """The decorated function's file keys persistence."""
        backend = MapFailurePersistence()

        @property_test(integers(0, 10), config=Config(failure_persistence=backend))
        def check(x: int) -> None:
            raise TestCaseFail("always")

        with pytest.raises(TestFail):
            check()
        [source] = backend.map
        assert source.endswith("test_sugar.py")

    def test_explicit_source_file_kept(self) -> None:
        """A source_file already in the config is not overridden."""
        backend = MapFailurePersistence()
        config = Config(failure_persistence=backend, source_file="custom-key")

        @property_test(integers(0, 10), config=config)
        def check(x: int) -> None:
            raise TestCaseFail("always")

        with pytest.raises(TestFail):
            check()
        assert list(backend.map) == ["custom-key"]

    def test_signature_hidden(self) -> None:
        """The wrapper takes no parameters, so pytest injects no fixtures."""

        @property_test(integers(0, 10), config=Config(cases=1))
        def check(x: int) -> None:
            pass

        assert inspect.signature(check).parameters == {}
        assert check.__name__ == "check"

    def test_requires_strategy(self) -> None:
        """At least one strategy is needed."""
        with pytest.raises(ValueError, match="at least one strategy"):
            property_test()


class TestPropAssertions:
    """prop_assert*, prop_assume."""

    def test_prop_assert(self) -> None:
        """Falsy conditions fail with the caller's location."""
        prop_assert(True)
        with pytest.raises(TestCaseFail) as info:
            prop_assert(0)
        assert info.value.reason.message == "assertion failed"
        assert info.value.reason.location is not None
        assert "test_sugar.py" in info.value.reason.location

    def test_prop_assert_eq(self) -> None:
        """Unequal values are rendered with repr()."""
        prop_assert_eq([1], [1])
        with pytest.raises(TestCaseFail) as info:
            prop_assert_eq(1, "1", "types differ")
        assert info.value.reason.message == "assertion failed: 1 == '1': types differ"

    def test_prop_assert_ne(self) -> None:
        """Equal values fail."""
        prop_assert_ne(1, 2)
        with pytest.raises(TestCaseFail) as info:
            prop_assert_ne(3, 3)
        assert info.value.reason.message == "assertion failed: 3 != 3"

    def test_prop_assume(self) -> None:
        """Falsy assumptions reject the case."""
        prop_assume(True)
        with pytest.raises(TestCaseReject) as info:
            prop_assume(False, "need even")
        assert info.value.reason.message == "need even"
        assert "test_sugar.py" in str(info.value)
