"""Convenience layer for writing property tests.

property_test() turns a function of generated values into a zero-argument
test function that pytest (or any runner) can call directly:

    @property_test(integers(0, 100), integers(0, 100))
    def test_addition_commutes(a, b):
        prop_assert_eq(a + b, b + a)

The prop_assert helpers raise TestCaseFail / TestCaseReject tagged with the
caller's source location, which keeps failure reasons short and stable
across shrink steps.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from propengine.diagnostics import Reason, TestCaseFail, TestCaseReject
from propengine.runner import Config, TestRunner
from propengine.strategy import Strategy, tuples

__all__ = [
    "prop_assert",
    "prop_assert_eq",
    "prop_assert_ne",
    "prop_assume",
    "property_test",
]


def property_test(
    *strategies: Strategy[Any], config: Config | None = None
) -> Callable[[Callable[..., object]], Callable[[], None]]:
    """Decorate a function of N generated values as a property test.

    Args:
        *strategies: One strategy per parameter of the decorated function
        config: Run configuration (default: Config.default()); source_file
            and test_name are filled in from the function when unset

    Returns:
        Decorator producing a zero-argument test function that raises
        TestFail or TestAbort

    Raises:
        ValueError: If no strategy is given
    """
    if not strategies:
        msg = "property_test() requires at least one strategy"
        raise ValueError(msg)
    strategy = tuples(*strategies)

    def decorator(fn: Callable[..., object]) -> Callable[[], None]:
        source_file = inspect.getsourcefile(fn) or fn.__code__.co_filename

        @functools.wraps(fn)
        def wrapper() -> None:
            base = config if config is not None else Config.default()
            run_config = replace(
                base,
                source_file=base.source_file or source_file,
                test_name=base.test_name or fn.__qualname__,
            )
            TestRunner(run_config).run(strategy, lambda values: fn(*values))

        # Generated values are not fixtures: hide the wrapped signature.
        wrapper.__signature__ = inspect.Signature()  # type: ignore[attr-defined]
        return wrapper

    return decorator


def prop_assert(condition: object, message: str | None = None) -> None:
    """Fail the case unless condition is truthy.

    Raises:
        TestCaseFail: If condition is falsy
    """
    if not condition:
        raise TestCaseFail(Reason.with_location(message or "assertion failed", depth=2))


def prop_assert_eq(left: object, right: object, message: str | None = None) -> None:
    """Fail the case unless left == right.

    Raises:
        TestCaseFail: If the values differ
    """
    if not left == right:
        text = f"assertion failed: {left!r} == {right!r}"
        if message:
            text = f"{text}: {message}"
        raise TestCaseFail(Reason.with_location(text, depth=2))


def prop_assert_ne(left: object, right: object, message: str | None = None) -> None:
    """Fail the case unless left != right.

    Raises:
        TestCaseFail: If the values are equal
    """
    if not left != right:
        text = f"assertion failed: {left!r} != {right!r}"
        if message:
            text = f"{text}: {message}"
        raise TestCaseFail(Reason.with_location(text, depth=2))


def prop_assume(condition: object, message: str | None = None) -> None:
    """Reject the case unless condition is truthy.

    Raises:
        TestCaseReject: If condition is falsy
    """
    if not condition:
        raise TestCaseReject(Reason.with_location(message or "assumption failed", depth=2))
