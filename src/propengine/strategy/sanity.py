"""Contract checker for Strategy implementations.

check_strategy_sanity() draws many trees from a strategy and walks each one
through simplify()/complicate(), asserting the ValueTree contract:

    - the tree converges: alternating simplify()/complicate() stops
    - complicate() succeeds right after a successful simplify() (strict mode)
    - complicate() returning False leaves the value unchanged
    - simplify() returning False leaves the value unchanged

Violations raise AssertionError, so the checker can be called directly from
a test function.

Python 3.13+.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from propengine.constants import SANITY_CASES, SANITY_MAX_STEPS

from .traits import NEW_TREE_FAILURES, Strategy, ValueTree

if TYPE_CHECKING:
    from propengine.runner.config import Config
    from propengine.runner.runner import TestRunner

__all__ = ["CheckStrategySanityOptions", "check_strategy_sanity"]

_MAX_GEN_TRIES = 100


@dataclass(frozen=True, slots=True)
class CheckStrategySanityOptions:
    """Options for check_strategy_sanity().

    Attributes:
        strict_complicate_after_simplify: Require complicate() to succeed
            immediately after every successful simplify(). Strategies whose
            simplify() can jump to a value complicate() cannot step back
            from (such as filters) disable this.
        error_on_local_rejects: Run with a zero local reject budget, so any
            rejected draw counts as a generation failure.
        cases: Number of trees to draw and walk
        config: Configuration of the runner the trees are drawn with
            (default: Config())
    """

    strict_complicate_after_simplify: bool = True
    error_on_local_rejects: bool = False
    cases: int = SANITY_CASES
    config: Config | None = None


def _draw[V](strategy: Strategy[V], runner: TestRunner) -> ValueTree[V]:
    last: Exception | None = None
    for _ in range(_MAX_GEN_TRIES):
        try:
            return strategy.new_tree(runner)
        except NEW_TREE_FAILURES as exc:
            last = exc
    msg = (
        f"Strategy failed to generate a value over {_MAX_GEN_TRIES} consecutive "
        f"attempts; last failure: {last}"
    )
    raise AssertionError(msg)


def _check_converges(tree: ValueTree[object]) -> None:
    steps = 0
    while tree.simplify() or tree.complicate():
        steps += 1
        if steps > SANITY_MAX_STEPS:
            msg = f"Failed to converge on any value. State:\n{tree!r}"
            raise AssertionError(msg)


def _check_shrink_walk(tree: ValueTree[object], *, strict: bool) -> None:
    simplifies = 0
    while True:
        before = tree.clone()
        if not tree.simplify():
            if before.current() != tree.current():
                msg = (
                    "simplify() did not preserve the value after returning False. "
                    f"Before: {before.current()!r}, after: {tree.current()!r}"
                )
                raise AssertionError(msg)
            return

        complicated = tree.clone()
        if strict:
            if not complicated.complicate():
                msg = (
                    "complicate() returned False immediately after simplify() returned "
                    f"True, after {simplifies} simplify() calls. State:\n{tree!r}"
                )
                raise AssertionError(msg)

        previous = complicated.clone()
        complications = 0
        while complicated.complicate():
            previous = complicated.clone()
            complications += 1
            if complications > SANITY_MAX_STEPS:
                msg = (
                    f"complicate() returned True over {SANITY_MAX_STEPS} times in a row. "
                    f"State:\n{complicated!r}"
                )
                raise AssertionError(msg)

        if previous.current() != complicated.current():
            msg = (
                "complicate() did not preserve the value after returning False. "
                f"Before: {previous.current()!r}, after: {complicated.current()!r}"
            )
            raise AssertionError(msg)
        simplifies += 1


def check_strategy_sanity(
    strategy: Strategy[object], options: CheckStrategySanityOptions | None = None
) -> None:
    """Assert that strategy's value trees honour the ValueTree contract.

    Args:
        strategy: Strategy under test
        options: Checker options (default: CheckStrategySanityOptions())

    Raises:
        AssertionError: On the first contract violation found
    """
    from propengine.runner.config import Config
    from propengine.runner.runner import TestRunner

    options = options or CheckStrategySanityOptions()
    config = options.config if options.config is not None else Config()
    if options.error_on_local_rejects:
        config = replace(config, max_local_rejects=0)
    runner = TestRunner(config)

    for _ in range(options.cases):
        tree = _draw(strategy, runner)
        _check_converges(tree.clone())
        _check_shrink_walk(tree, strict=options.strict_complicate_after_simplify)
