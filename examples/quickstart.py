"""Quickstart example for propengine.

This example demonstrates generating values, running a property and reading
the shrunk counterexample.

Note: Examples use TestRunner.deterministic() so the output is the same on
every run. Real test suites normally use property_test(), which seeds from
the environment and persists failures.
"""

import tempfile
from pathlib import Path

from propengine import (
    CaseContext,
    Config,
    TestAbort,
    TestCaseFail,
    TestFail,
    TestRunner,
    integers,
    just,
    prop_assume,
    tuples,
    vec,
)
from propengine.runner import FileFailurePersistence

# Example 1: Drawing values
print("=" * 50)
print("Example 1: Drawing Values")
print("=" * 50)

runner = TestRunner.deterministic()
strategy = vec(integers(0, 100), size=(1, 5))
for _ in range(3):
    print(strategy.new_tree(runner).current())
# Output: three lists of 1 to 5 integers below 100

# Example 2: Shrinking a counterexample
print("\n" + "=" * 50)
print("Example 2: Shrinking")
print("=" * 50)


def sum_is_small(xs: list[int]) -> None:
    if sum(xs) >= 200:
        raise TestCaseFail("sum too large")


try:
    TestRunner.deterministic().run(vec(integers(0, 100)), sum_is_small)
except TestFail as exc:
    print(exc)
    # Output: Test failed: sum too large.
    #         minimal failing input: [...] (elements summing to exactly 200)

# Example 3: Dependent values with flat_map
print("\n" + "=" * 50)
print("Example 3: flat_map")
print("=" * 50)

pairs = integers(0, 65536).flat_map(lambda a: tuples(just(a), integers(a - 5, a + 5)))


def b_not_above_large_a(pair: tuple[int, int]) -> None:
    a, b = pair
    if a > 10000 and b > a:
        raise TestCaseFail("b above a")


try:
    TestRunner.deterministic(Config(max_shrink_iters=2**32 - 2)).run(
        pairs, b_not_above_large_a
    )
except TestFail as exc:
    print(exc.value)
    # Output: (10001, 10002)

# Example 4: Rejections and budgets
print("\n" + "=" * 50)
print("Example 4: Rejections")
print("=" * 50)


def only_negative(x: int) -> None:
    prop_assume(x < 0, "negative only")


try:
    TestRunner.deterministic(Config(max_global_rejects=5)).run(integers(0, 10), only_negative)
except TestAbort as exc:
    print(exc)
    # Output: Test aborted: Too many global rejects (5)

# Example 5: Extra diagnostics on the minimal case
print("\n" + "=" * 50)
print("Example 5: CaseContext")
print("=" * 50)


def explain(x: int, ctx: CaseContext) -> None:
    if x >= 42:
        if ctx.is_minimal_case:
            print(f"minimal case reached: {x}")
        raise TestCaseFail("too big")


try:
    TestRunner.deterministic().run_with_context(integers(0, 1000), explain)
except TestFail:
    pass
# Output: minimal case reached: 42

# Example 6: Failure persistence
print("\n" + "=" * 50)
print("Example 6: Failure Persistence")
print("=" * 50)

with tempfile.TemporaryDirectory() as tmpdir:
    path = Path(tmpdir) / "regressions.txt"
    config = Config(
        failure_persistence=FileFailurePersistence.direct(str(path)),
        source_file="quickstart.py",
    )
    try:
        TestRunner(config).run(vec(integers(0, 100)), sum_is_small)
    except TestFail:
        pass
    print(path.read_text(encoding="utf-8").splitlines()[-1])
    # Output: cc <64 hex digits> eb 0000803e # shrinks to [...]
