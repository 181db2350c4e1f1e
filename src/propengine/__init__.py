"""PropEngine - property-based testing with deterministic shrinking.

Generates pseudorandom structured inputs from composable strategies, runs a
test body against them, and on failure searches for a minimal failing input,
persisting its seed so the failure is replayed first on the next run.

Public API:
    Strategy, ValueTree - Generation and shrinking contract
    TestRunner, Config - Run loop and its configuration
    property_test - Decorator turning a function of values into a test
    prop_assert, prop_assert_eq, prop_assert_ne, prop_assume - Case helpers
    just, lazy_just, union, weighted_union, tuples, array, uniform_array
        - Generic strategy constructors
    integers, integers_inclusive, floats, booleans, weighted, select, vec,
    optional - Leaf strategies

Exceptions:
    TestCaseReject, TestCaseFail - Raised inside a case
    TestAbort, TestFail - Raised by TestRunner.run()
    StrategyContractError - A strategy broke the ValueTree contract

Submodules:
    propengine.strategy - Combinators and check_strategy_sanity()
    propengine.generators - Leaf strategies
    propengine.runner - Config, persistence backends, result caches
    propengine.rng - Seeds and TestRng
"""

# Essential Public API - Minimal exports for clean namespace
from .diagnostics import (
    PropEngineError,
    Reason,
    TestAbort,
    TestCaseError,
    TestCaseFail,
    TestCaseReject,
    TestError,
    TestFail,
)
from .generators import (
    booleans,
    floats,
    integers,
    integers_inclusive,
    optional,
    select,
    vec,
    weighted,
)
from .integrity import StrategyContractError
from .rng import TestRng
from .runner import CaseContext, Config, TestRunner
from .strategy import (
    Strategy,
    ValueTree,
    array,
    check_strategy_sanity,
    just,
    lazy_just,
    tuples,
    uniform_array,
    union,
    weighted_union,
)
from .sugar import prop_assert, prop_assert_eq, prop_assert_ne, prop_assume, property_test

# Version information - Auto-populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

try:
    __version__ = _get_version("propengine")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "CaseContext",
    "Config",
    "PropEngineError",
    "Reason",
    "Strategy",
    "StrategyContractError",
    "TestAbort",
    "TestCaseError",
    "TestCaseFail",
    "TestCaseReject",
    "TestError",
    "TestFail",
    "TestRng",
    "TestRunner",
    "ValueTree",
    "__version__",
    "array",
    "booleans",
    "check_strategy_sanity",
    "floats",
    "integers",
    "integers_inclusive",
    "just",
    "lazy_just",
    "optional",
    "prop_assert",
    "prop_assert_eq",
    "prop_assert_ne",
    "prop_assume",
    "property_test",
    "select",
    "tuples",
    "uniform_array",
    "union",
    "vec",
    "weighted",
    "weighted_union",
]
