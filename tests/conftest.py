"""Pytest configuration for the PropEngine test suite.

Hypothesis drives the outer layer of many tests here: each example builds
propengine strategies or runs a whole TestRunner, including its shrink
search. Examples are therefore far more expensive than plain function
calls, and the profiles below keep the counts modest and switch off the
per-example deadline.

Profiles:
- dev: local runs, 200 examples
- ci: CI=true, 50 derandomized examples
- verbose: 100 examples with Hypothesis progress output

HYPOTHESIS_PROFILE=<name> overrides the detection.

Tests marked fuzz (tests/test_engine_fuzz.py) run thousands of engine cases
and are skipped unless requested with `pytest -m fuzz` or by naming the file.
"""

import os

import pytest
from hypothesis import Phase, Verbosity, settings

# =============================================================================
# HYPOTHESIS PROFILES
# =============================================================================

_PHASES = [Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink]

settings.register_profile("dev", max_examples=200, phases=_PHASES, deadline=None)

settings.register_profile(
    "ci",
    max_examples=50,
    phases=_PHASES,
    deadline=None,
    derandomize=True,
    print_blob=True,
)

settings.register_profile(
    "verbose",
    max_examples=100,
    phases=_PHASES,
    deadline=None,
    verbosity=Verbosity.verbose,
)


def _detect_profile() -> str:
    """HYPOTHESIS_PROFILE if it names a profile, else "ci" under CI, else "dev"."""
    explicit = os.environ.get("HYPOTHESIS_PROFILE")
    if explicit in ("dev", "ci", "verbose"):
        return explicit
    if os.environ.get("CI") == "true":
        return "ci"
    return "dev"


settings.load_profile(_detect_profile())


# =============================================================================
# ENGINE FUZZ RUNS
# =============================================================================


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Skip fuzz-marked tests unless they were asked for.

    The marker itself is registered in pyproject.toml.
    """
    if "fuzz" in str(config.getoption("-m", default="")):
        return
    if any("test_engine_fuzz" in str(arg) for arg in config.invocation_params.args):
        return

    skip_fuzz = pytest.mark.skip(reason="Engine fuzz run - use: pytest -m fuzz")
    for item in items:
        if "fuzz" in item.keywords:
            item.add_marker(skip_fuzz)
