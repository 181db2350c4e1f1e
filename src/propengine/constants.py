"""Shared constants for PropEngine.

This module provides centralized configuration constants used across
the strategy, generator and runner packages. Placing constants here avoids
circular imports and provides a single source of truth.

Constants are grouped by domain:
- Run budgets: Default case counts and rejection ceilings
- Shrink budgets: Iteration and time ceilings for the shrink search
- RNG: Seed sizes and the fixed seeds used for deterministic runs
- Environment: Variable names read by contextualize_config()
- Persistence: Regression file layout

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Run budgets
    "DEFAULT_CASES",
    "DEFAULT_MAX_LOCAL_REJECTS",
    "DEFAULT_MAX_GLOBAL_REJECTS",
    "DEFAULT_MAX_FLAT_MAP_REGENS",
    "DEFAULT_MAX_DEFAULT_SIZE_RANGE",
    # Shrink budgets
    "DEFAULT_MAX_SHRINK_TIME",
    "SHRINK_ITERS_PER_CASE",
    # RNG
    "XORSHIFT_SEED_SIZE",
    "CHACHA_SEED_SIZE",
    "EDGE_BIAS_SIZE",
    "DEFAULT_EDGE_BIAS",
    "DETERMINISTIC_XORSHIFT_SEED",
    "DETERMINISTIC_CHACHA_SEED",
    # Environment
    "ENV_PREFIX",
    "ENV_CASES",
    "ENV_MAX_LOCAL_REJECTS",
    "ENV_MAX_GLOBAL_REJECTS",
    "ENV_MAX_FLAT_MAP_REGENS",
    "ENV_MAX_SHRINK_TIME",
    "ENV_MAX_SHRINK_ITERS",
    "ENV_MAX_DEFAULT_SIZE_RANGE",
    "ENV_VERBOSE",
    "ENV_RNG_ALGORITHM",
    "ENV_RNG_SEED",
    "ENV_DISABLE_FAILURE_PERSISTENCE",
    # Persistence
    "DEFAULT_REGRESSIONS_DIR",
    "PERSISTENCE_HEADER",
    "PROJECT_ROOT_MARKERS",
    # Sanity checking
    "SANITY_CASES",
    "SANITY_MAX_STEPS",
]

# ============================================================================
# RUN BUDGETS
# ============================================================================

# Successful cases required before a run is reported as passing.
DEFAULT_CASES: int = 256

# Rejections clustered on draw attempts (filters inside strategies).
# High because a single selective filter legitimately rejects many draws.
DEFAULT_MAX_LOCAL_REJECTS: int = 65_536

# Rejections raised by the test body itself (prop_assume).
DEFAULT_MAX_GLOBAL_REJECTS: int = 1024

# Fresh inner trees a whole run may draw while complicating flat-mapped
# values. Shared by every Flatten tree of the run; bounds the blow-up of
# nested flat_map() chains.
DEFAULT_MAX_FLAT_MAP_REGENS: int = 1_000_000

# Upper bound (exclusive) of collection sizes when no size is given.
DEFAULT_MAX_DEFAULT_SIZE_RANGE: int = 100

# ============================================================================
# SHRINK BUDGETS
# ============================================================================

# Wall-clock shrink limit in milliseconds. 0 disables the limit.
DEFAULT_MAX_SHRINK_TIME: int = 0

# When max_shrink_iters is unset the ceiling is cases * this factor.
SHRINK_ITERS_PER_CASE: int = 4

# ============================================================================
# RNG
# ============================================================================

XORSHIFT_SEED_SIZE: int = 16
CHACHA_SEED_SIZE: int = 32

# Persisted edge bias is a little-endian float32.
EDGE_BIAS_SIZE: int = 4

# Probability that a float draw lands on a boundary value.
DEFAULT_EDGE_BIAS: float = 0.25

# Fixed seeds used by TestRng.deterministic(). Changing them changes every
# deterministic test's draw sequence.
DETERMINISTIC_XORSHIFT_SEED: bytes = bytes.fromhex("f4161648c3ac77ac72200bea99672d6d")
DETERMINISTIC_CHACHA_SEED: bytes = bytes.fromhex(
    "f4161648c3ac77ac72200bea99672d6d0e4fd9c1c7a3e3ba1c81a1f0ae5c7f35"
)

# ============================================================================
# ENVIRONMENT
# ============================================================================

ENV_PREFIX: str = "PROPENGINE_"
ENV_CASES: str = "PROPENGINE_CASES"
ENV_MAX_LOCAL_REJECTS: str = "PROPENGINE_MAX_LOCAL_REJECTS"
ENV_MAX_GLOBAL_REJECTS: str = "PROPENGINE_MAX_GLOBAL_REJECTS"
ENV_MAX_FLAT_MAP_REGENS: str = "PROPENGINE_MAX_FLAT_MAP_REGENS"
ENV_MAX_SHRINK_TIME: str = "PROPENGINE_MAX_SHRINK_TIME"
ENV_MAX_SHRINK_ITERS: str = "PROPENGINE_MAX_SHRINK_ITERS"
ENV_MAX_DEFAULT_SIZE_RANGE: str = "PROPENGINE_MAX_DEFAULT_SIZE_RANGE"
ENV_VERBOSE: str = "PROPENGINE_VERBOSE"
ENV_RNG_ALGORITHM: str = "PROPENGINE_RNG_ALGORITHM"
ENV_RNG_SEED: str = "PROPENGINE_RNG_SEED"
ENV_DISABLE_FAILURE_PERSISTENCE: str = "PROPENGINE_DISABLE_FAILURE_PERSISTENCE"

# ============================================================================
# PERSISTENCE
# ============================================================================

DEFAULT_REGRESSIONS_DIR: str = "propengine-regressions"

PERSISTENCE_HEADER: str = (
    "# Seeds for failure cases propengine has generated in the past. It is\n"
    "# automatically read and these particular cases re-run before any\n"
    "# novel cases are generated.\n"
    "#\n"
    "# It is recommended to check this file in to source control so that\n"
    "# everyone who runs the test benefits from these saved cases.\n"
)

# Files whose presence marks a directory as the project root.
PROJECT_ROOT_MARKERS: tuple[str, ...] = ("pyproject.toml", "setup.cfg", "setup.py")

# ============================================================================
# SANITY CHECKING
# ============================================================================

# Trees generated by check_strategy_sanity().
SANITY_CASES: int = 1024

# Consecutive simplify/complicate steps tolerated before declaring a loop.
SANITY_MAX_STEPS: int = 65_536
