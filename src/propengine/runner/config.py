"""Run configuration.

Config is one frozen dataclass holding every knob of a TestRunner. The
process-wide default, Config.default(), starts from the built-in defaults,
enables file-backed failure persistence, and then applies PROPENGINE_*
environment variables through contextualize_config(). It is computed once
per process.

Environment Variables:
    PROPENGINE_CASES                   cases
    PROPENGINE_MAX_LOCAL_REJECTS       max_local_rejects
    PROPENGINE_MAX_GLOBAL_REJECTS      max_global_rejects
    PROPENGINE_MAX_FLAT_MAP_REGENS     max_flat_map_regens
    PROPENGINE_MAX_SHRINK_TIME         max_shrink_time (milliseconds)
    PROPENGINE_MAX_SHRINK_ITERS        max_shrink_iters
    PROPENGINE_MAX_DEFAULT_SIZE_RANGE  max_default_size_range
    PROPENGINE_VERBOSE                 verbose (0, 1 or 2)
    PROPENGINE_RNG_ALGORITHM           rng_algorithm ("xs" or "cc")
    PROPENGINE_RNG_SEED                rng_seed ("random", "N", "u64-N", "hex-...")
    PROPENGINE_DISABLE_FAILURE_PERSISTENCE  any value disables persistence

Malformed values and unknown PROPENGINE_* names are logged as warnings and
the previous value is kept.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import functools
import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from propengine.constants import (
    DEFAULT_CASES,
    DEFAULT_MAX_DEFAULT_SIZE_RANGE,
    DEFAULT_MAX_FLAT_MAP_REGENS,
    DEFAULT_MAX_GLOBAL_REJECTS,
    DEFAULT_MAX_LOCAL_REJECTS,
    DEFAULT_MAX_SHRINK_TIME,
    ENV_CASES,
    ENV_DISABLE_FAILURE_PERSISTENCE,
    ENV_MAX_DEFAULT_SIZE_RANGE,
    ENV_MAX_FLAT_MAP_REGENS,
    ENV_MAX_GLOBAL_REJECTS,
    ENV_MAX_LOCAL_REJECTS,
    ENV_MAX_SHRINK_ITERS,
    ENV_MAX_SHRINK_TIME,
    ENV_PREFIX,
    ENV_RNG_ALGORITHM,
    ENV_RNG_SEED,
    ENV_VERBOSE,
    SHRINK_ITERS_PER_CASE,
)
from propengine.enums import RngAlgorithm
from propengine.rng import HexSeed, RandomSeed, RngSeed, parse_rng_seed

from .persistence import FailurePersistence, FileFailurePersistence
from .result_cache import ResultCacheFactory, noop_result_cache

__all__ = ["Config", "contextualize_config"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Config:
    """Immutable configuration of a TestRunner.

    All fields have usable defaults; Config() runs 256 cases with a random
    seed, no result caching and no failure persistence.

    Attributes:
        cases: Successful cases required for the run to pass
        max_local_rejects: Rejected draws (filters) before aborting
        max_global_rejects: Rejections by the test body before aborting
        max_flat_map_regens: Run-wide flat_map() regenerations while shrinking
        max_shrink_time: Shrink wall-clock limit in milliseconds (0 = none)
        max_shrink_iters: Shrink steps limit (None = SHRINK_ITERS_PER_CASE * cases)
        max_default_size_range: Exclusive upper size bound for collections
            generated without an explicit size
        verbose: 0 silent, 1 failures and shrink results, 2 per-probe trace
        rng_algorithm: PRNG algorithm for fresh cases
        rng_seed: How the run's master generator is seeded
        failure_persistence: Backend for regression seeds (None = disabled)
        result_cache: Factory creating the per-run ResultCache
        source_file: Source file of the test, the key for persistence
        test_name: Name of the test, for log messages

    Example:
        >>> config = Config(cases=32)
        >>> config.effective_max_shrink_iters()
        128
    """

    cases: int = DEFAULT_CASES
    max_local_rejects: int = DEFAULT_MAX_LOCAL_REJECTS
    max_global_rejects: int = DEFAULT_MAX_GLOBAL_REJECTS
    max_flat_map_regens: int = DEFAULT_MAX_FLAT_MAP_REGENS
    max_shrink_time: int = DEFAULT_MAX_SHRINK_TIME
    max_shrink_iters: int | None = None
    max_default_size_range: int = DEFAULT_MAX_DEFAULT_SIZE_RANGE
    verbose: int = 0
    rng_algorithm: RngAlgorithm = RngAlgorithm.CHACHA
    rng_seed: RngSeed = field(default_factory=RandomSeed)
    failure_persistence: FailurePersistence | None = None
    result_cache: ResultCacheFactory = noop_result_cache
    source_file: str | None = None
    test_name: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration values at construction time.

        Raises:
            ValueError: If a count or limit is negative, or a HexSeed does not
                match the algorithm's seed size
        """
        for name in (
            "cases",
            "max_local_rejects",
            "max_global_rejects",
            "max_flat_map_regens",
            "max_shrink_time",
            "max_default_size_range",
            "verbose",
        ):
            if getattr(self, name) < 0:
                msg = f"{name} must be non-negative"
                raise ValueError(msg)
        if self.max_shrink_iters is not None and self.max_shrink_iters < 0:
            msg = "max_shrink_iters must be non-negative"
            raise ValueError(msg)
        if isinstance(self.rng_seed, HexSeed) and (
            len(self.rng_seed.data) != self.rng_algorithm.seed_size
        ):
            msg = (
                f"{self.rng_algorithm.name} requires a {self.rng_algorithm.seed_size}-byte "
                f"seed, got {len(self.rng_seed.data)} bytes"
            )
            raise ValueError(msg)

    @classmethod
    def default(cls) -> Config:
        """Process-wide default: file persistence plus environment overrides."""
        return _default_config()

    def effective_max_shrink_iters(self) -> int:
        """Shrink step limit, resolving the automatic default."""
        if self.max_shrink_iters is None:
            return self.cases * SHRINK_ITERS_PER_CASE
        return self.max_shrink_iters

    def with_cases(self, cases: int) -> Config:
        return replace(self, cases=cases)

    def with_source_file(self, source_file: str | None) -> Config:
        return replace(self, source_file=source_file)

    def with_failure_persistence(self, persistence: FailurePersistence | None) -> Config:
        return replace(self, failure_persistence=persistence)


def _parse_count(text: str) -> int:
    value = int(text.strip(), 10)
    if value < 0:
        msg = f"negative value {value}"
        raise ValueError(msg)
    return value


_FIELD_PARSERS: dict[str, tuple[str, Callable[[str], Any], str]] = {
    ENV_CASES: ("cases", _parse_count, "a non-negative integer"),
    ENV_MAX_LOCAL_REJECTS: ("max_local_rejects", _parse_count, "a non-negative integer"),
    ENV_MAX_GLOBAL_REJECTS: ("max_global_rejects", _parse_count, "a non-negative integer"),
    ENV_MAX_FLAT_MAP_REGENS: ("max_flat_map_regens", _parse_count, "a non-negative integer"),
    ENV_MAX_SHRINK_TIME: ("max_shrink_time", _parse_count, "a non-negative integer"),
    ENV_MAX_SHRINK_ITERS: ("max_shrink_iters", _parse_count, "a non-negative integer"),
    ENV_MAX_DEFAULT_SIZE_RANGE: (
        "max_default_size_range",
        _parse_count,
        "a non-negative integer",
    ),
    ENV_VERBOSE: ("verbose", _parse_count, "a verbosity level"),
    ENV_RNG_ALGORITHM: ("rng_algorithm", RngAlgorithm.parse, "an RNG algorithm"),
    ENV_RNG_SEED: ("rng_seed", parse_rng_seed, "an RNG seed"),
}


def contextualize_config(config: Config, environ: Mapping[str, str] | None = None) -> Config:
    """Apply PROPENGINE_* environment variables to config.

    Args:
        config: Starting configuration
        environ: Variables to read (default: os.environ)

    Returns:
        New Config with every well-formed override applied
    """
    if environ is None:
        environ = os.environ

    changes: dict[str, Any] = {}
    for var, raw in sorted(environ.items()):
        if not var.startswith(ENV_PREFIX):
            continue
        if var == ENV_DISABLE_FAILURE_PERSISTENCE:
            changes["failure_persistence"] = None
            continue
        entry = _FIELD_PARSERS.get(var)
        if entry is None:
            logger.warning("Ignoring unknown environment variable %s", var)
            continue
        name, parse, kind = entry
        try:
            changes[name] = parse(raw)
        except ValueError:
            logger.warning(
                "Environment variable %s=%r is not %s; keeping %s",
                var,
                raw,
                kind,
                changes.get(name, getattr(config, name)),
            )

    seed: RngSeed = changes.get("rng_seed", config.rng_seed)
    algorithm: RngAlgorithm = changes.get("rng_algorithm", config.rng_algorithm)
    if isinstance(seed, HexSeed) and len(seed.data) != algorithm.seed_size:
        dropped = "rng_seed" if "rng_seed" in changes else "rng_algorithm"
        logger.warning(
            "Hex seed has %d bytes but %s needs %d; keeping %s=%s",
            len(seed.data),
            algorithm.name,
            algorithm.seed_size,
            dropped,
            getattr(config, dropped),
        )
        del changes[dropped]

    return replace(config, **changes)


@functools.lru_cache(maxsize=1)
def _default_config() -> Config:
    base = Config(failure_persistence=FileFailurePersistence.source_parallel())
    return contextualize_config(base)
