"""Test execution: configuration, caching, persistence and the run loop.

Python 3.13+. Zero external dependencies.
"""

from .config import Config, contextualize_config
from .context import CaseContext, RegenBudget
from .persistence import (
    FailurePersistence,
    FileFailurePersistence,
    MapFailurePersistence,
    NoopFailurePersistence,
    PersistedSeed,
)
from .result_cache import (
    BasicResultCache,
    CachedResult,
    NoopResultCache,
    ResultCache,
    basic_result_cache,
    noop_result_cache,
)
from .runner import TestRunner

__all__ = [
    "BasicResultCache",
    "CachedResult",
    "CaseContext",
    "Config",
    "FailurePersistence",
    "FileFailurePersistence",
    "MapFailurePersistence",
    "NoopFailurePersistence",
    "NoopResultCache",
    "PersistedSeed",
    "RegenBudget",
    "ResultCache",
    "TestRunner",
    "basic_result_cache",
    "contextualize_config",
    "noop_result_cache",
]
