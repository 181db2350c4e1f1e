"""Result caching for test case classification.

During shrinking the same candidate value is often reached along different
simplify()/complicate() paths. A ResultCache remembers how each rendered
value was classified (pass, reject or fail) so the test body does not run
again for a value it has already seen.

Architecture:
    - Keyed by repr(value); two values with the same repr are the same case
    - LRU eviction via OrderedDict
    - Owned by exactly one run; no locking
    - Zero overhead when disabled (NoopResultCache)

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from propengine.diagnostics import Reason
from propengine.enums import CaseOutcome

__all__ = [
    "BasicResultCache",
    "CachedResult",
    "NoopResultCache",
    "ResultCache",
    "ResultCacheFactory",
    "basic_result_cache",
    "noop_result_cache",
]

DEFAULT_RESULT_CACHE_SIZE = 4096


@dataclass(frozen=True, slots=True)
class CachedResult:
    """Classification of one case.

    Attributes:
        outcome: PASS, REJECT or FAIL
        reason: Why the case was rejected or failed (None for PASS)
    """

    outcome: CaseOutcome
    reason: Reason | None = None

    @classmethod
    def passed(cls) -> CachedResult:
        return cls(CaseOutcome.PASS)

    @classmethod
    def rejected(cls, reason: Reason) -> CachedResult:
        return cls(CaseOutcome.REJECT, reason)

    @classmethod
    def failed(cls, reason: Reason) -> CachedResult:
        return cls(CaseOutcome.FAIL, reason)


class ResultCache(Protocol):
    """Storage for case classifications, keyed by rendered value."""

    def get(self, key: str) -> CachedResult | None:
        """Return the stored classification, or None on a miss."""
        ...

    def put(self, key: str, result: CachedResult) -> None:
        """Store a classification."""
        ...

    def stats(self) -> dict[str, int | float]:
        """Return cache metrics."""
        ...


type ResultCacheFactory = Callable[[], ResultCache]


class NoopResultCache:
    """Cache that never stores anything. The default."""

    __slots__ = ()

    def get(self, key: str) -> CachedResult | None:
        return None

    def put(self, key: str, result: CachedResult) -> None:
        return None

    def stats(self) -> dict[str, int | float]:
        return {"size": 0, "maxsize": 0, "hits": 0, "misses": 0, "hit_rate": 0.0}


class BasicResultCache:
    """LRU cache of case classifications.

    Attributes:
        maxsize: Maximum number of cache entries
        hits: Number of cache hits (for metrics)
        misses: Number of cache misses (for metrics)
    """

    __slots__ = ("_cache", "_hits", "_maxsize", "_misses")

    def __init__(self, maxsize: int = DEFAULT_RESULT_CACHE_SIZE) -> None:
        """Initialize result cache.

        Args:
            maxsize: Maximum number of entries (default: 4096)

        Raises:
            ValueError: If maxsize is not positive
        """
        if maxsize <= 0:
            msg = "maxsize must be positive"
            raise ValueError(msg)

        self._cache: OrderedDict[str, CachedResult] = OrderedDict()
        self._maxsize = maxsize
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> CachedResult | None:
        if key in self._cache:
            self._cache.move_to_end(key)
            self._hits += 1
            return self._cache[key]
        self._misses += 1
        return None

    def put(self, key: str, result: CachedResult) -> None:
        if key in self._cache:
            self._cache.move_to_end(key)
        elif len(self._cache) >= self._maxsize:
            self._cache.popitem(last=False)
        self._cache[key] = result

    def clear(self) -> None:
        """Clear all entries and reset metrics."""
        self._cache.clear()
        self._hits = 0
        self._misses = 0

    def stats(self) -> dict[str, int | float]:
        """Get cache statistics.

        Returns:
            Dict with keys:
            - size (int): Current number of cached entries
            - maxsize (int): Maximum cache capacity
            - hits (int): Number of cache hits
            - misses (int): Number of cache misses
            - hit_rate (float): Hit rate as percentage (0.0-100.0)
        """
        total = self._hits + self._misses
        hit_rate = (self._hits / total * 100) if total > 0 else 0.0
        return {
            "size": len(self._cache),
            "maxsize": self._maxsize,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(hit_rate, 2),
        }

    @property
    def maxsize(self) -> int:
        return self._maxsize

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    def __len__(self) -> int:
        return len(self._cache)


def noop_result_cache() -> ResultCache:
    """Factory for a cache that stores nothing."""
    return NoopResultCache()


def basic_result_cache(maxsize: int = DEFAULT_RESULT_CACHE_SIZE) -> ResultCache:
    """Factory for a bounded LRU cache.

    Example:
        Config(result_cache=basic_result_cache) caches the cases of each run;
        use functools.partial(basic_result_cache, maxsize=...) to resize.
    """
    return BasicResultCache(maxsize)
