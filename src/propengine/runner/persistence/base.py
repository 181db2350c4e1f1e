"""FailurePersistence interface and the seed record it stores.

A backend maps a source file to the seeds of cases that failed in earlier
runs. The runner replays those seeds, in stored order, before generating
any fresh case.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass

from propengine.constants import EDGE_BIAS_SIZE
from propengine.rng import Seed

__all__ = [
    "FailurePersistence",
    "NoopFailurePersistence",
    "PersistedSeed",
    "decode_edge_bias",
    "encode_edge_bias",
]


def encode_edge_bias(edge_bias: float) -> bytes:
    """Encode an edge bias as 4 little-endian float32 bytes."""
    return struct.pack("<f", edge_bias)


def decode_edge_bias(data: bytes) -> float:
    """Decode 4 little-endian float32 bytes.

    Raises:
        ValueError: If data is not exactly 4 bytes
    """
    if len(data) != EDGE_BIAS_SIZE:
        msg = f"edge bias must be {EDGE_BIAS_SIZE} bytes, got {len(data)}"
        raise ValueError(msg)
    (value,) = struct.unpack("<f", data)
    return float(value)


@dataclass(frozen=True, slots=True)
class PersistedSeed:
    """Seed of a past failure plus the edge bias it was generated under.

    Attributes:
        seed: Per-case seed that reproduces the failing draw
        edge_bias: Raw float32 edge bias bytes, or None when not recorded
    """

    seed: Seed
    edge_bias: bytes | None = None

    @property
    def edge_bias_value(self) -> float | None:
        if self.edge_bias is None:
            return None
        return decode_edge_bias(self.edge_bias)


class FailurePersistence(ABC):
    """Storage for seeds of past failures, keyed by source file."""

    @abstractmethod
    def load_persisted_failures(self, source_file: str | None) -> list[PersistedSeed]:
        """Return the persisted seeds for source_file, in stored order."""

    @abstractmethod
    def save_persisted_failure(
        self,
        source_file: str | None,
        seed: PersistedSeed,
        shrunken_value: object,
    ) -> None:
        """Record a new failure.

        Args:
            source_file: Key of the test's source file
            seed: Seed of the failing case
            shrunken_value: Minimal failing value, stored for humans only
        """


class NoopFailurePersistence(FailurePersistence):
    """Backend that stores nothing."""

    def load_persisted_failures(self, source_file: str | None) -> list[PersistedSeed]:
        return []

    def save_persisted_failure(
        self,
        source_file: str | None,
        seed: PersistedSeed,
        shrunken_value: object,
    ) -> None:
        return None

    def __repr__(self) -> str:
        return "NoopFailurePersistence()"
