"""Enumerations for PropEngine type-safe constants.

Uses StrEnum (Python 3.11+) for automatic string conversion.
StrEnum members are strings themselves, eliminating boilerplate __str__ methods.

Python 3.13+.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum

from propengine.constants import CHACHA_SEED_SIZE, XORSHIFT_SEED_SIZE


class RngAlgorithm(StrEnum):
    """Pseudorandom algorithm backing a TestRng.

    The value doubles as the tag written in front of persisted seeds:
    str(RngAlgorithm.CHACHA) == "cc"
    """

    XORSHIFT = "xs"
    """XorShift128: 16-byte seed, fast, statistically weak."""

    CHACHA = "cc"
    """ChaCha20 keystream: 32-byte seed. Default."""

    @property
    def seed_size(self) -> int:
        """Seed length in bytes for this algorithm."""
        return XORSHIFT_SEED_SIZE if self is RngAlgorithm.XORSHIFT else CHACHA_SEED_SIZE

    @classmethod
    def parse(cls, text: str) -> RngAlgorithm:
        """Parse an algorithm name or tag ("xs", "xorshift", "cc", "chacha").

        Raises:
            ValueError: If text names no known algorithm
        """
        match text.strip().lower():
            case "xs" | "xorshift":
                return cls.XORSHIFT
            case "cc" | "chacha":
                return cls.CHACHA
            case _:
                msg = f"Unknown RNG algorithm: {text!r}"
                raise ValueError(msg)


class Verbosity(IntEnum):
    """Runner logging verbosity."""

    SILENT = 0
    """Runner emits nothing on its own."""

    FAILURES = 1
    """Failures, shrink outcomes and aborts."""

    TRACE = 2
    """Every generated case and shrink probe."""


class PersistenceMode(StrEnum):
    """Where FileFailurePersistence keeps the regression file for a source."""

    OFF = "off"
    """Never read or write anything."""

    SOURCE_PARALLEL = "source_parallel"
    """Mirror the source tree under a directory at the project root."""

    WITH_SOURCE = "with_source"
    """Sibling of the source file with a different extension."""

    DIRECT = "direct"
    """One fixed path for every source file."""


class CaseOutcome(StrEnum):
    """Classification of one predicate execution."""

    PASS = "pass"
    REJECT = "reject"
    FAIL = "fail"


__all__ = [
    "CaseOutcome",
    "PersistenceMode",
    "RngAlgorithm",
    "Verbosity",
]
