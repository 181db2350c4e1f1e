"""Seeds and seed modes.

Seed is the exact, algorithm-tagged initial state of a TestRng; it is what
gets persisted for regression replay. RngSeed is the user-facing choice of
how a run's master RNG is seeded:

    RandomSeed()        fresh OS entropy per run
    FixedSeed(n)        expand a 64-bit integer into a full seed
    HexSeed(data)       use the given seed bytes verbatim

Textual forms:
    Seed persistence:   "cc 0f1e...", "xs 0f1e...", legacy "xs d0 d1 d2 d3"
    RngSeed:            "random", "42", "u64-42", "hex-0f1e..."

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from propengine.enums import RngAlgorithm

__all__ = [
    "FixedSeed",
    "HexSeed",
    "RandomSeed",
    "RngSeed",
    "Seed",
    "expand_u64",
    "parse_rng_seed",
]

_MASK32 = 0xFFFF_FFFF
_MASK64 = 0xFFFF_FFFF_FFFF_FFFF

# PCG32 multiplier and increment used to stretch a u64 into seed bytes.
_PCG_MUL = 6364136223846793005
_PCG_INC = 11634580027462260723


def expand_u64(value: int, size: int) -> bytes:
    """Stretch a 64-bit integer into `size` seed bytes with PCG32.

    The state is advanced before each output so that low-entropy inputs
    (0, 1, 2, ...) still produce well-mixed seeds.

    Args:
        value: Seed integer (reduced modulo 2**64)
        size: Number of bytes to produce (multiple of 4)

    Returns:
        Seed bytes
    """
    state = value & _MASK64
    out = bytearray()
    while len(out) < size:
        state = (state * _PCG_MUL + _PCG_INC) & _MASK64
        xorshifted = (((state >> 18) ^ state) >> 27) & _MASK32
        rot = state >> 59
        word = ((xorshifted >> rot) | (xorshifted << ((-rot) & 31))) & _MASK32
        out += struct.pack("<I", word)
    return bytes(out[:size])


@dataclass(frozen=True, slots=True)
class Seed:
    """Algorithm-tagged PRNG seed.

    Attributes:
        algorithm: Algorithm the seed initializes
        data: Raw seed bytes (16 for XorShift, 32 for ChaCha)
    """

    algorithm: RngAlgorithm
    data: bytes

    def __post_init__(self) -> None:
        """Validate seed length against the algorithm.

        Raises:
            ValueError: If data has the wrong length for the algorithm
        """
        if len(self.data) != self.algorithm.seed_size:
            msg = (
                f"{self.algorithm.name} seed must be {self.algorithm.seed_size} bytes, "
                f"got {len(self.data)}"
            )
            raise ValueError(msg)

    @classmethod
    def from_u64(cls, algorithm: RngAlgorithm, value: int) -> Seed:
        """Derive a full seed from a 64-bit integer."""
        return cls(algorithm, expand_u64(value, algorithm.seed_size))

    def to_persistence(self) -> str:
        """Encode as "<tag> <hex>"."""
        return f"{self.algorithm} {self.data.hex()}"

    @classmethod
    def from_persistence(cls, text: str) -> Seed | None:
        """Decode a persisted seed.

        Accepts "<tag> <hex>" for both algorithms plus the legacy XorShift
        form of four decimal 32-bit words, with or without the "xs" tag.

        Returns:
            Parsed Seed, or None if text is not a valid seed
        """
        parts = text.split()
        match parts:
            case [tag, hex_data]:
                try:
                    algorithm = RngAlgorithm.parse(tag)
                    data = bytes.fromhex(hex_data)
                except ValueError:
                    return None
                if len(data) != algorithm.seed_size:
                    return None
                return cls(algorithm, data)
            case ["xs", a, b, c, d] | [a, b, c, d]:
                try:
                    words = [int(w) for w in (a, b, c, d)]
                except ValueError:
                    return None
                if any(w < 0 or w > _MASK32 for w in words):
                    return None
                return cls(RngAlgorithm.XORSHIFT, struct.pack("<4I", *words))
            case _:
                return None

    def __str__(self) -> str:
        return self.to_persistence()


@dataclass(frozen=True, slots=True)
class RandomSeed:
    """Seed the run from OS entropy."""

    def __str__(self) -> str:
        return "random"


@dataclass(frozen=True, slots=True)
class FixedSeed:
    """Seed the run from a 64-bit integer.

    Attributes:
        value: Seed integer, 0 <= value < 2**64
    """

    value: int

    def __post_init__(self) -> None:
        """Validate the integer range.

        Raises:
            ValueError: If value is outside the unsigned 64-bit range
        """
        if not 0 <= self.value <= _MASK64:
            msg = f"Fixed seed must fit in 64 unsigned bits, got {self.value}"
            raise ValueError(msg)

    def __str__(self) -> str:
        return f"u64-{self.value}"


@dataclass(frozen=True, slots=True)
class HexSeed:
    """Seed the run with explicit seed bytes.

    Attributes:
        data: Raw seed; its length must match the configured algorithm
    """

    data: bytes

    def __str__(self) -> str:
        return f"hex-{self.data.hex()}"


type RngSeed = RandomSeed | FixedSeed | HexSeed


def parse_rng_seed(text: str) -> RngSeed:
    """Parse "random", "<int>", "u64-<int>" or "hex-<hex>".

    Raises:
        ValueError: If text is not a recognized seed mode
    """
    text = text.strip()
    if text == "random":
        return RandomSeed()
    if text.startswith("hex-"):
        return HexSeed(bytes.fromhex(text.removeprefix("hex-")))
    return FixedSeed(int(text.removeprefix("u64-"), 10))
