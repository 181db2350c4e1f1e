"""Random number generation for PropEngine.

Two pluggable algorithms (XorShift128, ChaCha20) behind TestRng. A run is
fully reproducible from its Seed.

Python 3.13+. Zero external dependencies.
"""

from .seed import FixedSeed, HexSeed, RandomSeed, RngSeed, Seed, expand_u64, parse_rng_seed
from .test_rng import TestRng

__all__ = [
    "FixedSeed",
    "HexSeed",
    "RandomSeed",
    "RngSeed",
    "Seed",
    "TestRng",
    "expand_u64",
    "parse_rng_seed",
]
