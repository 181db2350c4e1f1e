"""XorShift128 generator (Marsaglia, 32-bit words).

Fast and reproducible; not suitable for anything but test input generation.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import struct

from propengine.constants import XORSHIFT_SEED_SIZE

__all__ = ["XorShiftRng"]

_MASK32 = 0xFFFF_FFFF

# An all-zero state would emit zeros forever.
_ZERO_SEED_REPLACEMENT = 0x0BAD_5EED


class XorShiftRng:
    """XorShift128 state machine over four 32-bit words."""

    __slots__ = ("_w", "_x", "_y", "_z")

    def __init__(self, seed: bytes) -> None:
        """Initialize from a 16-byte seed (four little-endian u32 words).

        Raises:
            ValueError: If the seed is not exactly 16 bytes
        """
        if len(seed) != XORSHIFT_SEED_SIZE:
            msg = f"XorShift seed must be {XORSHIFT_SEED_SIZE} bytes, got {len(seed)}"
            raise ValueError(msg)
        words = struct.unpack("<4I", seed)
        if not any(words):
            words = (_ZERO_SEED_REPLACEMENT,) * 4
        self._x, self._y, self._z, self._w = words

    def next_u32(self) -> int:
        """Advance the state and return the next 32-bit output."""
        x = self._x
        t = (x ^ (x << 11)) & _MASK32
        self._x, self._y, self._z = self._y, self._z, self._w
        w = self._w
        self._w = (w ^ (w >> 19) ^ (t ^ (t >> 8))) & _MASK32
        return self._w

    def clone(self) -> XorShiftRng:
        """Independent copy continuing from the same state."""
        other = XorShiftRng.__new__(XorShiftRng)
        other._x, other._y, other._z, other._w = self._x, self._y, self._z, self._w
        return other
