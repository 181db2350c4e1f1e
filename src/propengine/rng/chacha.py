"""ChaCha20 keystream generator.

The 32-byte seed is the key; the nonce is zero and the 64-bit block counter
starts at zero, so the output is the raw ChaCha20 keystream read as
little-endian 32-bit words.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import struct

from propengine.constants import CHACHA_SEED_SIZE

__all__ = ["ChaChaRng"]

_MASK32 = 0xFFFF_FFFF
_MASK64 = 0xFFFF_FFFF_FFFF_FFFF

# "expand 32-byte k"
_SIGMA = (0x61707865, 0x3320646E, 0x79622D32, 0x6B206574)

_DOUBLE_ROUNDS = 10
_BLOCK_WORDS = 16


def _rotl(value: int, shift: int) -> int:
    return ((value << shift) & _MASK32) | (value >> (32 - shift))


def _quarter_round(s: list[int], a: int, b: int, c: int, d: int) -> None:
    s[a] = (s[a] + s[b]) & _MASK32
    s[d] = _rotl(s[d] ^ s[a], 16)
    s[c] = (s[c] + s[d]) & _MASK32
    s[b] = _rotl(s[b] ^ s[c], 12)
    s[a] = (s[a] + s[b]) & _MASK32
    s[d] = _rotl(s[d] ^ s[a], 8)
    s[c] = (s[c] + s[d]) & _MASK32
    s[b] = _rotl(s[b] ^ s[c], 7)


def chacha20_block(key: tuple[int, ...], counter: int) -> list[int]:
    """Compute one 64-byte keystream block as 16 words.

    Args:
        key: Eight 32-bit key words
        counter: 64-bit block counter

    Returns:
        Sixteen 32-bit output words
    """
    state = [*_SIGMA, *key, counter & _MASK32, (counter >> 32) & _MASK32, 0, 0]
    working = list(state)
    for _ in range(_DOUBLE_ROUNDS):
        _quarter_round(working, 0, 4, 8, 12)
        _quarter_round(working, 1, 5, 9, 13)
        _quarter_round(working, 2, 6, 10, 14)
        _quarter_round(working, 3, 7, 11, 15)
        _quarter_round(working, 0, 5, 10, 15)
        _quarter_round(working, 1, 6, 11, 12)
        _quarter_round(working, 2, 7, 8, 13)
        _quarter_round(working, 3, 4, 9, 14)
    return [(w + s) & _MASK32 for w, s in zip(working, state, strict=True)]


class ChaChaRng:
    """Buffered ChaCha20 keystream reader."""

    __slots__ = ("_buffer", "_counter", "_index", "_key")

    def __init__(self, seed: bytes) -> None:
        """Initialize from a 32-byte key.

        Raises:
            ValueError: If the seed is not exactly 32 bytes
        """
        if len(seed) != CHACHA_SEED_SIZE:
            msg = f"ChaCha seed must be {CHACHA_SEED_SIZE} bytes, got {len(seed)}"
            raise ValueError(msg)
        self._key: tuple[int, ...] = struct.unpack("<8I", seed)
        self._counter = 0
        self._buffer: list[int] = []
        self._index = _BLOCK_WORDS

    def next_u32(self) -> int:
        """Return the next keystream word, generating a block when drained."""
        if self._index >= _BLOCK_WORDS:
            self._buffer = chacha20_block(self._key, self._counter)
            self._counter = (self._counter + 1) & _MASK64
            self._index = 0
        word = self._buffer[self._index]
        self._index += 1
        return word

    def clone(self) -> ChaChaRng:
        """Independent copy continuing from the same keystream position."""
        other = ChaChaRng.__new__(ChaChaRng)
        other._key = self._key
        other._counter = self._counter
        other._buffer = list(self._buffer)
        other._index = self._index
        return other
