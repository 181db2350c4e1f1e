"""Failure persistence backends.

Python 3.13+. Zero external dependencies.
"""

from .base import (
    FailurePersistence,
    NoopFailurePersistence,
    PersistedSeed,
    decode_edge_bias,
    encode_edge_bias,
)
from .file import FileFailurePersistence
from .memory import MapFailurePersistence

__all__ = [
    "FailurePersistence",
    "FileFailurePersistence",
    "MapFailurePersistence",
    "NoopFailurePersistence",
    "PersistedSeed",
    "decode_edge_bias",
    "encode_edge_bias",
]
