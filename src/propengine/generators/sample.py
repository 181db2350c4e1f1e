"""Choosing from a fixed sequence of values."""

from __future__ import annotations

from collections.abc import Sequence

from propengine.strategy.traits import Strategy

from .num import integers

__all__ = ["select"]


def select[V](values: Sequence[V]) -> Strategy[V]:
    """Uniformly choose one of values; shrinks toward the first.

    Raises:
        ValueError: If values is empty
    """
    options = tuple(values)
    if not options:
        msg = "select() requires at least one value"
        raise ValueError(msg)
    return integers(0, len(options)).map(options.__getitem__)
