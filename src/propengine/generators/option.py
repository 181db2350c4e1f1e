"""Optional values: None or a value from an inner strategy."""

from __future__ import annotations

from propengine.strategy.just import just
from propengine.strategy.traits import Strategy
from propengine.strategy.union import Union, weighted_union

__all__ = ["optional"]

_WEIGHT_SCALE = 1_000_000


def optional[V](strategy: Strategy[V], probability: float = 0.5) -> Union[V | None]:
    """None, or with the given probability a value from strategy.

    None is the simpler branch, so failing values shrink to None when the
    failure allows it.

    Raises:
        ValueError: If probability is outside [0, 1]
    """
    if not 0.0 <= probability <= 1.0:
        msg = f"probability must be within [0, 1], got {probability}"
        raise ValueError(msg)
    some = round(probability * _WEIGHT_SCALE)
    return weighted_union((_WEIGHT_SCALE - some, just(None)), (some, strategy))
