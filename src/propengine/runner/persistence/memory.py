"""In-memory failure persistence."""

from __future__ import annotations

from .base import FailurePersistence, PersistedSeed

__all__ = ["MapFailurePersistence"]


class MapFailurePersistence(FailurePersistence):
    """Keeps persisted seeds in a dict for the lifetime of the object.

    Seeds are kept per source file in insertion order; saving a seed that is
    already stored for the same source does nothing. A None source file is
    never stored.

    Attributes:
        map: source file -> persisted seeds
    """

    def __init__(self) -> None:
        self.map: dict[str, list[PersistedSeed]] = {}

    def load_persisted_failures(self, source_file: str | None) -> list[PersistedSeed]:
        if source_file is None:
            return []
        return list(self.map.get(source_file, ()))

    def save_persisted_failure(
        self,
        source_file: str | None,
        seed: PersistedSeed,
        shrunken_value: object,
    ) -> None:
        if source_file is None:
            return
        stored = self.map.setdefault(source_file, [])
        if all(existing.seed != seed.seed for existing in stored):
            stored.append(seed)

    def __repr__(self) -> str:
        return f"MapFailurePersistence({self.map!r})"
