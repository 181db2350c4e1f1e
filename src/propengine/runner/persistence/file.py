"""File-backed failure persistence.

File Format:
    A comment header, then one line per failure:

        cc 5f3a...e1 eb 0000803e # shrinks to (10001, 10002)

    The first token is the seed algorithm tag, followed by the hex seed,
    optionally "eb" and the hex float32 edge bias, then a comment rendering
    the shrunken value. Blank lines and lines starting with "#" are ignored.
    Malformed lines are logged and skipped.

Concurrency:
    Independent test processes may append to the same file. Each failure is
    appended with a single write in append mode, and the header is created
    with exclusive-create mode so only one writer ever emits it.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from propengine.constants import DEFAULT_REGRESSIONS_DIR, PERSISTENCE_HEADER, PROJECT_ROOT_MARKERS
from propengine.enums import PersistenceMode
from propengine.rng import Seed

from .base import FailurePersistence, PersistedSeed

__all__ = ["FileFailurePersistence", "format_line", "parse_line"]

logger = logging.getLogger(__name__)

_EDGE_BIAS_TAG = "eb"


def format_line(seed: PersistedSeed, shrunken_value: object) -> str:
    """Render one persisted failure as a file line (with trailing newline)."""
    parts = [seed.seed.to_persistence()]
    if seed.edge_bias is not None:
        parts += [_EDGE_BIAS_TAG, seed.edge_bias.hex()]
    rendered = " ".join(repr(shrunken_value).split())
    return f"{' '.join(parts)} # shrinks to {rendered}\n"


def parse_line(line: str) -> PersistedSeed | None:
    """Parse one file line.

    Returns:
        PersistedSeed, or None if the line is not a valid record
    """
    body = line.split("#", 1)[0]
    tokens = body.split()
    edge_bias = None
    if _EDGE_BIAS_TAG in tokens:
        index = tokens.index(_EDGE_BIAS_TAG)
        if index != len(tokens) - 2:
            return None
        try:
            edge_bias = bytes.fromhex(tokens[index + 1])
        except ValueError:
            return None
        if len(edge_bias) != 4:
            return None
        tokens = tokens[:index]
    seed = Seed.from_persistence(" ".join(tokens))
    if seed is None:
        return None
    return PersistedSeed(seed, edge_bias)


def _find_project_root(start: Path) -> Path | None:
    for directory in (start, *start.parents):
        if any((directory / marker).exists() for marker in PROJECT_ROOT_MARKERS):
            return directory
    return None


@dataclass(frozen=True, slots=True)
class FileFailurePersistence(FailurePersistence):
    """Persist failures to text files, one per test source file.

    Attributes:
        mode: How the regression file path is derived
        argument: Directory (SOURCE_PARALLEL), extension (WITH_SOURCE) or
            path (DIRECT); unused for OFF

    Example:
        FileFailurePersistence.source_parallel() maps
        <root>/src/pkg/test_x.py to <root>/propengine-regressions/pkg/test_x.txt.
    """

    mode: PersistenceMode = PersistenceMode.SOURCE_PARALLEL
    argument: str = DEFAULT_REGRESSIONS_DIR

    @classmethod
    def off(cls) -> FileFailurePersistence:
        return cls(PersistenceMode.OFF, "")

    @classmethod
    def source_parallel(cls, directory: str = DEFAULT_REGRESSIONS_DIR) -> FileFailurePersistence:
        return cls(PersistenceMode.SOURCE_PARALLEL, directory)

    @classmethod
    def with_source(cls, extension: str) -> FileFailurePersistence:
        return cls(PersistenceMode.WITH_SOURCE, extension.lstrip("."))

    @classmethod
    def direct(cls, path: str) -> FileFailurePersistence:
        return cls(PersistenceMode.DIRECT, path)

    def resolve_path(self, source_file: str | None) -> Path | None:
        """Regression file for source_file, or None when nothing is persisted."""
        match self.mode:
            case PersistenceMode.OFF:
                return None
            case PersistenceMode.DIRECT:
                return Path(self.argument)
            case _:
                pass

        if source_file is None:
            logger.warning(
                "File-based failure persistence requires a source file; "
                "failures will not be persisted"
            )
            return None

        source = Path(source_file).resolve()
        if self.mode is PersistenceMode.WITH_SOURCE:
            return source.with_suffix(f".{self.argument}")

        root = _find_project_root(source.parent)
        if root is None:
            logger.debug("No project root above %s; storing regressions beside it", source)
            return source.parent / self.argument / f"{source.stem}.txt"

        relative = source.relative_to(root)
        parts = relative.parts
        if len(parts) > 1 and parts[0] == "src":
            relative = Path(*parts[1:])
        return root / self.argument / relative.with_suffix(".txt")

    def load_persisted_failures(self, source_file: str | None) -> list[PersistedSeed]:
        path = self.resolve_path(source_file)
        if path is None:
            return []
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            logger.warning("Failed to read failure persistence file %s: %s", path, exc)
            return []

        seeds: list[PersistedSeed] = []
        for lineno, line in enumerate(text.splitlines(), start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            parsed = parse_line(stripped)
            if parsed is None:
                logger.warning("Unparsable line in %s:%d, skipping: %r", path, lineno, line)
                continue
            seeds.append(parsed)
        return seeds

    def save_persisted_failure(
        self,
        source_file: str | None,
        seed: PersistedSeed,
        shrunken_value: object,
    ) -> None:
        path = self.resolve_path(source_file)
        if path is None:
            return
        stored = self.load_persisted_failures(source_file)
        if any(existing.seed == seed.seed for existing in stored):
            return

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            try:
                with path.open("x", encoding="utf-8") as handle:
                    handle.write(PERSISTENCE_HEADER)
            except FileExistsError:
                pass
            with path.open("a", encoding="utf-8") as handle:
                handle.write(format_line(seed, shrunken_value))
        except OSError as exc:
            logger.warning("Failed to write failure persistence file %s: %s", path, exc)
            return
        logger.info("Saved failure seed to %s", path)
