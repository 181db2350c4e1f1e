"""Tests for failure persistence: backends, file format and replay.

Python 3.13+.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from propengine import TestCaseFail, TestFail
from propengine.constants import PERSISTENCE_HEADER
from propengine.enums import RngAlgorithm
from propengine.generators import integers
from propengine.rng import Seed, TestRng
from propengine.runner import (
    Config,
    FileFailurePersistence,
    MapFailurePersistence,
    NoopFailurePersistence,
    PersistedSeed,
    TestRunner,
)
from propengine.runner.persistence import decode_edge_bias, encode_edge_bias
from propengine.runner.persistence.file import format_line, parse_line

FILE_LOGGER = "propengine.runner.persistence.file"


def _persisted(fill: int, edge_bias: float | None = None) -> PersistedSeed:
    bias = None if edge_bias is None else encode_edge_bias(edge_bias)
    return PersistedSeed(Seed(RngAlgorithm.CHACHA, bytes([fill]) * 32), bias)


def _replayed_value(persisted: PersistedSeed) -> int:
    """The value integers(0, 1000) draws from a persisted seed."""
    return integers(0, 1000).new_tree(TestRunner(Config(), TestRng(persisted.seed))).current()


class TestEdgeBiasEncoding:
    """float32 edge bias bytes."""

    @pytest.mark.parametrize("value", [0.0, 0.25, 0.5, 1.0])
    def test_exact_values_survive(self, value: float) -> None:
        """Values representable in float32 decode unchanged."""
        assert decode_edge_bias(encode_edge_bias(value)) == value

    def test_little_endian_layout(self) -> None:
        """0.5 is 0x3f000000, stored little-endian."""
        assert encode_edge_bias(0.5).hex() == "0000003f"

    def test_wrong_length(self) -> None:
        """Only 4-byte values decode."""
        with pytest.raises(ValueError, match="4 bytes"):
            decode_edge_bias(b"\x00\x00")

    def test_persisted_seed_value(self) -> None:
        """edge_bias_value decodes the stored bytes or is None."""
        assert _persisted(1, 0.25).edge_bias_value == 0.25
        assert _persisted(1).edge_bias_value is None


class TestMapFailurePersistence:
    """In-memory backend."""

    def test_save_and_load_in_order(self) -> None:
        """Seeds come back per source, in insertion order."""
        backend = MapFailurePersistence()
        backend.save_persisted_failure("foo", _persisted(1), 1)
        backend.save_persisted_failure("foo", _persisted(2), 2)
        backend.save_persisted_failure("bar", _persisted(3), 3)
        assert backend.load_persisted_failures("foo") == [_persisted(1), _persisted(2)]
        assert backend.load_persisted_failures("bar") == [_persisted(3)]
        assert backend.load_persisted_failures("baz") == []

    def test_duplicate_seed_ignored(self) -> None:
        """Saving a stored seed again changes nothing."""
        backend = MapFailurePersistence()
        backend.save_persisted_failure("foo", _persisted(1), 1)
        backend.save_persisted_failure("foo", _persisted(1, 0.5), 1)
        assert backend.load_persisted_failures("foo") == [_persisted(1)]

    def test_none_source_not_stored(self) -> None:
        """Without a source file nothing is persisted."""
        backend = MapFailurePersistence()
        backend.save_persisted_failure(None, _persisted(1), 1)
        assert backend.map == {}
        assert backend.load_persisted_failures(None) == []

    def test_noop_backend(self) -> None:
        """NoopFailurePersistence stores nothing."""
        backend = NoopFailurePersistence()
        backend.save_persisted_failure("foo", _persisted(1), 1)
        assert backend.load_persisted_failures("foo") == []


class TestReplay:
    """Persisted seeds in the run loop."""

    def test_persisted_seed_replayed_first_without_duplicate(self) -> None:
        """A stored seed runs before fresh cases and is not stored twice."""
        backend = MapFailurePersistence()
        persisted = _persisted(9)
        backend.save_persisted_failure("foo", persisted, "old")
        config = Config(failure_persistence=backend, source_file="foo")
        seen: list[int] = []

        def test(x: int) -> None:
            seen.append(x)
            raise TestCaseFail("still broken")

        with pytest.raises(TestFail):
            TestRunner.deterministic(config).run(integers(0, 1000), test)
        assert seen[0] == _replayed_value(persisted)
        assert backend.load_persisted_failures("foo") == [persisted]

    def test_replay_in_stored_order(self) -> None:
        """Several seeds replay in the order they were stored."""
        backend = MapFailurePersistence()
        seeds = [_persisted(fill) for fill in (4, 5, 6)]
        for seed in seeds:
            backend.save_persisted_failure("foo", seed, None)
        config = Config(cases=5, failure_persistence=backend, source_file="foo")
        seen: list[int] = []
        TestRunner.deterministic(config).run(integers(0, 1000), seen.append)
        assert seen[:3] == [_replayed_value(seed) for seed in seeds]
        assert len(seen) == 3 + 5

    def test_passing_replay_is_not_a_success(self) -> None:
        """Replayed seeds that pass do not count toward config.cases."""
        backend = MapFailurePersistence()
        backend.save_persisted_failure("foo", _persisted(4), None)
        config = Config(cases=7, failure_persistence=backend, source_file="foo")
        runner = TestRunner.deterministic(config)
        runner.run(integers(0, 1000), lambda _: None)
        assert runner.successes == 7

    def test_fresh_failure_saved_once_and_replayed(self) -> None:
        """A new failure is saved once; the next run starts from it."""
        backend = MapFailurePersistence()
        config = Config(failure_persistence=backend, source_file="foo")
        first_failure: list[int] = []

        def test(x: int) -> None:
            if x >= 500:
                if not first_failure:
                    first_failure.append(x)
                raise TestCaseFail("too big")

        with pytest.raises(TestFail) as info:
            TestRunner(config).run(integers(0, 1000), test)
        assert info.value.value == 500
        stored = backend.load_persisted_failures("foo")
        assert len(stored) == 1
        assert stored[0].edge_bias is not None

        seen: list[int] = []

        def replay(x: int) -> None:
            seen.append(x)
            test(x)

        with pytest.raises(TestFail):
            TestRunner(config).run(integers(0, 1000), replay)
        assert seen[0] == first_failure[0]
        assert backend.load_persisted_failures("foo") == stored

    def test_run_one_never_persists(self) -> None:
        """run_one() has no seed to store."""
        backend = MapFailurePersistence()
        runner = TestRunner.deterministic(
            Config(failure_persistence=backend, source_file="foo")
        )

        def test(_: int) -> None:
            raise TestCaseFail("always")

        with pytest.raises(TestFail):
            runner.run_one(integers(0, 10).new_tree(runner), test)
        assert backend.map == {}


class TestFileFormat:
    """Line encoding of the regression file."""

    def test_format_line(self) -> None:
        """Seed, edge bias and a comment with the shrunk value."""
        seed = _persisted(1, 0.5)
        line = format_line(seed, (1, 2))
        assert line == f"{seed.seed.to_persistence()} eb 0000003f # shrinks to (1, 2)\n"

    def test_format_without_edge_bias(self) -> None:
        """The eb token is omitted when no bias was recorded."""
        seed = _persisted(1)
        assert format_line(seed, 5) == f"{seed.seed.to_persistence()} # shrinks to 5\n"

    @pytest.mark.parametrize("edge_bias", [None, 0.25])
    def test_parse_formatted_line(self, edge_bias: float | None) -> None:
        """parse_line() reads what format_line() writes."""
        seed = _persisted(7, edge_bias)
        assert parse_line(format_line(seed, [1, 2, 3])) == seed

    def test_parse_legacy_line(self) -> None:
        """Bare XorShift words are still accepted."""
        parsed = parse_line("1 2 3 4 # shrinks to 0")
        assert parsed is not None
        assert parsed.seed.algorithm is RngAlgorithm.XORSHIFT
        assert parsed.edge_bias is None

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "# only a comment",
            "cc zz",
            "cc " + "00" * 32 + " eb",
            "cc " + "00" * 32 + " eb 00",
            "cc " + "00" * 32 + " eb zzzzzzzz",
            "cc " + "00" * 32 + " eb 00000000 extra",
        ],
    )
    def test_parse_invalid(self, line: str) -> None:
        """Malformed lines parse to None."""
        assert parse_line(line) is None


class TestFileFailurePersistence:
    """File-backed persistence modes."""

    def test_direct_round_trip(self, tmp_path: Path) -> None:
        """DIRECT writes a header once and one line per new seed."""
        path = tmp_path / "regressions.txt"
        backend = FileFailurePersistence.direct(str(path))
        backend.save_persisted_failure("ignored", _persisted(1, 0.25), 10)
        backend.save_persisted_failure("ignored", _persisted(2), 20)
        backend.save_persisted_failure("ignored", _persisted(1, 0.25), 10)
        text = path.read_text(encoding="utf-8")
        assert text.startswith(PERSISTENCE_HEADER)
        assert text.count(PERSISTENCE_HEADER) == 1
        assert backend.load_persisted_failures("ignored") == [_persisted(1, 0.25), _persisted(2)]

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        """Loading from a file that does not exist yields nothing."""
        backend = FileFailurePersistence.direct(str(tmp_path / "absent.txt"))
        assert backend.load_persisted_failures(None) == []

    def test_malformed_lines_skipped(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Bad lines are logged and skipped; good lines still load."""
        caplog.set_level(logging.WARNING, logger=FILE_LOGGER)
        path = tmp_path / "regressions.txt"
        good = _persisted(3)
        path.write_text(
            PERSISTENCE_HEADER + "\nnot a seed\n" + format_line(good, 1), encoding="utf-8"
        )
        backend = FileFailurePersistence.direct(str(path))
        assert backend.load_persisted_failures(None) == [good]
        assert any("Unparsable line" in r.getMessage() for r in caplog.records)

    def test_with_source(self, tmp_path: Path) -> None:
        """WITH_SOURCE swaps the source file's extension."""
        source = tmp_path / "test_thing.py"
        backend = FileFailurePersistence.with_source(".propreg")
        expected = source.resolve().with_suffix(".propreg")
        assert backend.resolve_path(str(source)) == expected

    def test_source_parallel_strips_src(self, tmp_path: Path) -> None:
        """SOURCE_PARALLEL mirrors the path under the project root, minus src/."""
        root = tmp_path / "project"
        (root / "src" / "pkg").mkdir(parents=True)
        (root / "pyproject.toml").write_text("", encoding="utf-8")
        source = root / "src" / "pkg" / "test_thing.py"
        backend = FileFailurePersistence.source_parallel()
        expected = root.resolve() / "propengine-regressions" / "pkg" / "test_thing.txt"
        assert backend.resolve_path(str(source)) == expected

    def test_source_parallel_keeps_other_dirs(self, tmp_path: Path) -> None:
        """Only a leading src/ is dropped."""
        root = tmp_path / "project"
        (root / "tests").mkdir(parents=True)
        (root / "setup.cfg").write_text("", encoding="utf-8")
        source = root / "tests" / "test_thing.py"
        backend = FileFailurePersistence.source_parallel("regs")
        expected = root.resolve() / "regs" / "tests" / "test_thing.txt"
        assert backend.resolve_path(str(source)) == expected

    def test_source_required(self, caplog: pytest.LogCaptureFixture) -> None:
        """Source-relative modes need a source file and warn without one."""
        caplog.set_level(logging.WARNING, logger=FILE_LOGGER)
        backend = FileFailurePersistence.source_parallel()
        assert backend.resolve_path(None) is None
        backend.save_persisted_failure(None, _persisted(1), 1)
        assert any("requires a source file" in r.getMessage() for r in caplog.records)

    def test_off(self) -> None:
        """OFF never touches the filesystem."""
        backend = FileFailurePersistence.off()
        assert backend.resolve_path("anything.py") is None
        assert backend.load_persisted_failures("anything.py") == []

    def test_runner_writes_shrunk_value(self, tmp_path: Path) -> None:
        """A failing run appends its seed with the shrunk value as comment."""
        path = tmp_path / "regressions.txt"
        config = Config(
            failure_persistence=FileFailurePersistence.direct(str(path)),
            source_file="test_thing.py",
        )

        def test(x: int) -> None:
            if x >= 500:
                raise TestCaseFail("too big")

        with pytest.raises(TestFail):
            TestRunner.deterministic(config).run(integers(0, 1000), test)
        text = path.read_text(encoding="utf-8")
        assert "# shrinks to 500" in text
        assert len(FileFailurePersistence.direct(str(path)).load_persisted_failures(None)) == 1
