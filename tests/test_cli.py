import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from index_equivalence import cli
from index_equivalence.infra.logs import ROOT_LOGGER_NAME
from index_equivalence.store.base import ValidationResult
from index_equivalence.store.memory import MemoryCollection

QUICK = ["--trials", "2", "--seed-inserts", "100", "--mutations", "300"]


@pytest.fixture(autouse=True)
def detach_log_handlers() -> Iterator[None]:
    """Drop the handlers main() installs so later tests never write to a closed stream."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.mark.parametrize("backend", ["sqlite", "memory"])
def test_clean_run_exits_zero(backend: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--seed", "7", "--backend", backend, *QUICK]) == 0
    out = capsys.readouterr().out
    assert "seed=7" in out
    assert "all equivalent" in out


def test_sqlite_file_backend_and_log_file(tmp_path: Path) -> None:
    db_path = tmp_path / "check.db"
    log_path = tmp_path / "check.log"
    argv = ["--seed", "3", "--db", str(db_path), "--log-file", str(log_path), *QUICK]
    assert cli.main(argv) == 0
    assert db_path.exists()
    assert "Trial 2/2" in log_path.read_text(encoding="utf-8")


def test_integrity_failure_exits_non_zero(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(
        MemoryCollection,
        "validate",
        lambda self: ValidationResult(valid=False, details=["index a_1 out of order"]),
    )
    assert cli.main(["--seed", "11", "--backend", "memory", *QUICK]) == 1
    out = capsys.readouterr().out
    assert "INTEGRITY VIOLATION (seed=11)" in out
    assert "index a_1 out of order" in out


def test_equivalence_failure_reports_both_sequences(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    original = MemoryCollection._query_indexed
    monkeypatch.setattr(
        MemoryCollection,
        "_query_indexed",
        lambda self, predicate, sort, spec: original(self, predicate, sort, spec)[:-1],
    )
    argv = ["--seed", "12", "--backend", "memory", "--trials", "10", "--seed-inserts", "1000"]
    assert cli.main([*argv, "--mutations", "0"]) == 1
    out = capsys.readouterr().out
    assert "EQUIVALENCE VIOLATION (seed=12)" in out
    assert "indexed:" in out
    assert "natural:" in out


def test_invalid_configuration_exits_non_zero() -> None:
    assert cli.main(["--trials", "0"]) == 1


def test_default_seed_is_time_based() -> None:
    assert 0 <= cli._default_seed() < 2**32
