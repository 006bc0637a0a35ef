"""Tests for per-run logging."""

import json

import pytest

from sheet_translator.checkpoint import Checkpoint
from sheet_translator.models import WorkItem
from sheet_translator.run_logging import RunLogger

ITEM = WorkItem(key="greet", source_text="Hello", target_language_codes=("es",),
                context=None, row_index=1, category="UI")


def read_jsonl(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_run_logger_creates_run_dir(tmp_path):
    """Test that the run directory is created."""
    run_logger = RunLogger(tmp_path / "runs")

    assert run_logger.run_dir.is_dir()
    assert run_logger.get_summary()["run_id"] == run_logger.run_id


def test_run_logger_records(tmp_path):
    """Test that records are written and counted in the summary."""
    run_logger = RunLogger(tmp_path, run_id="r1")

    run_logger.log_request(ITEM, {"key": "greet"})
    run_logger.log_retry("greet", "rate_limit", "slow down", 1, 2.0)
    run_logger.log_retry("greet", "ProviderError", "boom", 1, 3.0)
    run_logger.log_missing(ITEM, {"key": "greet", "languageCode": "es", "reason": "slang"})
    run_logger.log_failure(ITEM, "RetryExhaustedError", "gave up")
    run_logger.log_failure(None, "HeaderError", "no key column", {"sheet": "Notes"})

    summary = run_logger.get_summary()
    assert summary["items_dispatched"] == 1
    assert summary["rate_limit_waits"] == 1
    assert summary["retries"] == 1
    assert summary["missing_translations"] == 1
    assert summary["items_failed"] == 1

    failures = read_jsonl(run_logger.failures_file)
    assert failures[0]["item"]["key"] == "greet"
    assert failures[1]["item"] is None
    assert failures[1]["context"] == {"sheet": "Notes"}
    assert read_jsonl(run_logger.missing_file)[0]["reason"] == "slang"


def test_update_summary_rejects_unknown_fields(tmp_path):
    """Test that unknown summary fields are rejected."""
    run_logger = RunLogger(tmp_path, run_id="r1")

    run_logger.update_summary(workbook="strings.xlsx")
    assert run_logger.get_summary()["workbook"] == "strings.xlsx"

    with pytest.raises(KeyError):
        run_logger.update_summary(colour="blue")


def test_finalize_writes_summary(tmp_path):
    """Test that finalize writes summary.json."""
    run_logger = RunLogger(tmp_path, run_id="r1")
    run_logger.log_cells_written(4)
    run_logger.finalize()

    summary = json.loads(run_logger.summary_file.read_text(encoding="utf-8"))
    assert summary["cells_written"] == 4
    assert summary["completed_at"].endswith("Z")


class BrokenTable:
    def persist_pending_writes(self):
        raise OSError("locked by another process")


class CountingTable:
    def persist_pending_writes(self):
        return 3


def test_checkpoint_success_is_logged(tmp_path):
    """Test that a successful checkpoint is recorded."""
    run_logger = RunLogger(tmp_path, run_id="r1")
    checkpoint = Checkpoint(CountingTable(), run_logger)

    assert checkpoint.flush() == 3
    assert checkpoint.succeeded == 1
    assert read_jsonl(run_logger.checkpoints_file)[0]["cells"] == 3


def test_checkpoint_failure_is_logged_and_raised(tmp_path):
    """Test that a failed checkpoint is recorded and re-raised."""
    run_logger = RunLogger(tmp_path, run_id="r1")
    checkpoint = Checkpoint(BrokenTable(), run_logger)

    with pytest.raises(OSError):
        checkpoint.flush()

    assert checkpoint.failed == 1
    assert run_logger.get_summary()["checkpoints_failed"] == 1
    record = read_jsonl(run_logger.checkpoints_file)[0]
    assert record["success"] is False
    assert "locked" in record["error_message"]
