"""Per-run logging for translation operations."""

import json
import logging
import sys
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from sheet_translator.models import WorkItem

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Send console diagnostics to stderr (DEBUG when verbose, else INFO)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr
    )
    # requests/urllib3 are noisy at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class RunLogger:
    """Logger for translation runs."""

    def __init__(self, runs_dir: Path, run_id: Optional[str] = None):
        """
        Initialize run logger.

        Args:
            runs_dir: Base directory for run logs (e.g., work/runs)
            run_id: Optional run ID. If None, generates a new UUID.
        """
        self.runs_dir = Path(runs_dir)
        self.run_id = run_id or str(uuid.uuid4())
        self.run_dir = self.runs_dir / self.run_id
        self.run_dir.mkdir(parents=True, exist_ok=True)

        # Initialize log files
        self.requests_file = self.run_dir / "requests.jsonl"
        self.responses_file = self.run_dir / "responses.jsonl"
        self.failures_file = self.run_dir / "failures.jsonl"
        self.retries_file = self.run_dir / "retries.jsonl"
        self.missing_file = self.run_dir / "missing.jsonl"
        self.checkpoints_file = self.run_dir / "checkpoints.jsonl"
        self.summary_file = self.run_dir / "summary.json"

        # Initialize summary
        self.summary: Dict[str, Any] = {
            "run_id": self.run_id,
            "started_at": _timestamp(),
            "completed_at": None,
            "workbook": None,
            "sheets": [],
            "items_dispatched": 0,
            "items_translated": 0,
            "items_failed": 0,
            "cells_written": 0,
            "missing_translations": 0,
            "retries": 0,
            "rate_limit_waits": 0,
            "checkpoints_ok": 0,
            "checkpoints_failed": 0,
        }

    def _append(self, path: Path, record: Dict[str, Any]) -> None:
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")

    def log_request(self, item: WorkItem, request: Dict[str, Any]) -> None:
        """
        Log a translation request.

        Args:
            item: Work item being translated
            request: Structured request sent to the provider
        """
        self._append(self.requests_file, {
            "timestamp": _timestamp(),
            "item": asdict(item),
            "request": request,
        })
        self.summary["items_dispatched"] += 1

    def log_response(self, item: WorkItem, response: Dict[str, Any]) -> None:
        """
        Log a validated provider response.

        Args:
            item: Work item the response belongs to
            response: Validated result dictionary
        """
        self._append(self.responses_file, {
            "timestamp": _timestamp(),
            "key": item.key,
            "category": item.category,
            "row_index": item.row_index,
            "response": response,
        })
        self.summary["items_translated"] += 1

    def log_failure(
        self,
        item: Optional[WorkItem],
        error_type: str,
        error_message: str,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log a terminal failure.

        Args:
            item: Work item that failed, or None for failures outside an item
            error_type: Type of error (e.g., "RetryExhaustedError", "HeaderError")
            error_message: Error message
            context: Optional context dictionary
        """
        self._append(self.failures_file, {
            "timestamp": _timestamp(),
            "item": asdict(item) if item else None,
            "error_type": error_type,
            "error_message": error_message,
            "context": context or {},
        })
        if item is not None:
            self.summary["items_failed"] += 1

    def log_retry(
        self,
        label: str,
        error_type: str,
        error_message: str,
        attempt: int,
        wait: float,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log a retried attempt or a rate-limit wait."""
        self._append(self.retries_file, {
            "timestamp": _timestamp(),
            "label": label,
            "error_type": error_type,
            "error_message": error_message,
            "attempt": attempt,
            "wait_seconds": wait,
            "context": context or {},
        })
        if error_type == "rate_limit":
            self.summary["rate_limit_waits"] += 1
        else:
            self.summary["retries"] += 1

    def log_missing(self, item: WorkItem, entry: Dict[str, Any]) -> None:
        """Log a translation the provider reported as missing."""
        self._append(self.missing_file, {
            "timestamp": _timestamp(),
            "category": item.category,
            "row_index": item.row_index,
            "key": entry.get("key", item.key),
            "languageCode": entry.get("languageCode"),
            "reason": entry.get("reason"),
        })
        self.summary["missing_translations"] += 1

    def log_cells_written(self, count: int) -> None:
        self.summary["cells_written"] += count

    def log_checkpoint(
        self,
        success: bool,
        cells: int = 0,
        error_message: Optional[str] = None
    ) -> None:
        """Log a checkpoint attempt."""
        self._append(self.checkpoints_file, {
            "timestamp": _timestamp(),
            "success": success,
            "cells": cells,
            "error_message": error_message,
        })
        if success:
            self.summary["checkpoints_ok"] += 1
        else:
            self.summary["checkpoints_failed"] += 1

    def update_summary(self, **fields: Any) -> None:
        """
        Update summary fields.

        Args:
            **fields: Summary keys to overwrite (e.g., workbook="t.xlsx")
        """
        for name, value in fields.items():
            if name not in self.summary:
                raise KeyError(f"Unknown summary field: {name}")
            self.summary[name] = value

    def finalize(self) -> None:
        """Finalize the run and write summary."""
        self.summary["completed_at"] = _timestamp()

        with open(self.summary_file, "w", encoding="utf-8") as f:
            json.dump(self.summary, f, ensure_ascii=False, indent=2)

    def get_summary(self) -> Dict[str, Any]:
        """Get current summary."""
        return self.summary.copy()
