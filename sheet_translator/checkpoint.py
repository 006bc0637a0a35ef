"""Persist pending table writes between dispatch windows."""

import logging
from typing import Optional

from sheet_translator.run_logging import RunLogger
from sheet_translator.table.base import Table

logger = logging.getLogger(__name__)


class Checkpoint:
    """Flushes a table's pending writes and keeps count of the outcomes."""

    def __init__(self, table: Table, run_logger: Optional[RunLogger] = None):
        self.table = table
        self.run_logger = run_logger
        self.succeeded = 0
        self.failed = 0

    def flush(self) -> int:
        """
        Persist every pending write once. Failures are not retried here.

        Returns:
            Number of cells persisted

        Raises:
            Exception: Whatever the table raised; pending writes stay pending
        """
        try:
            cells = self.table.persist_pending_writes()
        except Exception as e:
            self.failed += 1
            logger.error("Checkpoint failed, writes stay pending: %s", e)
            if self.run_logger:
                self.run_logger.log_checkpoint(False, error_message=str(e))
            raise

        self.succeeded += 1
        logger.info("Checkpoint saved %d cell(s)", cells)
        if self.run_logger:
            self.run_logger.log_checkpoint(True, cells=cells)
        return cells
