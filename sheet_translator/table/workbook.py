"""Excel workbook backend for the table interface."""

import os
import tempfile
from pathlib import Path
from typing import Any, List, Optional, Set, Tuple

from openpyxl import load_workbook
from openpyxl.styles import PatternFill

from sheet_translator.models import Cell
from sheet_translator.table.base import Table


class WorkbookTable(Table):
    """
    Table backed by an .xlsx workbook.

    Cell annotations are Excel comments. The whole workbook is held in
    memory; persist_pending_writes() saves it back to the same path.
    """

    def __init__(self, path: Path):
        """
        Load a workbook.

        Args:
            path: Path to the .xlsx file

        Raises:
            FileNotFoundError: If the workbook does not exist
        """
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(f"Workbook not found: {self.path}")

        self.workbook = load_workbook(self.path)
        self._pending: Set[Tuple[str, int, int]] = set()

    def _worksheet(self, sheet: str):
        if sheet not in self.workbook.sheetnames:
            raise KeyError(f"Sheet not found: {sheet}")
        return self.workbook[sheet]

    def sheet_names(self) -> List[str]:
        return list(self.workbook.sheetnames)

    def get_header_row(self, sheet: str) -> List[str]:
        ws = self._worksheet(sheet)
        labels = []
        for col in range(1, ws.max_column + 1):
            value = ws.cell(row=1, column=col).value
            if value is None or str(value) == "":
                break
            labels.append(str(value))
        return labels

    def row_count(self, sheet: str) -> int:
        return self._worksheet(sheet).max_row

    def get_cell(self, sheet: str, row: int, col: int) -> Cell:
        cell = self._worksheet(sheet).cell(row=row + 1, column=col + 1)

        annotation = None
        if cell.comment is not None and cell.comment.text:
            annotation = cell.comment.text.strip() or None

        return Cell(value=cell.value, annotation=annotation)

    def set_cell(
        self,
        sheet: str,
        row: int,
        col: int,
        value: Any,
        style: Optional[str] = None
    ) -> None:
        cell = self._worksheet(sheet).cell(row=row + 1, column=col + 1)
        cell.value = value
        if style:
            cell.fill = PatternFill(start_color=style, end_color=style, fill_type="solid")
        self._pending.add((sheet, row, col))

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def persist_pending_writes(self) -> int:
        if not self._pending:
            return 0

        # Save next to the target so os.replace stays on one filesystem
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.stem}-",
            suffix=self.path.suffix,
            dir=self.path.parent
        )
        os.close(fd)
        try:
            self.workbook.save(tmp_name)
            os.replace(tmp_name, self.path)
        except Exception:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise

        count = len(self._pending)
        self._pending.clear()
        return count
