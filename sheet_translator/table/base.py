"""Table interface used by the translation engine."""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from sheet_translator.models import Cell


class Table(ABC):
    """
    Base class for tabular localization stores.

    Rows and columns are 0-based; row 0 is the header row. Cell writes are
    buffered in memory until persist_pending_writes() succeeds.
    """

    @abstractmethod
    def sheet_names(self) -> List[str]:
        """Return sheet names in document order."""
        pass

    @abstractmethod
    def get_header_row(self, sheet: str) -> List[str]:
        """
        Return the header labels of a sheet.

        Labels are read left to right and stop at the first empty header
        cell.
        """
        pass

    @abstractmethod
    def row_count(self, sheet: str) -> int:
        """Return the number of rows in a sheet, header included."""
        pass

    @abstractmethod
    def get_cell(self, sheet: str, row: int, col: int) -> Cell:
        """Return the value and annotation of a cell."""
        pass

    @abstractmethod
    def set_cell(
        self,
        sheet: str,
        row: int,
        col: int,
        value: Any,
        style: Optional[str] = None
    ) -> None:
        """
        Write a cell value in memory and add it to the pending write set.

        Args:
            sheet: Sheet name
            row: Row index
            col: Column index
            value: New cell value
            style: Optional RGB hex background color (e.g. "C6EFCE")
        """
        pass

    @abstractmethod
    def persist_pending_writes(self) -> int:
        """
        Persist every pending cell write.

        Returns:
            Number of cells that were pending

        Raises:
            Exception: If persistence fails; pending writes are kept
        """
        pass
