"""Find rows with missing translations in a sheet."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional

from sheet_translator.models import WorkItem
from sheet_translator.table.base import Table

logger = logging.getLogger(__name__)

LANGUAGE_CODE_PATTERN = re.compile(r"\[([^\]]+)\]")
KEY_COLUMN_LABELS = ("key", "keys")


class HeaderError(Exception):
    """Raised when a sheet header has no key or source-language column."""
    pass


@dataclass(frozen=True)
class HeaderInfo:
    """Parsed header row of a translation sheet."""
    labels: List[str]
    language_codes: List[str]
    key_column: int
    source_column: int

    def target_columns(self) -> List[int]:
        """Columns that hold target languages."""
        return [
            index for index, code in enumerate(self.language_codes)
            if code and index not in (self.key_column, self.source_column)
        ]


def get_language_code(label: Any) -> str:
    """
    Extract the language code from a column label.

    Args:
        label: Column label (e.g., "[es] Spanish")

    Returns:
        Text inside the first bracket pair (e.g., "es"), or "" if none
    """
    if label is None:
        return ""
    match = LANGUAGE_CODE_PATTERN.search(str(label))
    return match.group(1).strip() if match else ""


def is_missing(value: Any) -> bool:
    """
    Check if a cell value is considered missing.

    Args:
        value: Cell value to check

    Returns:
        True if value is None or a blank string
    """
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def parse_header(labels: List[str], source_lang: str = "en") -> HeaderInfo:
    """
    Locate the key and source-language columns of a header row.

    Args:
        labels: Header labels in column order
        source_lang: Language code of the source column (default: "en")

    Returns:
        HeaderInfo for the sheet

    Raises:
        HeaderError: If the key or source column cannot be found
    """
    codes = [get_language_code(label) for label in labels]

    key_column = next(
        (i for i, label in enumerate(labels)
         if str(label).strip().lower() in KEY_COLUMN_LABELS),
        None
    )
    source_column = next(
        (i for i, code in enumerate(codes)
         if code.lower() == source_lang.lower()),
        None
    )

    if key_column is None:
        raise HeaderError(f"No key column found in header: {labels}")
    if source_column is None:
        raise HeaderError(f"No [{source_lang}] source column found in header: {labels}")

    return HeaderInfo(
        labels=list(labels),
        language_codes=codes,
        key_column=key_column,
        source_column=source_column
    )


def scan_sheet(
    table: Table,
    sheet: str,
    header: Optional[HeaderInfo] = None,
    source_lang: str = "en"
) -> Iterator[WorkItem]:
    """
    Yield one work item per row that has missing target translations.

    Items carry every missing language of the row; splitting them into
    provider-sized batches is done by the batching policy.

    Args:
        table: Table to scan
        sheet: Sheet name
        header: Pre-parsed header (parsed from the sheet if None)
        source_lang: Source language code (default: "en")

    Raises:
        HeaderError: If the sheet header is malformed
    """
    if header is None:
        header = parse_header(table.get_header_row(sheet), source_lang)

    target_columns = header.target_columns()

    for row in range(1, table.row_count(sheet)):
        key_cell = table.get_cell(sheet, row, header.key_column)
        source_cell = table.get_cell(sheet, row, header.source_column)

        key_missing = is_missing(key_cell.value)
        source_missing = is_missing(source_cell.value)
        if key_missing or source_missing:
            if key_missing and source_missing:
                logger.info("[%s] row %d: empty, skipped", sheet, row)
            elif key_missing:
                logger.info("[%s] row %d: no key, skipped", sheet, row)
            else:
                logger.info("[%s] row %d (%s): no source text, skipped", sheet, row, key_cell.value)
            continue

        missing_codes = []
        for col in target_columns:
            code = header.language_codes[col]
            if code in missing_codes:
                continue
            if is_missing(table.get_cell(sheet, row, col).value):
                missing_codes.append(code)

        if not missing_codes:
            continue

        yield WorkItem(
            key=str(key_cell.value),
            source_text=str(source_cell.value),
            target_language_codes=tuple(missing_codes),
            context=key_cell.annotation,
            row_index=row,
            category=sheet
        )
