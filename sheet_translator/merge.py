"""Merge provider results back into the table."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sheet_translator.models import WorkItem
from sheet_translator.run_logging import RunLogger
from sheet_translator.scan import HeaderInfo, is_missing
from sheet_translator.table.base import Table
from sheet_translator.validate.schema import MISSING_FIELD

logger = logging.getLogger(__name__)

# Light green, marks cells filled by the translator
TRANSLATED_FILL = "C6EFCE"


@dataclass
class MergeStats:
    """Outcome of merging one result."""
    written: List[str] = field(default_factory=list)
    missing: List[Dict[str, Any]] = field(default_factory=list)
    unresolved: List[str] = field(default_factory=list)


def merge_result(
    table: Table,
    sheet: str,
    header: HeaderInfo,
    item: WorkItem,
    result: Dict[str, Any],
    highlight: bool = True,
    run_logger: Optional[RunLogger] = None
) -> MergeStats:
    """
    Write a translation result into the item's row.

    Only the item's target languages are written, so a result can never
    touch the key column, the source column or another batch's cells.

    Args:
        table: Table to write into
        sheet: Sheet name
        header: Parsed header of the sheet
        item: Work item the result answers
        result: Validated result, e.g. {"es": {"greet": "Hola"}, "missing": []}
        highlight: If True, fill written cells with TRANSLATED_FILL
        run_logger: Optional run logger receiving missing records

    Returns:
        MergeStats with the written, missing and unresolved languages
    """
    stats = MergeStats()
    style = TRANSLATED_FILL if highlight else None
    targets = set(item.target_language_codes)

    for col, code in enumerate(header.language_codes):
        if not code or code not in targets:
            continue
        if col in (header.key_column, header.source_column):
            continue

        section = result.get(code)
        if not isinstance(section, dict):
            continue

        text = section.get(item.key)
        if text is None:
            continue
        # Duplicate language columns: only fill the empty ones
        if not is_missing(table.get_cell(sheet, item.row_index, col).value):
            continue

        table.set_cell(sheet, item.row_index, col, text, style)
        if code not in stats.written:
            stats.written.append(code)

    for entry in result.get(MISSING_FIELD) or []:
        logger.warning(
            "[%s] missing translation for %s (%s): %s",
            sheet, entry.get("key"), entry.get("languageCode") or "?", entry.get("reason") or "no reason given"
        )
        stats.missing.append(entry)
        if run_logger:
            run_logger.log_missing(item, entry)

    reported = {entry.get("languageCode") for entry in stats.missing}
    for code in item.target_language_codes:
        if code not in stats.written and code not in reported:
            stats.unresolved.append(code)

    if stats.unresolved:
        logger.warning(
            "[%s] %s: no translation returned for %s",
            sheet, item.key, ", ".join(stats.unresolved)
        )

    if run_logger:
        run_logger.log_cells_written(len(stats.written))

    return stats
