"""Build the game context from a description sheet and a feature sheet."""

import logging
from typing import Dict, Optional

from sheet_translator.models import GameContext
from sheet_translator.scan import KEY_COLUMN_LABELS, HeaderError, get_language_code, is_missing
from sheet_translator.table.base import Table

logger = logging.getLogger(__name__)

CONTEXT_COLUMN_LABEL = "context"


def read_description(table: Table, sheet: str) -> str:
    """Join the non-empty cells of the sheet's first column, one per line."""
    lines = []
    for row in range(table.row_count(sheet)):
        value = table.get_cell(sheet, row, 0).value
        if not is_missing(value):
            lines.append(str(value).strip())
    return "\n".join(lines)


def read_features(table: Table, sheet: str) -> Dict[str, Dict[str, str]]:
    """
    Read feature names per language.

    The sheet uses the translation sheet layout: a key column plus
    "[code]" language columns. A "Context" column, or failing that the key
    cell's note, describes the feature.

    Returns:
        {"cash": {"en": "Cash", "es": "Efectivo", "context": "Currency"}}

    Raises:
        HeaderError: If the sheet has no key column
    """
    labels = table.get_header_row(sheet)
    normalized = [str(label).strip().lower() for label in labels]

    if not any(label in KEY_COLUMN_LABELS for label in normalized):
        raise HeaderError(f"No key column found in feature sheet header: {labels}")

    key_column = next(i for i, label in enumerate(normalized) if label in KEY_COLUMN_LABELS)
    context_column: Optional[int] = next(
        (i for i, label in enumerate(normalized) if label == CONTEXT_COLUMN_LABEL),
        None
    )
    language_columns = [
        (i, get_language_code(label)) for i, label in enumerate(labels)
        if get_language_code(label) and i != key_column
    ]

    features: Dict[str, Dict[str, str]] = {}
    for row in range(1, table.row_count(sheet)):
        key_cell = table.get_cell(sheet, row, key_column)
        if is_missing(key_cell.value):
            continue

        entry: Dict[str, str] = {}
        for col, code in language_columns:
            value = table.get_cell(sheet, row, col).value
            if not is_missing(value):
                entry[code] = str(value)

        note = None
        if context_column is not None:
            value = table.get_cell(sheet, row, context_column).value
            if not is_missing(value):
                note = str(value)
        if note is None:
            note = key_cell.annotation
        if note:
            entry["context"] = note

        if entry:
            features[str(key_cell.value)] = entry

    return features


def build_game_context(
    table: Table,
    feature_sheet: str,
    context_sheet: str
) -> GameContext:
    """
    Build the run's GameContext.

    Args:
        table: Table holding both sheets
        feature_sheet: Sheet with per-language feature names
        context_sheet: Sheet whose first column describes the game

    Returns:
        Immutable GameContext
    """
    description = read_description(table, context_sheet)
    features = read_features(table, feature_sheet)
    logger.info(
        "Game context: %d description line(s), %d feature(s)",
        len(description.splitlines()), len(features)
    )
    return GameContext(description=description, features=features)
