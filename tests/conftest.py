"""Shared fixtures: throwaway workbooks and a scripted provider."""

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest
from openpyxl import Workbook
from openpyxl.comments import Comment

from sheet_translator.models import GameContext, WorkItem
from sheet_translator.providers.base import TranslationProvider


def write_workbook(
    path: Path,
    sheets: Dict[str, List[List[Any]]],
    notes: Optional[Dict[Tuple[str, int, int], str]] = None
) -> Path:
    """
    Write an .xlsx file.

    Args:
        path: Output path
        sheets: Sheet name -> rows (row 0 is the header); None cells are left empty
        notes: (sheet, row, col) -> comment text, 0-based
    """
    wb = Workbook()
    wb.remove(wb.active)
    for title, rows in sheets.items():
        ws = wb.create_sheet(title)
        for r, row in enumerate(rows, start=1):
            for c, value in enumerate(row, start=1):
                if value is not None:
                    ws.cell(row=r, column=c, value=value)
    for (title, row, col), text in (notes or {}).items():
        wb[title].cell(row=row + 1, column=col + 1).comment = Comment(text, "tests")
    wb.save(path)
    return path


@pytest.fixture
def make_workbook(tmp_path: Path) -> Callable[..., Path]:
    def _make(sheets, notes=None, name="strings.xlsx"):
        return write_workbook(tmp_path / name, sheets, notes)
    return _make


def echo_result(item: WorkItem) -> Dict[str, Any]:
    """Result translating every requested language as "<code>:<source>"."""
    result: Dict[str, Any] = {
        code: {item.key: f"{code}:{item.source_text}"}
        for code in item.target_language_codes
    }
    result["missing"] = []
    return result


class FakeProvider(TranslationProvider):
    """Provider answering from a callback and recording concurrency."""

    def __init__(self, respond: Callable[[WorkItem], Dict[str, Any]] = echo_result, delay: float = 0.0):
        self.respond = respond
        self.delay = delay
        self.calls: List[WorkItem] = []
        self.contexts: List[GameContext] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def translate(self, item: WorkItem, game_context: GameContext) -> Dict[str, Any]:
        self.calls.append(item)
        self.contexts.append(game_context)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            return self.respond(item)
        finally:
            self.in_flight -= 1


class SleepRecorder:
    """Stand-in for asyncio.sleep that records durations and yields once."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        await asyncio.sleep(0)
