"""Tests for merging provider results into the table."""

import logging

from sheet_translator.merge import TRANSLATED_FILL, merge_result
from sheet_translator.models import WorkItem
from sheet_translator.scan import parse_header
from sheet_translator.table.workbook import WorkbookTable

HEADER = ["Key", "[en] English", "Notes", "[fr] French", "[es] Spanish"]


def load(make_workbook):
    path = make_workbook({"UI": [
        HEADER,
        ["title", "Title", None, "Titre", "Título"],
        ["bye", "Bye", None, None, None],
        ["hello", "Hello", "greeting", None, None],
    ]})
    table = WorkbookTable(path)
    return table, parse_header(table.get_header_row("UI"))


def hello_item(codes=("es",)) -> WorkItem:
    return WorkItem(key="hello", source_text="Hello", target_language_codes=tuple(codes),
                    context=None, row_index=3, category="UI")


def test_merge_writes_only_the_requested_cell(make_workbook):
    """Test that a single-language result touches a single cell."""
    table, header = load(make_workbook)

    stats = merge_result(table, "UI", header, hello_item(), {"es": {"hello": "Hola"}, "missing": []})

    assert stats.written == ["es"]
    assert table.get_cell("UI", 3, 4).value == "Hola"
    assert table.get_cell("UI", 3, 3).value is None
    assert table.get_cell("UI", 3, 2).value == "greeting"
    assert table.get_cell("UI", 2, 4).value is None
    assert table.pending_count == 1


def test_merge_ignores_languages_outside_the_item(make_workbook):
    """Test that languages not requested by the item are not written."""
    table, header = load(make_workbook)
    result = {"es": {"hello": "Hola"}, "fr": {"hello": "Bonjour"}, "en": {"hello": "Hi"}, "missing": []}

    stats = merge_result(table, "UI", header, hello_item(), result)

    assert stats.written == ["es"]
    assert table.get_cell("UI", 3, 3).value is None
    assert table.get_cell("UI", 3, 1).value == "Hello"


def test_merge_ignores_other_keys(make_workbook):
    """Test that translations for other keys are not written."""
    table, header = load(make_workbook)

    merge_result(table, "UI", header, hello_item(), {"es": {"bye": "Adiós"}, "missing": []})

    assert table.get_cell("UI", 2, 4).value is None
    assert table.pending_count == 0


def test_merge_logs_missing_entries(make_workbook, caplog):
    """Test that missing entries are logged and returned."""
    table, header = load(make_workbook)
    result = {
        "es": {"hello": "Hola"},
        "missing": [{"key": "hello", "languageCode": "fr", "reason": "ambiguous"}],
    }

    with caplog.at_level(logging.WARNING, logger="sheet_translator.merge"):
        stats = merge_result(table, "UI", header, hello_item(("es", "fr")), result)

    assert stats.written == ["es"]
    assert stats.missing == result["missing"]
    assert stats.unresolved == []
    assert "ambiguous" in caplog.text
    assert table.get_cell("UI", 3, 3).value is None


def test_merge_reports_unresolved_languages(make_workbook):
    """Test that languages neither written nor missing are unresolved."""
    table, header = load(make_workbook)

    stats = merge_result(table, "UI", header, hello_item(("es", "fr")), {"missing": []})

    assert stats.written == []
    assert stats.unresolved == ["es", "fr"]


def test_merge_null_translation_is_not_written(make_workbook):
    """Test that a null translation leaves the cell empty."""
    table, header = load(make_workbook)

    stats = merge_result(table, "UI", header, hello_item(), {"es": {"hello": None}, "missing": []})

    assert stats.unresolved == ["es"]
    assert table.pending_count == 0


def test_merge_highlight(make_workbook):
    """Test that written cells get the highlight fill."""
    table, header = load(make_workbook)

    merge_result(table, "UI", header, hello_item(("es", "fr")),
                 {"es": {"hello": "Hola"}, "fr": {"hello": "Bonjour"}, "missing": []})
    table.persist_pending_writes()

    reloaded = WorkbookTable(table.path)
    ws = reloaded.workbook["UI"]
    assert ws.cell(row=4, column=5).fill.start_color.rgb.endswith(TRANSLATED_FILL)
    assert reloaded.get_cell("UI", 3, 3).value == "Bonjour"


def test_merge_without_highlight(make_workbook):
    """Test that highlight can be turned off."""
    table, header = load(make_workbook)

    merge_result(table, "UI", header, hello_item(), {"es": {"hello": "Hola"}, "missing": []},
                 highlight=False)

    ws = table.workbook["UI"]
    assert ws.cell(row=4, column=5).fill.fill_type is None
