"""Tests for the .xlsx table backend."""

import pytest

from sheet_translator.table.workbook import WorkbookTable


def test_missing_workbook(tmp_path):
    """Test that a missing workbook raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        WorkbookTable(tmp_path / "nope.xlsx")


def test_sheet_names_in_document_order(make_workbook):
    """Test that sheet names keep document order."""
    path = make_workbook({"Intro": [["Key"]], "UI": [["Key"]], "Items": [["Key"]]})

    assert WorkbookTable(path).sheet_names() == ["Intro", "UI", "Items"]


def test_unknown_sheet(make_workbook):
    """Test that an unknown sheet raises KeyError."""
    table = WorkbookTable(make_workbook({"UI": [["Key"]]}))

    with pytest.raises(KeyError):
        table.get_header_row("Missing")


def test_header_row_stops_at_first_empty_label(make_workbook):
    """Test that header reading stops at the first empty label."""
    path = make_workbook({"UI": [["Key", "[en] English", None, "[es] Spanish"]]})

    assert WorkbookTable(path).get_header_row("UI") == ["Key", "[en] English"]


def test_get_cell_reads_value_and_note(make_workbook):
    """Test reading a cell value and its comment."""
    path = make_workbook(
        {"UI": [["Key", "[en] English"], ["greet", "Hello"]]},
        notes={("UI", 1, 0): "Main menu greeting"}
    )
    table = WorkbookTable(path)

    cell = table.get_cell("UI", 1, 0)
    assert cell.value == "greet"
    assert cell.annotation == "Main menu greeting"
    assert table.get_cell("UI", 1, 1).annotation is None
    assert table.row_count("UI") == 2


def test_set_cell_is_pending_until_persisted(make_workbook):
    """Test that writes reach disk only when persisted."""
    path = make_workbook({"UI": [["Key", "[en] English", "[es] Spanish"], ["greet", "Hello", None]]})
    table = WorkbookTable(path)

    table.set_cell("UI", 1, 2, "Hola")

    assert table.get_cell("UI", 1, 2).value == "Hola"
    assert table.pending_count == 1
    assert WorkbookTable(path).get_cell("UI", 1, 2).value is None

    assert table.persist_pending_writes() == 1
    assert table.pending_count == 0
    assert WorkbookTable(path).get_cell("UI", 1, 2).value == "Hola"


def test_rewriting_a_cell_counts_once(make_workbook):
    """Test that writing a cell twice counts as one pending write."""
    table = WorkbookTable(make_workbook({"UI": [["Key", "[es]"], ["greet", None]]}))

    table.set_cell("UI", 1, 1, "Hola")
    table.set_cell("UI", 1, 1, "Buenas")

    assert table.persist_pending_writes() == 1


def test_persist_with_nothing_pending(make_workbook):
    """Test that persisting with no pending writes is a no-op."""
    table = WorkbookTable(make_workbook({"UI": [["Key"]]}))

    assert table.persist_pending_writes() == 0


def test_failed_persist_keeps_pending_writes(make_workbook, monkeypatch):
    """Test that a failed save keeps pending writes and leaves no temp file."""
    path = make_workbook({"UI": [["Key", "[es]"], ["greet", None]]})
    table = WorkbookTable(path)
    table.set_cell("UI", 1, 1, "Hola")

    def broken_save(filename):
        raise OSError("disk full")

    monkeypatch.setattr(table.workbook, "save", broken_save)

    with pytest.raises(OSError, match="disk full"):
        table.persist_pending_writes()

    assert table.pending_count == 1
    assert sorted(p.name for p in path.parent.iterdir()) == [path.name]
    assert WorkbookTable(path).get_cell("UI", 1, 1).value is None
