"""Generate summary reports for translation runs."""

from typing import Any, Dict, Optional

from sheet_translator.translate import TableReport


def generate_summary_report(
    table_report: TableReport,
    run_summary: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Generate a summary report for a translation run.

    Args:
        table_report: Result of translate_table
        run_summary: Optional RunLogger summary (adds retry/checkpoint counters)

    Returns:
        Dictionary with report data:
        {
            "sheets_translated": list[str],
            "sheet_errors": dict[str, str],
            "items_succeeded": int,
            "items_failed": int,
            "failed_items": list[dict],
            "missing_translations": int,
            "windows": int,
            "checkpoints_ok": int,
            "checkpoints_failed": int,
            "retries": int,
            "rate_limit_waits": int
        }
    """
    dispatch = table_report.dispatch
    run_summary = run_summary or {}

    failed_items = [
        {
            "sheet": item.category,
            "key": item.key,
            "row_index": item.row_index,
            "languages": list(item.target_language_codes),
            "error": str(error) or type(error).__name__,
        }
        for item, error in dispatch.failed
    ]

    return {
        "sheets_translated": list(table_report.sheets_translated),
        "sheet_errors": dict(table_report.sheet_errors),
        "items_succeeded": len(dispatch.succeeded),
        "items_failed": len(dispatch.failed),
        "failed_items": failed_items,
        "missing_translations": table_report.missing_translations,
        "windows": dispatch.windows,
        "checkpoints_ok": dispatch.checkpoints_ok,
        "checkpoints_failed": dispatch.checkpoints_failed,
        "retries": run_summary.get("retries", 0),
        "rate_limit_waits": run_summary.get("rate_limit_waits", 0),
    }


def print_summary_report(report: Dict[str, Any]) -> None:
    """
    Print a formatted summary report.

    Args:
        report: Report dictionary from generate_summary_report
    """
    print("\n" + "=" * 60)
    print("Translation Summary")
    print("=" * 60)
    print(f"Sheets:           {', '.join(report['sheets_translated']) or '-'}")
    print(f"Items translated: {report['items_succeeded']}")
    print(f"Items failed:     {report['items_failed']}")
    print(f"Missing:          {report['missing_translations']}")
    print(f"Windows:          {report['windows']}")
    print(f"Checkpoints:      {report['checkpoints_ok']} ok, {report['checkpoints_failed']} failed")
    print(f"Retries:          {report['retries']}")
    print(f"Rate-limit waits: {report['rate_limit_waits']}")

    for sheet, error in report["sheet_errors"].items():
        print(f"  Sheet skipped: {sheet}: {error}")
    for failed in report["failed_items"]:
        print(
            f"  Failed: [{failed['sheet']}] {failed['key']} "
            f"(row {failed['row_index']}, {', '.join(failed['languages'])}): {failed['error']}"
        )
    print("=" * 60 + "\n")
