"""CLI entrypoint."""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from sheet_translator.config import TranslatorConfig
from sheet_translator.context import build_game_context
from sheet_translator.models import GameContext
from sheet_translator.providers.openai import OpenAIProvider
from sheet_translator.report import generate_summary_report, print_summary_report
from sheet_translator.run_logging import RunLogger, configure_logging
from sheet_translator.scan import HeaderError
from sheet_translator.table.workbook import WorkbookTable
from sheet_translator.translate import TranslationSession, plan_sheet, translate_table

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Sheet Translator - fill missing translations in a localization workbook"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output (skipped empty rows, raw responses)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # translate command
    translate_parser = subparsers.add_parser(
        "translate",
        help="Translate missing cells and save the workbook after every window"
    )
    translate_parser.add_argument(
        "--workbook",
        type=Path,
        required=True,
        help="Path to the .xlsx workbook to translate"
    )
    translate_parser.add_argument(
        "--sheet",
        action="append",
        help="Sheet to translate (repeatable; default: every sheet)"
    )
    translate_parser.add_argument(
        "--game-context-document",
        type=Path,
        help="Workbook holding the feature and game context sheets "
             "(default: GAME_CONTEXT_DOCUMENT env, then --workbook)"
    )
    translate_parser.add_argument(
        "--feature-sheet",
        help="Sheet with feature names per language (default: FEATURE_SHEET env)"
    )
    translate_parser.add_argument(
        "--game-context-sheet",
        help="Sheet describing the game (default: GAME_CONTEXT_SHEET env)"
    )
    translate_parser.add_argument(
        "--ignore-game-context",
        action="store_true",
        help="Translate without building the game context"
    )
    translate_parser.add_argument(
        "--model",
        help="OpenAI model name (default: from OPENAI_MODEL env or gpt-4-turbo-preview)"
    )
    translate_parser.add_argument(
        "--parallel-tasks",
        type=int,
        help="Concurrent provider calls per window (default: PARALLEL_TASKS env or 5)"
    )
    translate_parser.add_argument(
        "--runs-dir",
        type=Path,
        default=Path("work/runs"),
        help="Directory for run logs (default: work/runs)"
    )
    translate_parser.add_argument(
        "--no-highlight",
        action="store_true",
        help="Do not color translated cells"
    )

    # scan command
    scan_parser = subparsers.add_parser(
        "scan",
        help="List the work items a translate run would dispatch"
    )
    scan_parser.add_argument(
        "--workbook",
        type=Path,
        required=True,
        help="Path to the .xlsx workbook to scan"
    )
    scan_parser.add_argument(
        "--sheet",
        action="append",
        help="Sheet to scan (repeatable; default: every sheet)"
    )

    return parser


def _getenv_any(*names: str) -> Optional[str]:
    """Return the first non-empty environment variable among names."""
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


def load_game_context(args: argparse.Namespace, workbook: WorkbookTable) -> GameContext:
    """Build the game context from CLI flags and env fallbacks, or return an empty one."""
    if args.ignore_game_context:
        return GameContext.empty()

    feature_sheet = args.feature_sheet or _getenv_any("FEATURE_SHEET", "FEATURE_SHEET_ID_FALLBACK")
    context_sheet = args.game_context_sheet or _getenv_any(
        "GAME_CONTEXT_SHEET", "GAME_CONTEXT_SHEET_ID_FALLBACK"
    )
    document = args.game_context_document or _getenv_any(
        "GAME_CONTEXT_DOCUMENT", "GAME_CONTEXT_DOCUMENT_ID_FALLBACK"
    )

    if not feature_sheet or not context_sheet:
        print(
            "No game context sheets provided. Pass --feature-sheet and --game-context-sheet "
            "for more accurate translations."
        )
        return GameContext.empty()

    print("Obtaining game context...")
    try:
        table = WorkbookTable(Path(document)) if document else workbook
        return build_game_context(table, feature_sheet, context_sheet)
    except Exception as e:
        print(f"Warning: Could not build game context: {e}", file=sys.stderr)
        logger.debug("Game context error", exc_info=True)
        return GameContext.empty()


def run_translate(args: argparse.Namespace) -> None:
    config = TranslatorConfig.from_env()
    if args.model:
        config.model = args.model
    if args.parallel_tasks is not None:
        if args.parallel_tasks < 1:
            raise ValueError("--parallel-tasks must be at least 1")
        config.parallel_tasks = args.parallel_tasks
    if args.no_highlight:
        config.highlight_translated = False

    workbook = WorkbookTable(args.workbook)
    provider = OpenAIProvider(model=config.model)
    game_context = load_game_context(args, workbook)

    run_logger = RunLogger(args.runs_dir)
    sheets: List[str] = args.sheet or workbook.sheet_names()
    run_logger.update_summary(workbook=str(args.workbook), sheets=sheets)

    session = TranslationSession(
        provider=provider,
        config=config,
        game_context=game_context,
        run_logger=run_logger
    )

    print(f"Translating {args.workbook} ({', '.join(sheets)}) with {config.model}")
    table_report = asyncio.run(translate_table(workbook, sheets, session))
    run_logger.finalize()

    report = generate_summary_report(table_report, run_logger.get_summary())
    print_summary_report(report)

    print(f"✓ Translation complete. Run ID: {run_logger.run_id}")
    print(f"  Logs: {run_logger.run_dir}")


def run_scan(args: argparse.Namespace) -> None:
    config = TranslatorConfig.from_env()
    workbook = WorkbookTable(args.workbook)

    total = 0
    for sheet in args.sheet or workbook.sheet_names():
        try:
            _, items = plan_sheet(workbook, sheet, config)
            items = list(items)
        except HeaderError as e:
            print(f"✗ [{sheet}] {e}", file=sys.stderr)
            continue

        print(f"[{sheet}] {len(items)} work item(s)")
        for item in items:
            print(f"  row {item.row_index}: {item.key} -> {', '.join(item.target_language_codes)}")
        total += len(items)

    print(f"✓ {total} work item(s) would be dispatched")


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entrypoint."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(args.verbose)

    try:
        if args.command == "translate":
            run_translate(args)
        elif args.command == "scan":
            run_scan(args)
        else:
            parser.print_help()
            sys.exit(1)
    except Exception as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        logger.debug("Unhandled error", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
