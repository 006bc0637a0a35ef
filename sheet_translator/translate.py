"""Translate missing cells of a table using LLM providers."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from sheet_translator.batching import batch_work_items
from sheet_translator.checkpoint import Checkpoint
from sheet_translator.config import TranslatorConfig
from sheet_translator.dispatch import DispatchReport, dispatch
from sheet_translator.merge import MergeStats, merge_result
from sheet_translator.models import GameContext, WorkItem
from sheet_translator.prompts.translate import build_translation_request
from sheet_translator.providers.base import TranslationProvider
from sheet_translator.retry import call_with_retry
from sheet_translator.run_logging import RunLogger
from sheet_translator.scan import HeaderError, HeaderInfo, parse_header, scan_sheet
from sheet_translator.table.base import Table

logger = logging.getLogger(__name__)


@dataclass
class TranslationSession:
    """Everything a run needs, built once at startup and passed down."""
    provider: TranslationProvider
    config: TranslatorConfig = field(default_factory=TranslatorConfig)
    game_context: GameContext = field(default_factory=GameContext.empty)
    run_logger: Optional[RunLogger] = None
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep


@dataclass
class TableReport:
    """Outcome of translating several sheets."""
    dispatch: DispatchReport = field(default_factory=DispatchReport)
    sheets_translated: List[str] = field(default_factory=list)
    sheet_errors: Dict[str, str] = field(default_factory=dict)
    missing_translations: int = 0


def plan_sheet(
    table: Table,
    sheet: str,
    config: TranslatorConfig
) -> Tuple[HeaderInfo, Iterator[WorkItem]]:
    """
    Parse a sheet header and lazily scan and batch its work items.

    Raises:
        HeaderError: If the sheet header is malformed (raised immediately)
    """
    header = parse_header(table.get_header_row(sheet), config.source_language)
    items = batch_work_items(
        scan_sheet(table, sheet, header, config.source_language),
        batch_size=config.batched_languages_size,
        max_text_length=config.max_text_length_for_batching
    )
    return header, items


async def translate_sheet(
    table: Table,
    sheet: str,
    session: TranslationSession,
    merged: Optional[List[MergeStats]] = None
) -> DispatchReport:
    """
    Fill every missing translation of one sheet.

    Args:
        table: Table holding the sheet
        sheet: Sheet name
        session: Provider, config, game context and loggers
        merged: Optional list collecting the MergeStats of every item

    Returns:
        DispatchReport for the sheet

    Raises:
        HeaderError: If the sheet has no key or source column
    """
    config = session.config
    run_logger = session.run_logger

    header, items = plan_sheet(table, sheet, config)
    checkpoint = Checkpoint(table, run_logger)

    async def process(item: WorkItem) -> MergeStats:
        logger.info(
            "Translating [%s] into %s", item.key, ", ".join(item.target_language_codes)
        )
        if run_logger:
            run_logger.log_request(item, build_translation_request(item, session.game_context))

        result = await call_with_retry(
            lambda: session.provider.translate(item, session.game_context),
            retries=config.retries,
            retry_delay=config.retry_delay,
            max_rate_limit_retries=config.max_rate_limit_retries,
            max_rate_limit_wait=config.max_rate_limit_wait,
            sleep=session.sleep,
            label=item.key,
            run_logger=run_logger
        )
        if run_logger:
            run_logger.log_response(item, result)

        stats = merge_result(
            table, sheet, header, item, result,
            highlight=config.highlight_translated,
            run_logger=run_logger
        )
        if merged is not None:
            merged.append(stats)
        return stats

    try:
        return await dispatch(
            items,
            process,
            checkpoint.flush,
            parallel_tasks=config.parallel_tasks,
            stagger_delay=config.stagger_delay,
            cooldown=config.window_cooldown,
            task_timeout=config.task_timeout,
            sleep=session.sleep,
            run_logger=run_logger
        )
    except Exception:
        # Keep whatever earlier windows and sibling tasks already wrote
        try:
            checkpoint.flush()
        except Exception as e:
            logger.error("[%s] final checkpoint failed: %s", sheet, e)
        raise


async def translate_table(
    table: Table,
    sheets: Iterable[str],
    session: TranslationSession
) -> TableReport:
    """
    Translate several sheets one after another.

    A malformed or failing sheet is logged and skipped; the remaining
    sheets are still translated.
    """
    report = TableReport()
    merged: List[MergeStats] = []

    for sheet in sheets:
        logger.info("Translating sheet %s", sheet)
        try:
            sheet_report = await translate_sheet(table, sheet, session, merged)
        except HeaderError as e:
            logger.error("[%s] skipped: %s", sheet, e)
            report.sheet_errors[sheet] = str(e)
            if session.run_logger:
                session.run_logger.log_failure(None, "HeaderError", str(e), {"sheet": sheet})
            continue
        except Exception as e:
            logger.exception("[%s] aborted", sheet)
            report.sheet_errors[sheet] = str(e)
            if session.run_logger:
                session.run_logger.log_failure(None, type(e).__name__, str(e), {"sheet": sheet})
            continue

        report.dispatch.extend(sheet_report)
        report.sheets_translated.append(sheet)

    report.missing_translations = sum(len(stats.missing) for stats in merged)
    return report
