"""Windowed, bounded-concurrency dispatch of work items."""

import asyncio
import logging
from dataclasses import dataclass, field
from itertools import islice
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Tuple

from sheet_translator.models import WorkItem
from sheet_translator.run_logging import RunLogger

logger = logging.getLogger(__name__)

DEFAULT_PARALLEL_TASKS = 5
DEFAULT_STAGGER_DELAY = 0.1
DEFAULT_COOLDOWN = 1.0


@dataclass
class DispatchReport:
    """What happened to every dispatched item."""
    succeeded: List[WorkItem] = field(default_factory=list)
    failed: List[Tuple[WorkItem, BaseException]] = field(default_factory=list)
    windows: int = 0
    checkpoints_ok: int = 0
    checkpoints_failed: int = 0

    @property
    def failed_items(self) -> List[WorkItem]:
        return [item for item, _ in self.failed]

    def extend(self, other: "DispatchReport") -> None:
        self.succeeded.extend(other.succeeded)
        self.failed.extend(other.failed)
        self.windows += other.windows
        self.checkpoints_ok += other.checkpoints_ok
        self.checkpoints_failed += other.checkpoints_failed


async def dispatch(
    items: Iterable[WorkItem],
    process: Callable[[WorkItem], Awaitable[Any]],
    checkpoint: Callable[[], Any],
    parallel_tasks: int = DEFAULT_PARALLEL_TASKS,
    stagger_delay: float = DEFAULT_STAGGER_DELAY,
    cooldown: float = DEFAULT_COOLDOWN,
    task_timeout: Optional[float] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    run_logger: Optional[RunLogger] = None
) -> DispatchReport:
    """
    Run work items in windows of at most parallel_tasks concurrent calls.

    Items are taken in input order. Inside a window the task at position p
    starts after stagger_delay * p seconds. Once every task of the window
    has settled the checkpoint runs, then the dispatcher cools down before
    the next window. A failing task or checkpoint is logged and recorded;
    it never stops the run.

    Args:
        items: Work items, already batched
        process: Coroutine function translating and merging one item
        checkpoint: Callable persisting pending writes (raises on failure)
        parallel_tasks: Window size (default: 5)
        stagger_delay: Per-position start offset in seconds (default: 0.1)
        cooldown: Pause between windows in seconds (default: 1.0)
        task_timeout: Optional deadline per task in seconds
        sleep: Sleep coroutine (injectable for tests)
        run_logger: Optional run logger receiving failure records

    Returns:
        DispatchReport listing succeeded and failed items
    """
    if parallel_tasks < 1:
        raise ValueError(f"parallel_tasks must be at least 1, got {parallel_tasks}")

    report = DispatchReport()

    async def run_task(position: int, item: WorkItem) -> Any:
        if stagger_delay > 0 and position > 0:
            await sleep(stagger_delay * position)
        if task_timeout is not None:
            return await asyncio.wait_for(process(item), timeout=task_timeout)
        return await process(item)

    iterator = iter(items)
    window = list(islice(iterator, parallel_tasks))

    while window:
        report.windows += 1
        logger.info("Window %d: dispatching %d item(s)", report.windows, len(window))

        results = await asyncio.gather(
            *(run_task(position, item) for position, item in enumerate(window)),
            return_exceptions=True
        )

        for item, result in zip(window, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.TimeoutError):
                    message = f"timed out after {task_timeout}s"
                else:
                    message = str(result) or type(result).__name__
                logger.error(
                    "[%s] %s (%s) failed: %s",
                    item.category, item.key, ", ".join(item.target_language_codes), message
                )
                report.failed.append((item, result))
                if run_logger:
                    run_logger.log_failure(item, type(result).__name__, message)
            else:
                report.succeeded.append(item)

        try:
            checkpoint()
            report.checkpoints_ok += 1
        except Exception as e:
            report.checkpoints_failed += 1
            logger.error("Window %d: checkpoint failed: %s", report.windows, e)

        next_window = list(islice(iterator, parallel_tasks))
        if next_window and cooldown > 0:
            await sleep(cooldown)
        window = next_window

    return report
