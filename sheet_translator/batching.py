"""Split work items into provider-sized language batches."""

from dataclasses import replace
from typing import Iterable, Iterator, List

from sheet_translator.models import WorkItem

DEFAULT_BATCH_SIZE = 5
DEFAULT_MAX_TEXT_LENGTH = 300


def split_work_item(
    item: WorkItem,
    batch_size: int = DEFAULT_BATCH_SIZE,
    max_text_length: int = DEFAULT_MAX_TEXT_LENGTH
) -> List[WorkItem]:
    """
    Split a work item's target languages into sub-batches.

    Short source texts are batched batch_size languages at a time. Texts
    longer than max_text_length are sent one language per call.

    Args:
        item: Work item holding every missing language of a row
        batch_size: Maximum languages per batch for short texts (default: 5)
        max_text_length: Longest source text still batched (default: 300)

    Returns:
        Work items whose language tuples partition the original one
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")

    codes = item.target_language_codes
    size = batch_size if len(item.source_text) <= max_text_length else 1

    return [
        replace(item, target_language_codes=tuple(codes[i:i + size]))
        for i in range(0, len(codes), size)
    ]


def batch_work_items(
    items: Iterable[WorkItem],
    batch_size: int = DEFAULT_BATCH_SIZE,
    max_text_length: int = DEFAULT_MAX_TEXT_LENGTH
) -> Iterator[WorkItem]:
    """Apply split_work_item to every item, preserving scan order."""
    for item in items:
        yield from split_work_item(item, batch_size, max_text_length)
