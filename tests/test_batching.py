"""Tests for the language batching policy."""

import pytest

from sheet_translator.batching import batch_work_items, split_work_item
from sheet_translator.models import WorkItem

LANGUAGES = ("es", "fr", "de", "it", "pt", "ja", "ko", "zh", "ru", "pl", "tr", "ar")


def make_item(text: str, codes=LANGUAGES, key: str = "k") -> WorkItem:
    return WorkItem(
        key=key,
        source_text=text,
        target_language_codes=tuple(codes),
        context="ctx",
        row_index=3,
        category="UI",
    )


def test_short_text_is_chunked_by_batch_size():
    """Test that short texts are split into groups of batch_size languages."""
    batches = split_work_item(make_item("Hello"), batch_size=5)

    assert [b.target_language_codes for b in batches] == [
        ("es", "fr", "de", "it", "pt"),
        ("ja", "ko", "zh", "ru", "pl"),
        ("tr", "ar"),
    ]


def test_long_text_gets_one_language_per_batch():
    """Test that texts over the length limit get one language per batch."""
    batches = split_work_item(make_item("x" * 301), batch_size=5, max_text_length=300)

    assert len(batches) == len(LANGUAGES)
    assert all(len(b.target_language_codes) == 1 for b in batches)


def test_text_at_threshold_is_still_batched():
    """Test that a text exactly at the length limit is still batched."""
    batches = split_work_item(make_item("x" * 300), batch_size=5, max_text_length=300)

    assert len(batches) == 3


@pytest.mark.parametrize("text", ["short", "y" * 1000])
@pytest.mark.parametrize("batch_size", [1, 3, 5, 20])
def test_batches_partition_the_missing_languages(text, batch_size):
    """Test that batches cover every missing language exactly once, in order."""
    item = make_item(text)
    batches = split_work_item(item, batch_size=batch_size)

    flattened = [code for b in batches for code in b.target_language_codes]
    assert flattened == list(item.target_language_codes)
    limit = batch_size if len(text) <= 300 else 1
    assert all(1 <= len(b.target_language_codes) <= limit for b in batches)


def test_batches_keep_the_rest_of_the_item():
    """Test that batching only changes the language tuple."""
    item = make_item("Hello", codes=("es", "fr"))

    (batch,) = split_work_item(item, batch_size=5)

    assert batch == item


def test_invalid_batch_size():
    """Test that a batch size below 1 is rejected."""
    with pytest.raises(ValueError, match="batch_size"):
        split_work_item(make_item("Hello"), batch_size=0)


def test_batch_work_items_preserves_scan_order():
    """Test that batches of several items keep scan order."""
    items = [make_item("a", codes=("es", "fr", "de"), key="first"), make_item("b", codes=("es",), key="second")]

    batches = list(batch_work_items(items, batch_size=2))

    assert [(b.key, b.target_language_codes) for b in batches] == [
        ("first", ("es", "fr")),
        ("first", ("de",)),
        ("second", ("es",)),
    ]
