"""Inclusive 1-based range selection over chunks or blocks."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

import structlog

from srtstudio.subtitles.models import BlockRange

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_WINDOW = 20


def to_slice(selection: BlockRange, length: int) -> slice | None:
    """
    Convert an inclusive 1-based range into a 0-based half-open slice.

    The end is clamped to the collection length. Returns None (a no-op) when
    start < 1 or start > clamped end.
    """
    end = min(selection.end, length)
    if selection.start < 1 or selection.start > end:
        logger.debug(
            "Range not satisfiable",
            range=str(selection),
            collection_length=length,
        )
        return None
    return slice(selection.start - 1, end)


def select(items: Sequence[T], selection: BlockRange) -> list[T]:
    """Items covered by the range; empty when the range is not satisfiable."""
    window = to_slice(selection, len(items))
    if window is None:
        return []
    return list(items[window])


def default_range(length: int, window: int = DEFAULT_WINDOW) -> BlockRange:
    """Initial range for a freshly loaded collection: {1, min(n, window)}."""
    return BlockRange(1, min(length, window))


def advance_range(
    last_processed: int, length: int, window: int = DEFAULT_WINDOW
) -> BlockRange | None:
    """Next range after a completed run, or None when nothing remains."""
    if last_processed >= length:
        return None
    start = last_processed + 1
    return BlockRange(start, min(length, start + window - 1))


def partition(items: Sequence[T], size: int) -> list[list[T]]:
    """Split items into consecutive sub-batches of at most `size` elements."""
    if size < 1:
        raise ValueError(f"batch size must be >= 1, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]
