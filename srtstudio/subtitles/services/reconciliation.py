"""Merge generated blocks back into the blocks that were requested, by ID only."""

from __future__ import annotations

import structlog

from srtstudio.subtitles.models import (
    BlockIssue,
    ReconciliationResult,
    SubtitleBlock,
)

logger = structlog.get_logger(__name__)


def reconcile_by_id(
    originals: list[SubtitleBlock],
    generated: list[SubtitleBlock],
    *,
    length_ratio_min: float = 0.5,
    length_ratio_max: float = 2.0,
) -> ReconciliationResult:
    """
    Apply generated text onto the original blocks in place.

    Response order is never trusted: each original is matched to the first
    generated block carrying the same ID. A match replaces the text only (the
    original ID and timestamps are kept) and clears any earlier error. A
    missing ID marks the original as MISSING_FROM_RESPONSE and leaves its
    text alone. Text whose length ratio falls outside the tolerance is
    applied but flagged LENGTH_DRIFT.
    """
    by_id: dict[int, SubtitleBlock] = {}
    for block in generated:
        by_id.setdefault(block.id, block)

    result = ReconciliationResult()
    requested_ids = {block.id for block in originals}
    result.unexpected_ids = sorted(set(by_id) - requested_ids)

    for original in originals:
        match = by_id.get(original.id)
        if match is None:
            original.mark_error(BlockIssue.MISSING_FROM_RESPONSE)
            result.missing_ids.append(original.id)
            continue

        source_length = len(original.text)
        original.text = match.text
        original.clear_error()
        if match.issue is BlockIssue.CONTEXT_RISK:
            original.mark_error(BlockIssue.CONTEXT_RISK)
            result.flagged_ids.append(original.id)

        if source_length:
            ratio = len(match.text) / source_length
            if ratio < length_ratio_min or ratio > length_ratio_max:
                original.mark_error(BlockIssue.LENGTH_DRIFT)
                result.drifted_ids.append(original.id)
                logger.warning(
                    "Significant length change detected",
                    block_id=original.id,
                    original_length=source_length,
                    rewritten_length=len(match.text),
                    length_ratio=round(ratio, 2),
                    phase="reconciliation",
                )
                continue
        result.updated_ids.append(original.id)

    if len(generated) != len(originals) or result.unexpected_ids:
        logger.warning(
            "Batch response mismatch",
            requested=len(originals),
            received=len(generated),
            missing_ids=result.missing_ids,
            unexpected_ids=result.unexpected_ids,
            phase="reconciliation",
        )

    return result
