"""SRT document model - parse into blocks, serialize back, and timing helpers."""

import dataclasses
import math
import re
import time

import structlog

from srtstudio.subtitles.models import (
    BlockIssue,
    ParseResult,
    SubtitleBlock,
    has_context_risk,
)
from srtstudio.utils.time_formatters import (
    SRT_TIMESTAMP_PATTERN,
    format_clock,
    parse_timestamp_srt,
)

logger = structlog.get_logger(__name__)


class SRTProcessor:
    """Parse and serialize SRT documents."""

    ## Regex patterns for SRT parsing
    # One record: "<id>\n<start> --> <end>\n<text until the next record or end>"
    # Trailing spaces or tabs are tolerated on the ID and timestamp lines
    BLOCK_PATTERN = re.compile(
        rf"(\d+)[ \t]*\n({SRT_TIMESTAMP_PATTERN}) --> ({SRT_TIMESTAMP_PATTERN})[ \t]*(?:\n|\Z)"
        rf"((?:(?!\d+[ \t]*\n{SRT_TIMESTAMP_PATTERN} -->).)*)",
        re.DOTALL,
    )
    # Assumed reading rate for duration estimates
    CHARS_PER_SECOND = 15

    def parse_with_remainder(self, content: str) -> ParseResult:
        """
        Parse SRT content into blocks, keeping track of unparsed fragments.

        Algorithm:
        1. Normalize line endings and drop a leading BOM
        2. Scan for consecutive records with BLOCK_PATTERN
        3. Trim each record's text; snapshot it as original_text
        4. Flag blocks whose text carries the context-risk marker
        5. Collect any non-blank text between records as remainder
        """
        start_time = time.time()

        normalized = content.replace("\r\n", "\n").replace("\r", "\n").lstrip("\ufeff")

        result = ParseResult()
        position = 0
        for match in self.BLOCK_PATTERN.finditer(normalized):
            gap = normalized[position : match.start()].strip()
            if gap:
                result.remainder.append(gap)
            position = match.end()

            text = match.group(4).strip()
            block = SubtitleBlock(
                id=int(match.group(1)),
                start_time=match.group(2),
                end_time=match.group(3),
                text=text,
                original_text=text,
            )
            if has_context_risk(text):
                block.mark_error(BlockIssue.CONTEXT_RISK)
            result.blocks.append(block)

        tail = normalized[position:].strip()
        if tail:
            result.remainder.append(tail)

        if result.remainder:
            logger.warning(
                "Discarded unparsed SRT fragments",
                fragments=len(result.remainder),
                preview=result.remainder[0][:50],
            )

        logger.debug(
            "SRT parsing completed",
            processing_time_ms=int((time.time() - start_time) * 1000),
            total_blocks=len(result.blocks),
            flagged_blocks=sum(1 for b in result.blocks if b.is_error),
        )
        return result

    def parse(self, content: str) -> list[SubtitleBlock]:
        """Parse SRT content; malformed or partial fragments are logged and dropped."""
        return self.parse_with_remainder(content).blocks

    def serialize(self, blocks: list[SubtitleBlock]) -> str:
        """Render blocks as SRT text. No renumbering, no timestamp validation."""
        return "\n".join(
            f"{block.id}\n{block.start_time} --> {block.end_time}\n{block.text}\n"
            for block in blocks
        )

    def estimate_duration(self, text: str) -> str:
        """Rough HH:MM:SS reading time for raw text at CHARS_PER_SECOND."""
        seconds = math.ceil(len(text) / self.CHARS_PER_SECOND)
        return format_clock(seconds)

    def document_duration(self, blocks: list[SubtitleBlock]) -> str:
        """HH:MM:SS of the last block's end time."""
        if not blocks:
            return "00:00:00"
        return blocks[-1].end_time.split(",")[0]

    def reindex_blocks(self, blocks: list[SubtitleBlock]) -> list[SubtitleBlock]:
        """Return copies of the blocks numbered contiguously from 1."""
        return [
            dataclasses.replace(block, id=index)
            for index, block in enumerate(blocks, start=1)
        ]

    def find_timing_violations(self, blocks: list[SubtitleBlock]) -> list[int]:
        """IDs of blocks whose start is after their end or whose timestamps are invalid."""
        violations = []
        for block in blocks:
            try:
                if parse_timestamp_srt(block.start_time) > parse_timestamp_srt(
                    block.end_time
                ):
                    violations.append(block.id)
            except ValueError:
                violations.append(block.id)
        return violations


_processor = SRTProcessor()

parse_srt = _processor.parse
blocks_to_srt = _processor.serialize
