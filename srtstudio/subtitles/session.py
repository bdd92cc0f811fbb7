"""
Workflow sessions - explicit per-workflow state owned by the caller.

Each workflow (correction, enhancement, style transfer) gets its own session
object that is passed into the orchestrators. A session admits one writer at a
time: batch runs and single-block regenerations enter `exclusive()`, which
refuses a second writer with SessionBusyError instead of interleaving.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import structlog

from srtstudio.config import settings
from srtstudio.exceptions import SessionBusyError
from srtstudio.subtitles.models import (
    BlockRange,
    EnhancementParams,
    RawChunk,
    RunProgress,
    RunStatus,
    SubtitleBlock,
)
from srtstudio.subtitles.services.chunker import chunk_raw_text
from srtstudio.subtitles.services.range_selector import default_range
from srtstudio.subtitles.services.srt_processor import SRTProcessor

logger = structlog.get_logger(__name__)

_processor = SRTProcessor()


class SingleWriterMixin:
    """Per-session mutual exclusion token."""

    _lock: asyncio.Lock

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @asynccontextmanager
    async def exclusive(self, operation: str) -> AsyncIterator[None]:
        """Hold the session's single-writer token for the duration of an operation."""
        if self._lock.locked():
            logger.warning("Session busy", operation=operation)
            raise SessionBusyError(
                f"Cannot start {operation}: another operation is in progress"
            )
        async with self._lock:
            yield


@dataclass
class WorkflowSession(SingleWriterMixin):
    """Document, range and run state for one workflow."""

    blocks: list[SubtitleBlock] = field(default_factory=list)
    range: BlockRange = field(default_factory=lambda: BlockRange(1, 0))
    status: RunStatus = RunStatus.IDLE
    progress: RunProgress = field(default_factory=RunProgress)
    error: str | None = None
    regenerating_id: int | None = None
    range_window: int = field(default_factory=lambda: settings.range_window)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    def find_index(self, block_id: int) -> int | None:
        for index, block in enumerate(self.blocks):
            if block.id == block_id:
                return index
        return None

    def edit_block(self, block_id: int, text: str) -> bool:
        """Manual edit of one block's text. Returns False if the ID is unknown."""
        index = self.find_index(block_id)
        if index is None:
            return False
        self.blocks[index].text = text
        return True

    def set_range(self, start: int, end: int) -> None:
        self.range = BlockRange(start, end)

    def clear(self) -> None:
        """Discard the document and reset run state."""
        self.blocks = []
        self.status = RunStatus.IDLE
        self.progress = RunProgress()
        self.error = None

    def renumber(self) -> None:
        """Renumber blocks contiguously from 1."""
        self.blocks = _processor.reindex_blocks(self.blocks)

    def to_srt(self) -> str:
        return _processor.serialize(self.blocks)

    def duration(self) -> str:
        return _processor.document_duration(self.blocks)

    @property
    def flagged_blocks(self) -> list[SubtitleBlock]:
        return [block for block in self.blocks if block.needs_attention]


@dataclass
class CorrectionSession(WorkflowSession):
    """Raw text in, corrected SRT blocks out, processed chunk range by range."""

    raw_text: str = ""
    max_chars: int = field(default_factory=lambda: settings.chunk_max_chars)
    sentence_split: bool = False

    @property
    def chunks(self) -> list[RawChunk]:
        if not self.raw_text:
            return []
        return chunk_raw_text(
            self.raw_text, self.max_chars, sentence_split=self.sentence_split
        )

    def load_text(self, raw_text: str) -> None:
        """Replace the input text and reset the range to the default window."""
        self.raw_text = raw_text
        self.range = default_range(len(self.chunks), self.range_window)

    def set_max_chars(self, max_chars: int) -> None:
        self.max_chars = max_chars
        self.range = default_range(len(self.chunks), self.range_window)

    def input_duration(self) -> str:
        return _processor.estimate_duration(self.raw_text)


@dataclass
class EnhancementSession(WorkflowSession):
    """Existing SRT document rewritten in fixed-size sub-batches."""

    batch_size: int = field(default_factory=lambda: settings.enhancement_batch_size)
    params: EnhancementParams = field(default_factory=EnhancementParams)
    processed_count: int = 0
    error_count: int = 0

    def load_blocks(self, blocks: list[SubtitleBlock]) -> None:
        self.blocks = blocks
        self.range = default_range(len(blocks), self.range_window)
        self.status = RunStatus.IDLE
        self.progress = RunProgress()
        self.processed_count = 0
        self.error_count = 0
        self.error = None

    def load_srt(self, content: str) -> None:
        self.load_blocks(_processor.parse(content))


@dataclass
class StyleSession(SingleWriterMixin):
    """Whole-document style transfer state."""

    input_srt: str = ""
    style_sample: str = ""
    output: str = ""
    status: RunStatus = RunStatus.IDLE
    error: str | None = None
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)
