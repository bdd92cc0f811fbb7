"""Correction workflow - raw text chunks to one monotonically numbered SRT document."""

import time

import structlog

from srtstudio.exceptions import ServiceError
from srtstudio.subtitles.models import (
    CorrectionRunResult,
    RunProgress,
    RunStatus,
    SubtitleBlock,
)
from srtstudio.subtitles.services.generation import GenerationAdapter
from srtstudio.subtitles.services.progress import publish_progress
from srtstudio.subtitles.services.range_selector import advance_range, to_slice
from srtstudio.subtitles.services.srt_processor import SRTProcessor
from srtstudio.subtitles.session import CorrectionSession
from srtstudio.types import ProgressCallback

logger = structlog.get_logger(__name__)


class CorrectionService:
    """Drive one correction call per raw chunk, strictly sequentially."""

    def __init__(self, adapter: GenerationAdapter):
        self.adapter = adapter
        self.processor = SRTProcessor()

    async def run(
        self,
        session: CorrectionSession,
        progress_callback: ProgressCallback | None = None,
    ) -> CorrectionRunResult:
        """
        Process the session's selected chunk range.

        A range starting at chunk 1 discards the accumulated blocks and restarts
        numbering at 1; any other range appends and continues from one past the
        last existing block ID. Each chunk's blocks are appended and published
        as soon as they arrive. The first failing chunk halts the run; blocks
        from earlier chunks are kept. On success the range advances to the next
        window if chunks remain.

        Args:
            session: Correction session (input text, range, accumulated blocks)
            progress_callback: Called with (progress, blocks) after every chunk

        Returns:
            CorrectionRunResult describing the run

        Raises:
            ConfigurationError: If the adapter has no credentials
            SessionBusyError: If another operation holds the session
        """
        chunks = session.chunks
        window = to_slice(session.range, len(chunks))
        if window is None:
            logger.info(
                "Correction range not satisfiable - nothing to do",
                range=str(session.range),
                total_chunks=len(chunks),
            )
            return CorrectionRunResult(status=session.status, blocks=list(session.blocks))

        self.adapter.ensure_configured()

        async with session.exclusive("correction run"):
            selected = chunks[window]
            start_time = time.time()

            if session.range.start == 1:
                blocks: list[SubtitleBlock] = []
                next_id = 1
            else:
                blocks = list(session.blocks)
                next_id = blocks[-1].id + 1 if blocks else 1

            session.blocks = list(blocks)
            session.status = RunStatus.RUNNING
            session.error = None
            session.progress = RunProgress(0, len(selected))

            logger.info(
                "Starting correction run",
                range=str(session.range),
                chunks_selected=len(selected),
                total_chunks=len(chunks),
                start_id=next_id,
                phase="correction_start",
            )

            for chunk in selected:
                try:
                    srt_text = await self.adapter.correct_chunk(chunk.text, next_id)
                except ServiceError as e:
                    session.status = RunStatus.FAILED
                    session.error = e.message
                    logger.error(
                        "Correction run halted",
                        chunk_index=chunk.index + 1,
                        processed_chunks=session.progress.current,
                        kept_blocks=len(blocks),
                        error=e.message,
                        retryable=e.retryable,
                        phase="correction_error",
                    )
                    return CorrectionRunResult(
                        status=RunStatus.FAILED,
                        blocks=list(blocks),
                        processed_chunks=session.progress.current,
                        error=e.message,
                    )
                except Exception as e:
                    session.status = RunStatus.FAILED
                    session.error = str(e)
                    logger.error(
                        "Correction run crashed",
                        chunk_index=chunk.index + 1,
                        error=str(e),
                        exc_info=True,
                        phase="correction_error",
                    )
                    raise

                parsed = self.processor.parse(srt_text)
                if parsed:
                    if parsed[0].id != next_id:
                        logger.warning(
                            "Chunk numbering does not continue the document",
                            chunk_index=chunk.index + 1,
                            expected_id=next_id,
                            received_id=parsed[0].id,
                        )
                    blocks.extend(parsed)
                    next_id = parsed[-1].id + 1
                else:
                    logger.warning(
                        "Chunk produced no blocks",
                        chunk_index=chunk.index + 1,
                        response_length=len(srt_text),
                    )

                session.blocks = list(blocks)
                session.progress.current += 1
                logger.debug(
                    "Chunk corrected",
                    chunk_index=chunk.index + 1,
                    blocks_added=len(parsed),
                    next_id=next_id,
                    progress=f"{session.progress.current}/{session.progress.total}",
                )
                await publish_progress(progress_callback, session.progress, blocks)

            session.status = RunStatus.COMPLETED
            next_range = advance_range(window.stop, len(chunks), session.range_window)
            if next_range is not None:
                session.range = next_range

            logger.info(
                "Correction run completed",
                processing_time_ms=int((time.time() - start_time) * 1000),
                processed_chunks=len(selected),
                total_blocks=len(blocks),
                next_range=str(next_range) if next_range else None,
                phase="correction_complete",
            )
            return CorrectionRunResult(
                status=RunStatus.COMPLETED,
                blocks=list(blocks),
                processed_chunks=len(selected),
                next_range=next_range,
            )
