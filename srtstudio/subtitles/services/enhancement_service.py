"""Enhancement workflow - batch rewrite of an existing SRT document, merged back by ID."""

import time

import structlog

from srtstudio.config import Settings, settings as default_settings
from srtstudio.exceptions import ServiceError
from srtstudio.subtitles.models import (
    BlockIssue,
    EnhancementRunResult,
    RunProgress,
    RunStatus,
)
from srtstudio.subtitles.services.generation import GenerationAdapter
from srtstudio.subtitles.services.progress import publish_progress
from srtstudio.subtitles.services.range_selector import partition, to_slice
from srtstudio.subtitles.services.reconciliation import reconcile_by_id
from srtstudio.subtitles.services.srt_processor import SRTProcessor
from srtstudio.subtitles.session import EnhancementSession
from srtstudio.types import ProgressCallback

logger = structlog.get_logger(__name__)


class EnhancementService:
    """Rewrite a block range in fixed-size sub-batches, one call at a time."""

    def __init__(self, adapter: GenerationAdapter, config: Settings | None = None):
        self.adapter = adapter
        self.settings = config or default_settings
        self.processor = SRTProcessor()

    async def run(
        self,
        session: EnhancementSession,
        progress_callback: ProgressCallback | None = None,
    ) -> EnhancementRunResult:
        """
        Enhance the session's selected block range.

        Failures are local to a sub-batch: a call that fails marks every block
        of its sub-batch BATCH_FAILED and the run moves on. Successful responses
        are reconciled by ID (see reconcile_by_id). Blocks outside the range and
        blocks of earlier sub-batches are never rolled back.

        Args:
            session: Enhancement session (document, range, params, batch size)
            progress_callback: Called with (progress, blocks) after every sub-batch

        Returns:
            EnhancementRunResult with the merged document and error count

        Raises:
            ConfigurationError: If the adapter has no credentials
            SessionBusyError: If another operation holds the session
        """
        window = to_slice(session.range, len(session.blocks))
        if window is None:
            logger.info(
                "Enhancement range not satisfiable - nothing to do",
                range=str(session.range),
                total_blocks=len(session.blocks),
            )
            return EnhancementRunResult(status=session.status, blocks=session.blocks)

        self.adapter.ensure_configured()

        async with session.exclusive("enhancement run"):
            start_time = time.time()
            # Sub-batches hold references into session.blocks, so merges land in place
            selected = session.blocks[window]
            batches = partition(selected, session.batch_size)
            total = len(selected)

            session.status = RunStatus.RUNNING
            session.error = None
            session.processed_count = 0
            session.error_count = 0
            session.progress = RunProgress(0, total)
            failed_batches = 0

            logger.info(
                "Starting enhancement run",
                range=str(session.range),
                blocks_selected=total,
                batch_size=session.batch_size,
                total_batches=len(batches),
                params=session.params.model_dump(mode="json"),
                phase="enhancement_start",
            )

            for batch_index, batch in enumerate(batches, start=1):
                try:
                    srt_text = await self.adapter.enhance_batch(batch, session.params)
                except ServiceError as e:
                    failed_batches += 1
                    for block in batch:
                        block.mark_error(BlockIssue.BATCH_FAILED)
                    session.error_count += len(batch)
                    session.error = e.message
                    logger.error(
                        "Enhancement batch failed",
                        batch_index=batch_index,
                        first_id=batch[0].id,
                        last_id=batch[-1].id,
                        error=e.message,
                        retryable=e.retryable,
                        phase="enhancement",
                    )
                except Exception as e:
                    session.status = RunStatus.FAILED
                    session.error = str(e)
                    logger.error(
                        "Enhancement run crashed",
                        batch_index=batch_index,
                        error=str(e),
                        exc_info=True,
                        phase="enhancement_error",
                    )
                    raise
                else:
                    reconciliation = reconcile_by_id(
                        batch,
                        self.processor.parse(srt_text),
                        length_ratio_min=self.settings.length_ratio_min,
                        length_ratio_max=self.settings.length_ratio_max,
                    )
                    session.error_count += reconciliation.error_count
                    logger.debug(
                        "Enhancement batch merged",
                        batch_index=batch_index,
                        updated=len(reconciliation.updated_ids),
                        missing=len(reconciliation.missing_ids),
                        drifted=len(reconciliation.drifted_ids),
                        phase="enhancement",
                    )

                session.processed_count = min(session.processed_count + len(batch), total)
                session.progress.current = session.processed_count
                await publish_progress(progress_callback, session.progress, session.blocks)

            session.status = RunStatus.COMPLETED

            logger.info(
                "Enhancement run completed",
                processing_time_ms=int((time.time() - start_time) * 1000),
                processed_blocks=session.processed_count,
                error_count=session.error_count,
                failed_batches=failed_batches,
                phase="enhancement_complete",
            )
            return EnhancementRunResult(
                status=RunStatus.COMPLETED,
                blocks=session.blocks,
                processed_blocks=session.processed_count,
                error_count=session.error_count,
                failed_batches=failed_batches,
            )
