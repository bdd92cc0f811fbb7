"""Single-block regeneration - rewrite one block without touching its siblings."""

import time

import structlog

from srtstudio.exceptions import ServiceError
from srtstudio.subtitles.services.generation import GenerationAdapter
from srtstudio.subtitles.session import WorkflowSession

logger = structlog.get_logger(__name__)


class RegenerationService:
    """Regenerate the text of exactly one block."""

    def __init__(self, adapter: GenerationAdapter):
        self.adapter = adapter

    async def regenerate(self, session: WorkflowSession, block_id: int) -> bool:
        """
        Replace one block's text with a regenerated version.

        On success the block's text is replaced and its error state cleared.
        On any generation failure the block is left exactly as it was and the
        failure is only logged. Safe to retry.

        Returns:
            True if the block was updated, False otherwise

        Raises:
            ConfigurationError: If the adapter has no credentials
            SessionBusyError: If another operation holds the session
        """
        self.adapter.ensure_configured()

        async with session.exclusive("block regeneration"):
            index = session.find_index(block_id)
            if index is None:
                logger.warning("Regeneration requested for unknown block", block_id=block_id)
                return False

            block = session.blocks[index]
            session.regenerating_id = block_id
            start_time = time.time()
            try:
                new_text = await self.adapter.regenerate_block(
                    block.text, block.start_time, block.end_time
                )
            except ServiceError as e:
                logger.error(
                    "Failed to regenerate block",
                    block_id=block_id,
                    error=e.message,
                    retryable=e.retryable,
                    phase="regeneration",
                )
                return False
            finally:
                session.regenerating_id = None

            block.text = new_text
            block.clear_error()
            logger.info(
                "Block regenerated",
                block_id=block_id,
                processing_time_ms=int((time.time() - start_time) * 1000),
                phase="regeneration",
            )
            return True
