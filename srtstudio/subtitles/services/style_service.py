"""Style transfer workflow - whole-document rewrite delivered as a cancellable stream."""

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing
import inspect
import time

import structlog

from srtstudio.exceptions import ServiceError
from srtstudio.subtitles.models import RunStatus, SubtitleBlock
from srtstudio.subtitles.services.generation import GenerationAdapter, strip_code_fences
from srtstudio.subtitles.services.srt_processor import SRTProcessor
from srtstudio.subtitles.session import StyleSession

logger = structlog.get_logger(__name__)

FragmentCallback = Callable[[str], None] | Callable[[str], Awaitable[None]]


class StyleTransferStream:
    """
    Lazy, finite, non-restartable sequence of restyled text fragments.

    Iterating the stream drives the request. The session lock is taken on the
    first fragment request and held until the stream is finished or cancelled.
    Fragments arrive in order; `text` holds everything received so far.
    """

    def __init__(self, adapter: GenerationAdapter, session: StyleSession):
        self._adapter = adapter
        self._session = session
        self._parts: list[str] = []
        self._started = False
        self._finished = False
        self._cancelled = False
        self._fragments = self._produce()

    @property
    def text(self) -> str:
        return "".join(self._parts)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def blocks(self) -> list[SubtitleBlock]:
        """Blocks parsed from the text received so far."""
        return SRTProcessor().parse(strip_code_fences(self.text))

    def __aiter__(self) -> "StyleTransferStream":
        return self

    async def __anext__(self) -> str:
        if self._cancelled:
            raise StopAsyncIteration
        self._started = True
        try:
            return await self._fragments.__anext__()
        except BaseException:
            self._finished = True
            raise

    async def cancel(self) -> None:
        """Stop the stream. Fragments already received are kept in `text`."""
        if self._cancelled or self._finished:
            return
        self._cancelled = True
        await self._fragments.aclose()
        if self._started:
            logger.info("Style transfer cancelled", received_chars=len(self.text))

    aclose = cancel

    async def _produce(self) -> AsyncIterator[str]:
        session = self._session
        async with session.exclusive("style transfer"):
            start_time = time.time()
            session.status = RunStatus.RUNNING
            session.error = None
            session.output = ""
            logger.info(
                "Starting style transfer",
                input_length=len(session.input_srt),
                sample_length=len(session.style_sample),
                phase="style_start",
            )

            completed = False
            try:
                async with aclosing(
                    self._adapter.style_transfer(session.input_srt, session.style_sample)
                ) as fragments:
                    async for fragment in fragments:
                        self._parts.append(fragment)
                        session.output = self.text
                        yield fragment
                completed = True
            except ServiceError as e:
                session.status = RunStatus.FAILED
                session.error = e.message
                session.output = ""
                logger.error(
                    "Style transfer failed",
                    error=e.message,
                    retryable=e.retryable,
                    phase="style_error",
                )
                raise
            finally:
                if not completed and session.status is RunStatus.RUNNING:
                    # Cancelled mid-stream: keep the partial output
                    session.status = RunStatus.IDLE

            session.status = RunStatus.COMPLETED
            logger.info(
                "Style transfer completed",
                processing_time_ms=int((time.time() - start_time) * 1000),
                output_length=len(session.output),
                fragments=len(self._parts),
                phase="style_complete",
            )


class StyleTransferService:
    """Restyle a whole SRT document after a reference text sample."""

    def __init__(self, adapter: GenerationAdapter):
        self.adapter = adapter

    def stream(self, session: StyleSession) -> StyleTransferStream:
        """
        Open a fragment stream for the session's input and style sample.

        Raises:
            ValueError: If the input document or the style sample is blank
            ConfigurationError: If the adapter has no credentials
        """
        if not session.input_srt.strip() or not session.style_sample.strip():
            raise ValueError("Style transfer needs both an input document and a style sample")
        self.adapter.ensure_configured()
        return StyleTransferStream(self.adapter, session)

    async def run(
        self, session: StyleSession, on_fragment: FragmentCallback | None = None
    ) -> str:
        """
        Consume the whole stream and return the concatenated result.

        `on_fragment` (sync or async) receives every fragment in order.
        ServiceError propagates after the session is marked failed.
        """
        stream = self.stream(session)
        async with aclosing(stream):
            async for fragment in stream:
                if on_fragment is not None:
                    result = on_fragment(fragment)
                    if inspect.isawaitable(result):
                        await result
        return stream.text
