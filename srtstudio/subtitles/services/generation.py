"""Generation adapter - the only boundary between the pipeline and the LLM backend."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
import re
import time
from typing import Protocol

from asyncio_throttle.throttler import Throttler
from pydantic_ai import Agent
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIResponsesModel
from pydantic_ai.providers.openai import OpenAIProvider
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from srtstudio.config import Settings, settings as default_settings
from srtstudio.exceptions import (
    ConfigurationError,
    RateLimitError,
    ServiceError,
)
from srtstudio.subtitles.agents.corrector import CORRECTION_USER_PROMPT, correction_agent
from srtstudio.subtitles.agents.enhancer import ENHANCEMENT_USER_PROMPT, enhancement_agent
from srtstudio.subtitles.agents.regenerator import (
    REGENERATION_USER_PROMPT,
    regeneration_agent,
)
from srtstudio.subtitles.agents.stylist import STYLE_USER_PROMPT, style_agent
from srtstudio.subtitles.models import EnhancementParams, SubtitleBlock
from srtstudio.subtitles.services.srt_processor import blocks_to_srt
from srtstudio.utils.model_settings import build_openai_model_settings

logger = structlog.get_logger(__name__)

CODE_FENCE_LINE = re.compile(r"^\s*```[\w-]*\s*$", re.MULTILINE)


class GenerationAdapter(Protocol):
    """Contract the orchestrators need from the generation backend."""

    def ensure_configured(self) -> None:
        """Raise ConfigurationError if no call can possibly succeed."""
        ...

    async def correct_chunk(self, raw_text: str, start_id: int) -> str:
        """Corrected SRT rendering of raw text, numbered from start_id."""
        ...

    async def enhance_batch(
        self, blocks: list[SubtitleBlock], params: EnhancementParams
    ) -> str:
        """Restyled SRT for the given blocks with the same IDs and timestamps."""
        ...

    async def regenerate_block(self, text: str, start_time: str, end_time: str) -> str:
        """Rewritten text for a single block."""
        ...

    def style_transfer(self, subtitle_text: str, style_sample: str) -> AsyncIterator[str]:
        """Restyled document delivered as ordered text fragments."""
        ...


def strip_code_fences(text: str) -> str:
    """Drop Markdown fence lines (```srt ... ```) that models wrap around SRT output."""
    return CODE_FENCE_LINE.sub("", text).strip()


def to_service_error(error: Exception) -> ServiceError:
    """Map a backend exception onto the pipeline's error taxonomy."""
    if isinstance(error, ServiceError):
        return error
    if isinstance(error, ModelHTTPError):
        if error.status_code == 429:
            return RateLimitError(
                "Rate limit exceeded. Retry later.", status_code=error.status_code
            )
        return ServiceError(f"AI service error: {error}", status_code=error.status_code)
    return ServiceError(f"AI service error: {error}")


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, ServiceError) and error.retryable


def _log_retry(phase: str) -> Callable[[RetryCallState], None]:
    def log(retry_state: RetryCallState) -> None:
        logger.warning(
            "Generation call rate limited",
            phase=phase,
            attempt=retry_state.attempt_number,
            wait_time_seconds=retry_state.next_action.sleep if retry_state.next_action else 0,
        )

    return log


class PydanticAIGenerationAdapter:
    """Issue generation requests through pydantic-ai agents with rate limiting."""

    def __init__(self, config: Settings | None = None, model: Model | None = None):
        """
        Initialize the adapter.

        Args:
            config: Settings to use (defaults to the module-level settings)
            model: Optional pydantic-ai model used for every request instead of
                the configured OpenAI models
        """
        self.settings = config or default_settings
        self._model_override = model
        self._models: dict[str, Model] = {}
        self.throttler = Throttler(rate_limit=self.settings.rate_limit_per_minute, period=60)

    def ensure_configured(self) -> None:
        if self._model_override is None and not self.settings.openai_api_key:
            raise ConfigurationError("API key is missing. Set OPENAI_API_KEY.")

    def _resolve_model(self, model_name: str) -> Model:
        if self._model_override is not None:
            return self._model_override
        self.ensure_configured()
        if model_name not in self._models:
            provider = OpenAIProvider(api_key=self.settings.openai_api_key)
            self._models[model_name] = OpenAIResponsesModel(model_name, provider=provider)
            logger.info("Generation model configured", model=model_name)
        return self._models[model_name]

    async def _run(
        self,
        agent: Agent[None, str],
        prompt: str,
        *,
        model_name: str,
        temperature: float,
        phase: str,
    ) -> str:
        model = self._resolve_model(model_name)
        model_settings = build_openai_model_settings(
            model_name,
            temperature=temperature,
            reasoning_effort=self.settings.reasoning_effort,
        )

        start_time = time.time()
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.settings.rate_limit_retries + 1),
            wait=wait_exponential(
                multiplier=1, max=self.settings.rate_limit_backoff_cap_seconds
            ),
            retry=retry_if_exception(_is_retryable),
            before_sleep=_log_retry(phase),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    try:
                        async with self.throttler:
                            result = await agent.run(
                                prompt, model=model, model_settings=model_settings
                            )
                    except ServiceError:
                        raise
                    except Exception as e:
                        raise to_service_error(e) from e
        except ServiceError as e:
            logger.error(
                "Generation call failed",
                phase=phase,
                error=e.message,
                retryable=e.retryable,
            )
            raise

        logger.debug(
            "Generation call completed",
            phase=phase,
            processing_time_ms=int((time.time() - start_time) * 1000),
            output_length=len(result.output),
        )
        return result.output

    async def correct_chunk(self, raw_text: str, start_id: int) -> str:
        prompt = CORRECTION_USER_PROMPT.format(start_id=start_id, raw_text=raw_text)
        output = await self._run(
            correction_agent,
            prompt,
            model_name=self.settings.correction_model,
            temperature=self.settings.correction_temperature,
            phase="correction",
        )
        return strip_code_fences(output)

    async def enhance_batch(
        self, blocks: list[SubtitleBlock], params: EnhancementParams
    ) -> str:
        if not blocks:
            raise ValueError("enhance_batch requires at least one block")

        prompt = ENHANCEMENT_USER_PROMPT.format(
            redundancy=params.redundancy.value,
            emotion=params.emotion.value,
            humor=params.humor.value,
            pacing=params.pacing.value,
            character_substitution=params.character_substitution.strip() or "none",
            block_count=len(blocks),
            first_id=blocks[0].id,
            last_id=blocks[-1].id,
            srt_input=blocks_to_srt(blocks),
        )
        output = await self._run(
            enhancement_agent,
            prompt,
            model_name=self.settings.enhancement_model,
            temperature=self.settings.enhancement_temperature,
            phase="enhancement",
        )
        return strip_code_fences(output)

    async def regenerate_block(self, text: str, start_time: str, end_time: str) -> str:
        prompt = REGENERATION_USER_PROMPT.format(
            start_time=start_time, end_time=end_time, text=text
        )
        output = await self._run(
            regeneration_agent,
            prompt,
            model_name=self.settings.regeneration_model,
            temperature=self.settings.regeneration_temperature,
            phase="regeneration",
        )
        new_text = output.strip()
        if not new_text:
            raise ServiceError("AI service error: empty regeneration response")
        return new_text

    async def style_transfer(
        self, subtitle_text: str, style_sample: str
    ) -> AsyncIterator[str]:
        model_name = self.settings.style_model
        model = self._resolve_model(model_name)
        prompt = STYLE_USER_PROMPT.format(
            style_sample=style_sample[: self.settings.style_sample_max_chars],
            subtitle_text=subtitle_text,
        )
        model_settings = build_openai_model_settings(
            model_name,
            temperature=self.settings.style_temperature,
            reasoning_effort=self.settings.reasoning_effort,
        )

        try:
            async with self.throttler:
                async with style_agent.run_stream(
                    prompt, model=model, model_settings=model_settings
                ) as result:
                    async for fragment in result.stream_text(delta=True, debounce_by=None):
                        if fragment:
                            yield fragment
        except Exception as e:
            logger.error("Style transfer stream failed", phase="style", error=str(e))
            raise to_service_error(e) from e
