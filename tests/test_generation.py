"""
Tests for the pydantic-ai generation adapter.

Uses FunctionModel/TestModel so no real model requests are made.
"""

import pytest
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel
from pydantic_ai.models.test import TestModel

from srtstudio.config import Settings
from srtstudio.exceptions import ConfigurationError, RateLimitError, ServiceError
from srtstudio.subtitles.models import EnhancementParams, HumorLevel, Pacing
from srtstudio.subtitles.services.generation import (
    PydanticAIGenerationAdapter,
    strip_code_fences,
    to_service_error,
)


def _prompt(messages: list[ModelMessage]) -> str:
    return messages[-1].parts[-1].content


def _settings(**overrides) -> Settings:
    values = {"openai_api_key": "test-key-123", "rate_limit_backoff_cap_seconds": 0.0}
    values.update(overrides)
    return Settings(**values)


class TestHelpers:
    def test_strip_code_fences(self):
        text = "```srt\n1\n00:00:00,000 --> 00:00:02,000\nHello\n```"

        assert strip_code_fences(text) == "1\n00:00:00,000 --> 00:00:02,000\nHello"

    def test_strip_code_fences_plain_text(self):
        assert strip_code_fences("  plain\n") == "plain"

    def test_rate_limit_mapped(self):
        error = to_service_error(ModelHTTPError(status_code=429, model_name="gpt-4.1"))

        assert isinstance(error, RateLimitError)
        assert error.retryable is True
        assert error.status_code == 429

    def test_other_http_error_mapped(self):
        error = to_service_error(ModelHTTPError(status_code=500, model_name="gpt-4.1"))

        assert type(error) is ServiceError
        assert error.retryable is False
        assert error.status_code == 500

    def test_unknown_error_mapped(self):
        error = to_service_error(ConnectionError("reset by peer"))

        assert error.message == "AI service error: reset by peer"


class TestAdapterRequests:
    @pytest.mark.asyncio
    async def test_correct_chunk_prompt_carries_start_id(self):
        prompts = []

        def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            prompts.append(_prompt(messages))
            return ModelResponse(
                parts=[TextPart("```srt\n6\n00:00:00,000 --> 00:00:02,000\nFixed text\n```")]
            )

        adapter = PydanticAIGenerationAdapter(config=_settings(), model=FunctionModel(respond))

        output = await adapter.correct_chunk("raw words here", 6)

        assert output == "6\n00:00:00,000 --> 00:00:02,000\nFixed text"
        assert "start numbering blocks at ID 6" in prompts[0]
        assert "raw words here" in prompts[0]

    @pytest.mark.asyncio
    async def test_enhance_batch_prompt(self, make_blocks):
        prompts = []

        def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            prompts.append(_prompt(messages))
            return ModelResponse(parts=[TextPart("ok")])

        adapter = PydanticAIGenerationAdapter(config=_settings(), model=FunctionModel(respond))
        params = EnhancementParams(humor=HumorLevel.SARCASTIC, pacing=Pacing.DYNAMIC)

        await adapter.enhance_batch(make_blocks(3), params)

        prompt = prompts[0]
        assert "exactly 3 blocks" in prompt
        assert "1 to 3" in prompt
        assert "Humor: sarcastic" in prompt
        assert "Pacing: dynamic" in prompt
        assert "Character substitution: none" in prompt
        assert "00:00:04,000 --> 00:00:06,000" in prompt

    @pytest.mark.asyncio
    async def test_enhance_batch_requires_blocks(self):
        adapter = PydanticAIGenerationAdapter(config=_settings(), model=TestModel())

        with pytest.raises(ValueError):
            await adapter.enhance_batch([], EnhancementParams())

    @pytest.mark.asyncio
    async def test_regenerate_block_trims_output(self):
        adapter = PydanticAIGenerationAdapter(
            config=_settings(), model=TestModel(custom_output_text="  New line.\n")
        )

        assert await adapter.regenerate_block("old", "00:00:01,000", "00:00:02,000") == "New line."

    @pytest.mark.asyncio
    async def test_regenerate_block_empty_reply(self):
        def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            return ModelResponse(parts=[TextPart("   \n")])

        adapter = PydanticAIGenerationAdapter(config=_settings(), model=FunctionModel(respond))

        with pytest.raises(ServiceError):
            await adapter.regenerate_block("old", "00:00:01,000", "00:00:02,000")


class TestAdapterFailures:
    def test_missing_api_key(self):
        adapter = PydanticAIGenerationAdapter(config=_settings(openai_api_key=""))

        with pytest.raises(ConfigurationError):
            adapter.ensure_configured()

    @pytest.mark.asyncio
    async def test_missing_api_key_blocks_requests(self):
        adapter = PydanticAIGenerationAdapter(config=_settings(openai_api_key=""))

        with pytest.raises(ConfigurationError):
            await adapter.correct_chunk("text", 1)

    def test_injected_model_needs_no_key(self):
        adapter = PydanticAIGenerationAdapter(
            config=_settings(openai_api_key=""), model=TestModel()
        )

        adapter.ensure_configured()

    @pytest.mark.asyncio
    async def test_rate_limit_without_retries(self):
        def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            raise ModelHTTPError(status_code=429, model_name="function")

        adapter = PydanticAIGenerationAdapter(
            config=_settings(rate_limit_retries=0), model=FunctionModel(respond)
        )

        with pytest.raises(RateLimitError) as exc_info:
            await adapter.correct_chunk("text", 1)
        assert exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_rate_limit_retried(self):
        attempts = []

        def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            attempts.append(1)
            if len(attempts) == 1:
                raise ModelHTTPError(status_code=429, model_name="function")
            return ModelResponse(parts=[TextPart("Recovered")])

        adapter = PydanticAIGenerationAdapter(
            config=_settings(rate_limit_retries=1), model=FunctionModel(respond)
        )

        assert await adapter.regenerate_block("old", "00:00:01,000", "00:00:02,000") == "Recovered"
        assert len(attempts) == 2

    @pytest.mark.asyncio
    async def test_server_error_not_retried(self):
        attempts = []

        def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            attempts.append(1)
            raise ModelHTTPError(status_code=503, model_name="function")

        adapter = PydanticAIGenerationAdapter(
            config=_settings(rate_limit_retries=2), model=FunctionModel(respond)
        )

        with pytest.raises(ServiceError) as exc_info:
            await adapter.correct_chunk("text", 1)
        assert exc_info.value.status_code == 503
        assert len(attempts) == 1


class TestStyleTransferStream:
    @pytest.mark.asyncio
    async def test_fragments_reassemble_response(self):
        pieces = ["1\n00:00:00,000 --> 00:00:02,000\n", "Rain fell ", "like ash.\n"]
        prompts = []

        async def stream(messages: list[ModelMessage], info: AgentInfo):
            prompts.append(_prompt(messages))
            for piece in pieces:
                yield piece

        adapter = PydanticAIGenerationAdapter(
            config=_settings(style_sample_max_chars=10),
            model=FunctionModel(stream_function=stream),
        )

        fragments = [
            fragment
            async for fragment in adapter.style_transfer(
                "1\n00:00:00,000 --> 00:00:02,000\nIt rained.\n", "0123456789ABCDEF"
            )
        ]

        assert "".join(fragments) == "".join(pieces)
        assert all(fragments)
        assert '"0123456789..."' in prompts[0]
        assert "ABCDEF" not in prompts[0]

    @pytest.mark.asyncio
    async def test_stream_error_mapped(self):
        async def stream(messages: list[ModelMessage], info: AgentInfo):
            raise ModelHTTPError(status_code=429, model_name="function")
            yield ""

        adapter = PydanticAIGenerationAdapter(
            config=_settings(), model=FunctionModel(stream_function=stream)
        )

        with pytest.raises(RateLimitError):
            async for _ in adapter.style_transfer("1\n", "noir"):
                pass
