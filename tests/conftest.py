"""Shared test configuration and fixtures for all tests."""

from collections.abc import Callable
import os
from unittest.mock import MagicMock

import pytest

# Mock environment variables for testing
os.environ["OPENAI_API_KEY"] = "test-key-123"
# Block real model requests during testing
os.environ["ALLOW_MODEL_REQUESTS"] = "False"

from srtstudio.subtitles.models import SubtitleBlock  # noqa: E402
from srtstudio.subtitles.services.generation import PydanticAIGenerationAdapter  # noqa: E402
from srtstudio.utils.time_formatters import format_timestamp_srt  # noqa: E402


def _build_srt(ids, text: Callable[[int], str] | str = "Line {id}") -> str:
    """SRT text for the given IDs, two seconds per block."""
    records = []
    for block_id in ids:
        body = text(block_id) if callable(text) else text.format(id=block_id)
        start = format_timestamp_srt((block_id - 1) * 2000)
        end = format_timestamp_srt(block_id * 2000)
        records.append(f"{block_id}\n{start} --> {end}\n{body}\n")
    return "\n".join(records)


@pytest.fixture
def make_srt() -> Callable[..., str]:
    """Factory for SRT documents: make_srt(range(1, 4), "Text {id}")."""
    return _build_srt


@pytest.fixture
def make_blocks() -> Callable[..., list[SubtitleBlock]]:
    """Factory for block lists with IDs 1..n."""

    def factory(count: int, text: str = "Original line {id}") -> list[SubtitleBlock]:
        return [
            SubtitleBlock(
                id=i,
                start_time=format_timestamp_srt((i - 1) * 2000),
                end_time=format_timestamp_srt(i * 2000),
                text=text.format(id=i),
                original_text=text.format(id=i),
            )
            for i in range(1, count + 1)
        ]

    return factory


@pytest.fixture
def sample_srt_content() -> str:
    """Sample SRT content for testing."""
    return """1
00:00:01,000 --> 00:00:04,000
Hello everyone, welcome back.

2
00:00:04,500 --> 00:00:08,000
Today we talk about
the history of the river.

3
00:00:08,000 --> 00:00:12,250
It starts in the mountains.
"""


@pytest.fixture
def adapter() -> MagicMock:
    """Generation adapter double; async methods are AsyncMocks."""
    mock = MagicMock(spec=PydanticAIGenerationAdapter)
    mock.ensure_configured.return_value = None
    return mock
