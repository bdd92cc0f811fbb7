"""Utilities for configuring OpenAI model settings with optional reasoning support."""

from __future__ import annotations

from typing import Any

from pydantic_ai.models.openai import OpenAIResponsesModelSettings

_REASONING_PREFIXES = ("o1", "o2", "o3", "o4", "o-", "gpt-5")


def supports_reasoning(model_name: str | None) -> bool:
    """Reasoning models reject sampling temperature and take an effort level instead."""
    return bool(model_name) and model_name.strip().lower().startswith(_REASONING_PREFIXES)


def build_openai_model_settings(
    model_name: str | None,
    *,
    temperature: float | None = None,
    reasoning_effort: str | None = None,
    **overrides: Any,
) -> OpenAIResponsesModelSettings:
    """Create OpenAIResponsesModelSettings gating temperature/reasoning kwargs by model capability."""
    kwargs: dict[str, Any] = dict(overrides)
    if supports_reasoning(model_name):
        if reasoning_effort:
            kwargs["openai_reasoning_effort"] = reasoning_effort
    elif temperature is not None:
        kwargs["temperature"] = temperature
    return OpenAIResponsesModelSettings(**kwargs)
