"""Subtitle processing services.

Orchestrators live in their own modules (correction_service, enhancement_service,
regeneration_service, style_service) and are imported from there.
"""

from srtstudio.subtitles.services.generation import (
    GenerationAdapter,
    PydanticAIGenerationAdapter,
)
from srtstudio.subtitles.services.srt_processor import SRTProcessor

__all__ = [
    "GenerationAdapter",
    "PydanticAIGenerationAdapter",
    "SRTProcessor",
]
