"""Pydantic AI agent definitions for the four generation request variants.

Agents are stateless and global; the model is supplied per run by the
generation adapter so importing this package never needs credentials.
"""

from srtstudio.subtitles.agents.corrector import correction_agent
from srtstudio.subtitles.agents.enhancer import enhancement_agent
from srtstudio.subtitles.agents.regenerator import regeneration_agent
from srtstudio.subtitles.agents.stylist import style_agent

__all__ = [
    "correction_agent",
    "enhancement_agent",
    "regeneration_agent",
    "style_agent",
]
