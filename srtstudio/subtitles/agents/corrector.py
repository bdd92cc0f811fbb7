"""Correction agent - grammar correction plus temporal split of raw text into SRT."""

from pydantic_ai import Agent

from srtstudio.subtitles.agents.system import SUBTITLE_SYSTEM_PROMPT

CORRECTION_USER_PROMPT = """TASK: CORRECTION + TEMPORAL SRT SPLIT

Instructions:
1. Correct the grammar and semantics of the text below.
2. Split it into SRT blocks of 2-3 seconds each.
3. IMPORTANT: start numbering blocks at ID {start_id}.
4. Return ONLY the valid SRT output.

Input text:
\"\"\"
{raw_text}
\"\"\""""

correction_agent = Agent(
    output_type=str,
    system_prompt=SUBTITLE_SYSTEM_PROMPT,
    name="correction",
)
