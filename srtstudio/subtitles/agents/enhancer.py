"""Enhancement agent - narrative rewrite of a batch of SRT blocks."""

from pydantic_ai import Agent

from srtstudio.subtitles.agents.system import SUBTITLE_SYSTEM_PROMPT

ENHANCEMENT_USER_PROMPT = """TASK: BATCH NARRATIVE OPTIMIZATION (SRT)

Objective: rewrite the subtitle text to be more engaging and fluid according to the parameters, BUT KEEP THE EXACT TIMESTAMPS AND IDs.

Parameters:
- Redundancy: {redundancy}
- Emotional intensity: {emotion}
- Humor: {humor}
- Pacing: {pacing}
- Character substitution: {character_substitution}

Strict rules:
1. You must return exactly {block_count} blocks.
2. Use the exact same IDs: {first_id} to {last_id}.
3. Use the exact same timestamps.
4. Only change the text content.

Input SRT chunk:
\"\"\"
{srt_input}
\"\"\"

Output: valid SRT for these blocks."""

enhancement_agent = Agent(
    output_type=str,
    system_prompt=SUBTITLE_SYSTEM_PROMPT,
    name="enhancement",
)
