"""Regeneration agent - rewrites the text of one flagged block."""

from pydantic_ai import Agent

REGENERATION_USER_PROMPT = """TASK: REGENERATE SPECIFIC SRT BLOCK

Timestamp: {start_time} --> {end_time}
Original flawed text: "{text}"

Instruction: rewrite the text to be semantically correct and natural. Return ONLY the text lines."""

regeneration_agent = Agent(output_type=str, name="regeneration")
