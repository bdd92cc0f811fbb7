"""Style transfer agent - restyles a whole SRT document after a sample."""

from pydantic_ai import Agent

STYLE_USER_PROMPT = """TASK: STYLE TRANSFER
Style: "{style_sample}..."

Apply this style to the SRT below. Maintain strict SRT format.

Input SRT:
\"\"\"
{subtitle_text}
\"\"\""""

style_agent = Agent(output_type=str, name="style_transfer")
