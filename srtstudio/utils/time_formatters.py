"""Time formatting utilities."""

import re

SRT_TIMESTAMP_PATTERN = r"\d{2}:\d{2}:\d{2},\d{3}"
_SRT_TIMESTAMP_RE = re.compile(r"^(\d{2}):(\d{2}):(\d{2}),(\d{3})$")


def parse_timestamp_srt(timestamp: str) -> int:
    """Parse an SRT timestamp (HH:MM:SS,mmm) into milliseconds.

    Raises:
        ValueError: If the string is not a valid SRT timestamp
    """
    match = _SRT_TIMESTAMP_RE.match(timestamp.strip())
    if not match:
        raise ValueError(f"Invalid SRT timestamp: {timestamp!r}")
    hours, minutes, seconds, millis = (int(part) for part in match.groups())
    return ((hours * 60 + minutes) * 60 + seconds) * 1000 + millis


def format_timestamp_srt(milliseconds: int) -> str:
    """Format milliseconds as an SRT timestamp.

    Args:
        milliseconds: Time in milliseconds from start

    Returns:
        Formatted string like "00:01:23,456"
    """
    milliseconds = max(0, milliseconds)
    hours, milliseconds = divmod(milliseconds, 3_600_000)
    minutes, milliseconds = divmod(milliseconds, 60_000)
    seconds, milliseconds = divmod(milliseconds, 1000)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d},{milliseconds:03d}"


def format_clock(seconds: int) -> str:
    """Format whole seconds as HH:MM:SS."""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
