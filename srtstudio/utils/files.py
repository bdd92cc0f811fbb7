"""File handling utilities."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
import re

import structlog

from srtstudio.config import settings
from srtstudio.subtitles.models import SubtitleBlock
from srtstudio.subtitles.services.srt_processor import blocks_to_srt

logger = structlog.get_logger(__name__)

ALLOWED_EXTENSIONS = (".srt",)

# Output file name per workflow
WORKFLOW_OUTPUT_NAMES = {
    "correction": "corrected",
    "enhancement": "optimized",
    "style": "styled",
}


def validate_file_metadata(
    filename: str, size_bytes: int, max_size_mb: int | None = None
) -> tuple[bool, str]:
    """Validate filename and size against allowed constraints."""
    max_size_mb = max_size_mb or settings.max_file_size_mb

    if not filename:
        return False, "No file selected."

    extension = f".{filename.split('.')[-1].lower()}" if "." in filename else ""
    if extension not in ALLOWED_EXTENSIONS:
        return False, "Invalid file type. Only .srt files are supported."

    if size_bytes > max_size_mb * 1024 * 1024:
        return False, f"File too large. Maximum size is {max_size_mb}MB."

    return True, ""


def sanitize_filename(filename: str) -> str:
    """Remove invalid characters from filenames."""
    sanitized = re.sub(r'[<>:"/\\|?*]', "", filename)
    sanitized = sanitized.replace(" ", "_")
    if len(sanitized) > 64:
        name, ext = sanitized.rsplit(".", 1) if "." in sanitized else (sanitized, "")
        name = name[:60]
        sanitized = f"{name}.{ext}" if ext else name
    return sanitized


def output_filename(workflow: str) -> str:
    """Fixed export name for a workflow, e.g. corrected.srt."""
    try:
        return f"{WORKFLOW_OUTPUT_NAMES[workflow]}.srt"
    except KeyError:
        raise ValueError(f"Unknown workflow: {workflow}") from None


def generate_download_filename(original: str, workflow: str) -> str:
    """Download name with the workflow suffix and a timestamp."""
    suffix = output_filename(workflow).removesuffix(".srt")
    base = original.rsplit(".", 1)[0] if "." in original else original
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return sanitize_filename(f"{base}_{suffix}_{timestamp}.srt")


def read_subtitle_file(path: str | Path) -> str:
    """Read an uploaded subtitle file after validating its name and size."""
    path = Path(path)
    is_valid, message = validate_file_metadata(path.name, path.stat().st_size)
    if not is_valid:
        raise ValueError(message)
    # utf-8-sig drops a leading BOM
    return path.read_text(encoding="utf-8-sig")


def write_subtitle_file(
    content: str | list[SubtitleBlock], directory: str | Path, workflow: str
) -> Path:
    """Write a workflow's output as <directory>/<corrected|optimized|styled>.srt."""
    text = content if isinstance(content, str) else blocks_to_srt(content)
    target = Path(directory) / output_filename(workflow)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")
    logger.info("Subtitle file written", path=str(target), workflow=workflow)
    return target
