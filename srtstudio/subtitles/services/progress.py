"""Progress publication shared by the batch orchestrators."""

import inspect

from srtstudio.subtitles.models import RunProgress, SubtitleBlock
from srtstudio.types import ProgressCallback


async def publish_progress(
    progress_callback: ProgressCallback | None,
    progress: RunProgress,
    blocks: list[SubtitleBlock],
) -> None:
    """Call progress callback if provided, handling both sync and async."""
    if not progress_callback:
        return
    result = progress_callback(RunProgress(progress.current, progress.total), list(blocks))
    if inspect.isawaitable(result):
        await result
