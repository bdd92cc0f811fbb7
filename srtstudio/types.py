"""Shared type definitions."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from srtstudio.subtitles.models import RunProgress, SubtitleBlock

# Observer fired after every processed unit with a snapshot of the document
ProgressCallback = (
    Callable[["RunProgress", "list[SubtitleBlock]"], None]
    | Callable[["RunProgress", "list[SubtitleBlock]"], Awaitable[None]]
)
