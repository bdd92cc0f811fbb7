"""Paragraph-aligned chunking of raw input text for independent generation."""

from __future__ import annotations

from functools import lru_cache
import re
import time

import structlog

from srtstudio.subtitles.models import RawChunk

logger = structlog.get_logger(__name__)

# Blank-line paragraph boundary (captured so the exact separator survives)
PARAGRAPH_SEPARATOR = re.compile(r"(\n\s*\n)")
# Whitespace following sentence-ending punctuation
SENTENCE_SEPARATOR = re.compile(r"(?<=[.!?…])(\s+)")


def _split_pieces(text: str, sentence_split: bool) -> list[tuple[str, str]]:
    """Split text into (piece, separator_after) pairs."""
    parts = PARAGRAPH_SEPARATOR.split(text)
    paragraphs = [
        (parts[i], parts[i + 1] if i + 1 < len(parts) else "")
        for i in range(0, len(parts), 2)
    ]
    if not sentence_split:
        return paragraphs

    pieces: list[tuple[str, str]] = []
    for paragraph, separator in paragraphs:
        sentence_parts = SENTENCE_SEPARATOR.split(paragraph)
        for i in range(0, len(sentence_parts), 2):
            is_last = i + 1 >= len(sentence_parts)
            pieces.append(
                (sentence_parts[i], separator if is_last else sentence_parts[i + 1])
            )
    return pieces


@lru_cache(maxsize=32)
def _chunk_cached(text: str, max_chars: int, sentence_split: bool) -> tuple[RawChunk, ...]:
    chunks: list[RawChunk] = []
    current = ""
    pending_separator = ""

    for piece, separator in _split_pieces(text, sentence_split):
        # When the running chunk would overflow, close it and start a new one
        if current and len(current) + len(pending_separator) + len(piece) > max_chars:
            chunks.append(RawChunk(len(chunks), current, pending_separator))
            current = piece
        else:
            current += pending_separator + piece
        pending_separator = separator

    # Don't forget last chunk
    if current:
        chunks.append(RawChunk(len(chunks), current, pending_separator))
    elif chunks and pending_separator:
        last = chunks[-1]
        chunks[-1] = RawChunk(last.index, last.text, last.separator + pending_separator)

    return tuple(chunks)


def chunk_raw_text(
    text: str, max_chars: int = 5000, *, sentence_split: bool = False
) -> list[RawChunk]:
    """
    Split raw text into bounded, paragraph-aligned chunks.

    Algorithm:
    1. Split on blank-line paragraph boundaries, keeping each separator
    2. Greedily append paragraphs (with their separator) to the running chunk
    3. Close the running chunk when the next paragraph would push it past max_chars
    4. Emit the final partial chunk if non-empty

    A single paragraph longer than max_chars is emitted whole as an oversized
    chunk. With sentence_split=True paragraphs are first broken into sentences,
    so only a single over-long sentence can still exceed the limit.

    Results are memoised on (text, max_chars, sentence_split).
    """
    if max_chars < 1:
        raise ValueError(f"max_chars must be >= 1, got {max_chars}")

    start_time = time.time()
    chunks = list(_chunk_cached(text, max_chars, sentence_split))

    oversized = sum(1 for chunk in chunks if len(chunk) > max_chars)
    if oversized:
        logger.warning(
            "Chunks exceed size limit",
            oversized_chunks=oversized,
            max_chars=max_chars,
            sentence_split=sentence_split,
        )

    logger.debug(
        "Raw text chunking completed",
        processing_time_ms=int((time.time() - start_time) * 1000),
        total_chars=len(text),
        total_chunks=len(chunks),
        max_chars=max_chars,
    )
    return chunks


def join_chunks(chunks: list[RawChunk]) -> str:
    """Reassemble chunk texts with their original separators."""
    return "".join(chunk.text + chunk.separator for chunk in chunks)
