"""Character-based chunking with overlap and sentence/word boundary preference."""

from __future__ import annotations

from coaching_knowledge.ingestion.models import TranscriptChunk
from coaching_knowledge.ingestion.parsers import collapse_whitespace

_SENTENCE_BREAKS = (". ", "? ", "! ")

# A boundary is only used when it lies past this fraction of the window
_MIN_CUT_RATIO = 0.6


def _cut_offset(window: str, max_chars: int) -> int:
    """Return where to end *window*: after a sentence, at a space, or at its end."""
    threshold = max_chars * _MIN_CUT_RATIO

    last_break = max(window.rfind(marker) for marker in _SENTENCE_BREAKS)
    if last_break > threshold:
        return last_break + 1  # keep the punctuation

    last_space = window.rfind(" ")
    if last_space > threshold:
        return last_space

    return len(window)


def chunk_text(text: str, max_chars: int = 1200, overlap: int = 200) -> list[str]:
    """Split *text* into overlapping chunks of at most *max_chars* characters.

    Whitespace is collapsed first. Every chunk but the last ends at the
    rightmost sentence break (``.``, ``?`` or ``!`` followed by a space) or,
    failing that, the rightmost space, provided it lies beyond 60% of
    *max_chars*; otherwise the window is cut mid-word. The next chunk starts
    *overlap* characters before the previous cut.

    Args:
        text: Normalized transcript text.
        max_chars: Maximum chunk length in characters.
        overlap: Characters shared between consecutive chunks. Should be
            smaller than *max_chars*; larger values degrade to no overlap.

    Returns:
        Non-empty, trimmed chunk strings in document order.
    """
    if max_chars <= 0:
        raise ValueError(f"max_chars must be positive, got {max_chars}")
    if overlap < 0:
        raise ValueError(f"overlap must not be negative, got {overlap}")

    clean = collapse_whitespace(text)
    if not clean:
        return []

    length = len(clean)
    chunks: list[str] = []
    start = 0

    while start < length:
        end = min(start + max_chars, length)
        if end < length:
            end = start + _cut_offset(clean[start:end], max_chars)

        piece = clean[start:end].strip()
        if piece:
            chunks.append(piece)

        if end >= length:
            break

        next_start = max(end - overlap, 0)
        # Prevent an endless loop when overlap >= the width of this cut
        start = next_start if next_start > start else end

    return chunks


def build_chunks(contents: list[str], transcript_id: str | None = None) -> list[TranscriptChunk]:
    """Wrap chunk strings as :class:`TranscriptChunk` with contiguous indices."""
    return [
        TranscriptChunk(content=content, chunk_index=idx, transcript_id=transcript_id)
        for idx, content in enumerate(contents)
    ]
