"""Normalizers for plain-text and subtitle (SRT / WebVTT) transcripts."""

from __future__ import annotations

import re
from collections.abc import Callable
from pathlib import Path

from coaching_knowledge.ingestion.models import SourceFormat

SUBTITLE_EXTENSIONS = frozenset({".srt", ".vtt"})

_WHITESPACE_RE = re.compile(r"\s+")
_CUE_NUMBER_RE = re.compile(r"^\d+$")
_VTT_HEADER_RE = re.compile(r"^WEBVTT(?:\s|$)")


def collapse_whitespace(text: str) -> str:
    """Collapse every whitespace run to a single space and trim the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def _is_cue_line(line: str) -> bool:
    return bool(_CUE_NUMBER_RE.match(line)) or "-->" in line


def normalize_subtitles(content: str) -> str:
    """Strip cue numbers, timing lines and the WEBVTT header; keep dialogue.

    Works for both SRT and WebVTT since both use ``-->`` in timing lines::

        WEBVTT

        1
        00:00:01.000 --> 00:00:02.000
        Hallo zusammen.

    becomes ``"Hallo zusammen."``.
    """
    lines = [line for line in (raw.strip() for raw in content.splitlines()) if line]
    # Only the first non-blank line can be the WebVTT header
    if lines and _VTT_HEADER_RE.match(lines[0]):
        lines = lines[1:]
    return " ".join(line for line in lines if not _is_cue_line(line))


def normalize_plain_text(content: str) -> str:
    """Join all lines with single spaces."""
    return " ".join(content.splitlines())


def source_format_for(path: str | Path) -> SourceFormat:
    """Pick the format from the file extension (``.srt``/``.vtt`` are subtitles)."""
    if Path(path).suffix.lower() in SUBTITLE_EXTENSIONS:
        return SourceFormat.SUBTITLE
    return SourceFormat.PLAIN


def normalize_transcript(content: str, source_format: str | SourceFormat) -> str:
    """Dispatch to the correct normalizer based on *source_format*.

    The result is not whitespace-collapsed; pass it through
    :func:`collapse_whitespace` (the chunker does this itself).

    Raises:
        ValueError: If *source_format* is not recognized.
    """
    dispatch: dict[SourceFormat, Callable[[str], str]] = {
        SourceFormat.PLAIN: normalize_plain_text,
        SourceFormat.SUBTITLE: normalize_subtitles,
    }

    try:
        fmt = SourceFormat(source_format)
    except ValueError:
        supported = [f.value for f in SourceFormat]
        msg = f"Unknown transcript format: {source_format!r}. Supported: {supported}"
        raise ValueError(msg) from None

    return dispatch[fmt](content)
