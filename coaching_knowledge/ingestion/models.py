"""Data models for the ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from coaching_knowledge.topics import Topic


class SourceFormat(StrEnum):
    """How raw transcript text is laid out."""

    PLAIN = "plain"
    SUBTITLE = "subtitle"  # SRT and WebVTT


@dataclass
class TranscriptChunk:
    """One retrievable slice of a transcript's normalized text."""

    content: str
    chunk_index: int = 0
    transcript_id: str | None = None
    id: str | None = None


@dataclass
class Transcript:
    """One ingested source document."""

    title: str
    source_path: str | None = None
    topics: list[Topic] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    id: str | None = None

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise ValueError("Transcript title must not be empty")
        self.topics = [Topic(t) for t in self.topics]


@dataclass
class IngestedFile:
    """Outcome of importing a single file."""

    path: str
    transcript_id: str
    title: str
    num_chunks: int
    topics: list[Topic] = field(default_factory=list)


@dataclass
class IngestionReport:
    """Summary of an import run, for logging and the CLI."""

    files_found: int = 0
    ingested: list[IngestedFile] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def files_processed(self) -> int:
        return len(self.ingested)

    @property
    def chunks_created(self) -> int:
        return sum(f.num_chunks for f in self.ingested)
