"""Data models for retrieval results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from coaching_knowledge.topics import Topic, parse_topics


@dataclass
class RankedSnippet:
    """A transcript chunk with its parent's title and source, as ranked by search."""

    id: str
    transcript_id: str
    chunk_index: int
    content: str
    title: str
    source_path: str | None = None
    topics: list[Topic] = field(default_factory=list)
    rank: float | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> RankedSnippet:
        """Build a snippet from a ``search_transcript_chunks`` result row."""
        return cls(
            id=str(row["id"]),
            transcript_id=str(row["transcript_id"]),
            chunk_index=int(row.get("chunk_index", 0)),
            content=row["content"],
            title=row["title"],
            source_path=row.get("source_path"),
            topics=parse_topics(row.get("topics")),
            rank=row.get("rank"),
        )


@dataclass
class KnowledgeContext:
    """Everything the conversation layer needs from one knowledge lookup."""

    query: str
    topics: list[Topic]
    snippets: list[RankedSnippet]
    context: str
    ritual_candidates: list[str] = field(default_factory=list)
