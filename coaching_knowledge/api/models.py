"""Pydantic request/response schemas for the Coaching Knowledge API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from coaching_knowledge.topics import Topic


class SearchRequest(BaseModel):
    """Request body for the /api/knowledge/search endpoint.

    ``limit`` defaults to ``KNOWLEDGE_SEARCH_LIMIT``. Leave ``topics`` out to
    infer them from the query; pass ``[]`` to search without a topic filter.
    """

    query: str
    limit: int | None = Field(default=None, ge=1, le=50)
    topics: list[Topic] | None = None


class SnippetResponse(BaseModel):
    """A single ranked transcript chunk with its transcript's metadata."""

    id: str
    transcript_id: str
    chunk_index: int
    content: str
    title: str
    source_path: str | None = None
    topics: list[Topic] = []
    rank: float | None = None


class SearchResponse(BaseModel):
    """Response body for the /api/knowledge/search endpoint."""

    query: str
    topics: list[Topic]
    snippets: list[SnippetResponse]
    context: str
    ritual_candidates: list[str] = []


class ChunkResponse(BaseModel):
    id: str | None = None
    chunk_index: int
    content: str


class TranscriptSummary(BaseModel):
    """Summary representation of a transcript for list views."""

    id: str
    title: str
    source_path: str | None = None
    topics: list[Topic] = []
    metadata: dict[str, Any] = {}
    created_at: str | None = None


class TranscriptDetail(TranscriptSummary):
    """Transcript with its ordered chunks."""

    chunks: list[ChunkResponse] = []


class UploadResponse(BaseModel):
    """Response body for POST /api/transcripts."""

    transcript_id: str
    title: str
    topics: list[Topic]
    num_chunks: int
