"""Transcript endpoints: upload, list, detail and delete."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

from fastapi import APIRouter, File, HTTPException, Response, UploadFile

from coaching_knowledge.api.models import (
    ChunkResponse,
    TranscriptDetail,
    TranscriptSummary,
    UploadResponse,
)
from coaching_knowledge.config import settings
from coaching_knowledge.ingestion.pipeline import SUPPORTED_EXTENSIONS, ingest_document
from coaching_knowledge.ingestion.storage import (
    delete_transcript,
    get_supabase_client,
    get_transcript,
    get_transcript_chunks,
    list_transcripts,
    topics_from_row,
)
from coaching_knowledge.pipeline_config import IngestionConfig

router = APIRouter()

# 10 MB upload limit
MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def _summary_fields(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": str(row["id"]),
        "title": row["title"],
        "source_path": row.get("source_path"),
        "topics": topics_from_row(row),
        "metadata": row.get("metadata") or {},
        "created_at": row.get("created_at"),
    }


@router.post("/api/transcripts", response_model=UploadResponse, status_code=201)
def upload_transcript(file: Annotated[UploadFile, File(...)]) -> UploadResponse:
    """Upload one transcript file (.txt, .md, .srt, .vtt) and ingest it.

    Title and topics are derived from the file name, like the directory import.
    """
    raw = file.file.read()
    if len(raw) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {MAX_UPLOAD_BYTES // (1024 * 1024)} MB.",
        )

    file_name = Path(file.filename or "").name
    if Path(file_name).suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type. Supported: {sorted(SUPPORTED_EXTENSIONS)}",
        )

    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=400, detail="File is not valid UTF-8 text.") from exc

    ingested = ingest_document(
        get_supabase_client(),
        content,
        file_name,
        IngestionConfig.from_settings(settings),
    )
    if ingested is None:
        raise HTTPException(status_code=400, detail="Transcript contains no text.")

    return UploadResponse(
        transcript_id=ingested.transcript_id,
        title=ingested.title,
        topics=ingested.topics,
        num_chunks=ingested.num_chunks,
    )


@router.get("/api/transcripts", response_model=list[TranscriptSummary])
def list_all_transcripts() -> list[TranscriptSummary]:
    """List all transcripts ordered by creation date (newest first)."""
    client = get_supabase_client()
    return [TranscriptSummary(**_summary_fields(row)) for row in list_transcripts(client)]


@router.get("/api/transcripts/{transcript_id}", response_model=TranscriptDetail)
def get_transcript_detail(transcript_id: str) -> TranscriptDetail:
    """Get a transcript with its chunks in order."""
    client = get_supabase_client()
    row = get_transcript(client, transcript_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Transcript not found")

    chunks = get_transcript_chunks(client, transcript_id)
    return TranscriptDetail(
        **_summary_fields(row),
        chunks=[
            ChunkResponse(
                id=str(c["id"]) if c.get("id") else None,
                chunk_index=c["chunk_index"],
                content=c["content"],
            )
            for c in chunks
        ],
    )


@router.delete("/api/transcripts/{transcript_id}", status_code=204)
def remove_transcript(transcript_id: str) -> Response:
    """Delete a transcript together with its chunks."""
    client = get_supabase_client()
    if not delete_transcript(client, transcript_id):
        raise HTTPException(status_code=404, detail="Transcript not found")
    return Response(status_code=204)
