"""Supabase storage helpers for transcripts and chunks."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from supabase import Client, create_client

from coaching_knowledge.config import settings
from coaching_knowledge.errors import ConfigurationError
from coaching_knowledge.topics import Topic, parse_topics

if TYPE_CHECKING:
    from coaching_knowledge.ingestion.models import Transcript, TranscriptChunk


def get_supabase_client() -> Client:
    """Create and return a Supabase client from the application settings."""
    if not settings.supabase_url or not settings.supabase_key:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY must be set")
    return create_client(settings.supabase_url, settings.supabase_key)


def store_transcript(
    client: Client,
    transcript: Transcript,
    chunks: list[TranscriptChunk],
) -> str:
    """Store a transcript with its topics and chunks; return the generated ID.

    Everything is written by the ``ingest_transcript`` SQL function in a
    single transaction, so a transcript is never visible without its chunks.
    Chunk indices are taken from *chunks* as given.
    """
    result = client.rpc(
        "ingest_transcript",
        {
            "p_title": transcript.title,
            "p_source_path": transcript.source_path,
            "p_metadata": transcript.metadata,
            "p_topics": [t.value for t in transcript.topics],
            "p_chunks": [
                {"chunk_index": c.chunk_index, "content": c.content} for c in chunks
            ],
        },
    ).execute()
    return str(result.data)


def reset_transcripts(client: Client) -> None:
    """Delete all chunks, topic links and transcripts (in that order)."""
    client.rpc("reset_transcripts", {}).execute()


def list_transcripts(client: Client) -> list[dict[str, Any]]:
    """All transcripts, newest first, with their topic links embedded."""
    result = (
        client.table("transcripts")
        .select("*, transcript_topics(topic)")
        .order("created_at", desc=True)
        .execute()
    )
    return cast(list[dict[str, Any]], result.data)


def get_transcript(client: Client, transcript_id: str) -> dict[str, Any] | None:
    result = (
        client.table("transcripts")
        .select("*, transcript_topics(topic)")
        .eq("id", transcript_id)
        .execute()
    )
    rows = cast(list[dict[str, Any]], result.data)
    return rows[0] if rows else None


def get_transcript_chunks(client: Client, transcript_id: str) -> list[dict[str, Any]]:
    result = (
        client.table("transcript_chunks")
        .select("id,transcript_id,chunk_index,content")
        .eq("transcript_id", transcript_id)
        .order("chunk_index")
        .execute()
    )
    return cast(list[dict[str, Any]], result.data)


def delete_transcript(client: Client, transcript_id: str) -> bool:
    """Delete a transcript; chunks and topic links cascade. Return False if absent."""
    result = client.table("transcripts").delete().eq("id", transcript_id).execute()
    return bool(result.data)


def topics_from_row(row: dict[str, Any]) -> list[Topic]:
    """Flatten the embedded ``transcript_topics`` relation of a transcript row."""
    links = row.get("transcript_topics") or []
    return parse_topics(link.get("topic", "") for link in links)
