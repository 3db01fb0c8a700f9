"""Lexical search over transcript chunks with a topic filter fallback."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, cast

import httpx
from postgrest.exceptions import APIError
from supabase import SupabaseException

from coaching_knowledge.errors import ConfigurationError, SearchUnavailableError
from coaching_knowledge.ingestion.storage import get_supabase_client
from coaching_knowledge.retrieval.models import RankedSnippet
from coaching_knowledge.topics import Topic, parse_topics

if TYPE_CHECKING:
    from supabase import Client

logger = logging.getLogger(__name__)


def _search_client() -> Client:
    try:
        return get_supabase_client()
    except (ConfigurationError, SupabaseException) as exc:
        logger.error("Cannot connect to the transcript store: %s", exc)
        raise SearchUnavailableError(f"Transcript search unavailable: {exc}") from exc


def _run_search(
    client: Client,
    query: str,
    limit: int,
    topics: list[Topic],
) -> list[RankedSnippet]:
    """Call the ``search_transcript_chunks`` function once."""
    try:
        result = client.rpc(
            "search_transcript_chunks",
            {
                "query_text": query,
                "match_count": limit,
                "filter_topics": [t.value for t in topics] or None,
            },
        ).execute()
    except (APIError, httpx.HTTPError) as exc:
        logger.exception("Transcript search failed for topics %s", [t.value for t in topics])
        raise SearchUnavailableError(f"Transcript search unavailable: {exc}") from exc

    # Supabase .data is typed as JSON (broad union); cast to concrete type.
    rows = cast(list[dict[str, Any]], result.data or [])
    return [RankedSnippet.from_row(row) for row in rows]


def search_transcript_chunks(
    query: str,
    limit: int = 6,
    topics: Iterable[Topic | str] | None = None,
    client: Client | None = None,
) -> list[RankedSnippet]:
    """Rank transcript chunks against *query* (German full-text ranking).

    Args:
        query: Free-text query.
        limit: Maximum number of snippets.
        topics: Only chunks of transcripts tagged with ANY of these topics
            qualify. Unknown values are ignored.
        client: Supabase client; created from settings when omitted.

    Returns:
        Snippets by descending relevance. When a topic filter yields nothing,
        the same query is re-ranked over the whole corpus instead.

    Raises:
        SearchUnavailableError: The store is unreachable, misconfigured or
            the search itself failed.
        ValueError: *limit* is smaller than 1.
    """
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")
    if not query.strip():
        return []

    topic_filter = parse_topics(topics)
    client = client or _search_client()

    results = _run_search(client, query, limit, topic_filter)

    if topic_filter and not results:
        logger.info(
            "No snippets for topics %s, searching all transcripts",
            [t.value for t in topic_filter],
        )
        return _run_search(client, query, limit, [])

    return results
