"""Tests for transcript search, the topic fallback, and context assembly."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import httpx
import pytest
from postgrest.exceptions import APIError

from coaching_knowledge.errors import SearchUnavailableError
from coaching_knowledge.retrieval.context import (
    NO_RITUAL_CANDIDATES,
    NO_SNIPPETS_FOUND,
    build_knowledge_context,
    extract_ritual_candidates,
    format_ritual_prompt,
    gather_knowledge,
)
from coaching_knowledge.retrieval.models import RankedSnippet
from coaching_knowledge.retrieval.search import search_transcript_chunks
from coaching_knowledge.topics import Topic


def _row(
    idx: int, content: str, title: str = "call", topics: list[str] | None = None
) -> dict[str, Any]:
    return {
        "id": f"chunk-{idx}",
        "transcript_id": f"transcript-{idx}",
        "chunk_index": 0,
        "content": content,
        "title": title,
        "source_path": f"/calls/{title}.txt",
        "topics": topics or [],
        "rank": 1.0 / (idx + 1),
    }


def _corpus_client(rows: list[dict[str, Any]]) -> MagicMock:
    """A client whose search honours filter_topics against *rows*."""
    client = MagicMock()

    def rpc(name: str, params: dict[str, Any]) -> MagicMock:
        wanted = set(params["filter_topics"] or [])
        matched = [r for r in rows if not wanted or wanted & set(r["topics"])]
        call = MagicMock()
        call.execute.return_value.data = matched[: params["match_count"]]
        return call

    client.rpc.side_effect = rpc
    return client


def _snippet(idx: int, content: str, title: str = "call") -> RankedSnippet:
    return RankedSnippet.from_row(_row(idx, content, title))


CORPUS = [
    _row(0, "Wir haben ueber das Budget gestritten.", "finanz check", ["FINANZEN"]),
    _row(1, "Nach dem Streit hilft eine Pause.", "streit repair", ["KONFLIKT"]),
    _row(2, "Ein Abend ohne Handy.", "alltag"),
]


class TestSearch:
    def test_blank_query_skips_store(self) -> None:
        client = MagicMock()
        assert search_transcript_chunks("   ", client=client) == []
        client.rpc.assert_not_called()

    def test_blank_query_needs_no_client(self) -> None:
        with patch("coaching_knowledge.retrieval.search.get_supabase_client") as factory:
            assert search_transcript_chunks("") == []
        factory.assert_not_called()

    def test_passes_query_limit_and_topics(self) -> None:
        client = _corpus_client(CORPUS)
        results = search_transcript_chunks("Budget", limit=3, topics=[Topic.FINANZEN], client=client)

        client.rpc.assert_called_once_with(
            "search_transcript_chunks",
            {"query_text": "Budget", "match_count": 3, "filter_topics": ["FINANZEN"]},
        )
        assert [r.id for r in results] == ["chunk-0"]
        assert results[0].title == "finanz check"
        assert results[0].source_path == "/calls/finanz check.txt"
        assert results[0].topics == [Topic.FINANZEN]

    def test_no_filter_sends_null(self) -> None:
        client = _corpus_client(CORPUS)
        results = search_transcript_chunks("Abend", limit=6, client=client)
        assert client.rpc.call_args.args[1]["filter_topics"] is None
        assert len(results) == 3

    def test_or_semantics_across_topics(self) -> None:
        client = _corpus_client(CORPUS)
        results = search_transcript_chunks(
            "Streit", topics=[Topic.KONFLIKT, Topic.FINANZEN], client=client
        )
        assert {r.id for r in results} == {"chunk-0", "chunk-1"}

    def test_unknown_topics_ignored(self) -> None:
        client = _corpus_client(CORPUS)
        search_transcript_chunks("Abend", topics=["WETTER"], client=client)
        client.rpc.assert_called_once()
        assert client.rpc.call_args.args[1]["filter_topics"] is None

    def test_fallback_matches_unfiltered_search(self) -> None:
        client = _corpus_client(CORPUS)
        unfiltered = search_transcript_chunks("Pause", limit=2, topics=[], client=client)

        client = _corpus_client(CORPUS)
        fallback = search_transcript_chunks("Pause", limit=2, topics=[Topic.INTIMITAET], client=client)

        assert fallback == unfiltered
        assert fallback
        filters = [c.args[1]["filter_topics"] for c in client.rpc.call_args_list]
        assert filters == [["INTIMITAET"], None]

    def test_no_fallback_when_filtered_hits(self) -> None:
        client = _corpus_client(CORPUS)
        search_transcript_chunks("Streit", topics=[Topic.KONFLIKT], client=client)
        assert client.rpc.call_count == 1

    def test_empty_everywhere_is_not_an_error(self) -> None:
        client = _corpus_client([])
        assert search_transcript_chunks("Pause", topics=[Topic.KONFLIKT], client=client) == []
        assert client.rpc.call_count == 2

    def test_store_error_raises_search_unavailable(self) -> None:
        client = MagicMock()
        client.rpc.return_value.execute.side_effect = APIError(
            {"message": "function does not exist", "code": "42883", "hint": None, "details": None}
        )
        with pytest.raises(SearchUnavailableError):
            search_transcript_chunks("Budget", client=client)

    def test_timeout_raises_search_unavailable(self) -> None:
        client = MagicMock()
        client.rpc.return_value.execute.side_effect = httpx.ReadTimeout("timed out")
        with pytest.raises(SearchUnavailableError):
            search_transcript_chunks("Budget", topics=[Topic.FINANZEN], client=client)

    def test_missing_credentials_raise_search_unavailable(self) -> None:
        with patch("coaching_knowledge.ingestion.storage.settings") as mock_settings:
            mock_settings.supabase_url = ""
            mock_settings.supabase_key = ""
            with pytest.raises(SearchUnavailableError):
                search_transcript_chunks("Streit")

    def test_malformed_url_raises_search_unavailable(self) -> None:
        with patch("coaching_knowledge.ingestion.storage.settings") as mock_settings:
            mock_settings.supabase_url = "not a url"
            mock_settings.supabase_key = "key"
            with pytest.raises(SearchUnavailableError):
                search_transcript_chunks("Streit")

    @pytest.mark.parametrize("limit", [0, -3])
    def test_limit_below_one_rejected(self, limit: int) -> None:
        client = _corpus_client(CORPUS)
        with pytest.raises(ValueError, match="limit"):
            search_transcript_chunks("Streit", limit=limit, topics=[Topic.KONFLIKT], client=client)
        client.rpc.assert_not_called()

    def test_failure_during_fallback_is_not_masked(self) -> None:
        client = MagicMock()
        empty = MagicMock()
        empty.execute.return_value.data = []
        broken = MagicMock()
        broken.execute.side_effect = httpx.ConnectError("down")
        client.rpc.side_effect = [empty, broken]

        with pytest.raises(SearchUnavailableError):
            search_transcript_chunks("Budget", topics=[Topic.FINANZEN], client=client)


class TestBuildContext:
    def test_empty(self) -> None:
        assert build_knowledge_context([]) == NO_SNIPPETS_FOUND

    def test_numbered_sources_in_order(self) -> None:
        snippets = [_snippet(0, "Erster Inhalt.", "finanz check"), _snippet(1, "Zweiter.", "repair")]
        assert build_knowledge_context(snippets) == (
            "Source 1 (finanz check): Erster Inhalt.\n\nSource 2 (repair): Zweiter."
        )


class TestRitualCandidates:
    def test_dedup_in_first_seen_order(self) -> None:
        phrasings = [
            "Jeden Abend drei Dinge teilen, die gut waren",
            "Sonntags zehn Minuten Kaffee ohne Handy",
            "Vor dem Streitgespraech dreimal tief atmen",
            "Einmal pro Woche das Budget gemeinsam anschauen",
        ]
        snippets = [
            _snippet(i, f"Tipp aus dem Call. Mikro-Ritual: {phrasings[i % 4]}.") for i in range(8)
        ]
        text = build_knowledge_context(snippets)
        assert extract_ritual_candidates(text) == phrasings

    def test_markers_in_one_paragraph(self) -> None:
        text = "Mikro-Ritual: Morgens kurz umarmen. Mikro-Ritual: Abends gemeinsam kochen."
        assert extract_ritual_candidates(text) == ["Morgens kurz umarmen", "Abends gemeinsam kochen"]

    def test_cap_at_six(self) -> None:
        text = "\n".join(f"Mikro-Ritual: Variante Nummer {i} ausprobieren." for i in range(8))
        result = extract_ritual_candidates(text)
        assert len(result) == 6
        assert result[0] == "Variante Nummer 0 ausprobieren"

    def test_up_to_three_sentences(self) -> None:
        text = "Mikro-Ritual: Setzt euch hin. Atmet dreimal. Sagt einen Dank. Dann esst ihr."
        assert extract_ritual_candidates(text) == [
            "Setzt euch hin. Atmet dreimal. Sagt einen Dank"
        ]

    def test_short_matches_dropped(self) -> None:
        assert extract_ritual_candidates("Mikro-Ritual: Kuss.") == []

    def test_case_insensitive_marker(self) -> None:
        assert extract_ritual_candidates("mikro-ritual: gemeinsam spazieren gehen!") == [
            "gemeinsam spazieren gehen"
        ]

    def test_no_marker(self) -> None:
        assert extract_ritual_candidates(NO_SNIPPETS_FOUND) == []

    def test_format_prompt(self) -> None:
        assert format_ritual_prompt([]) == NO_RITUAL_CANDIDATES
        prompt = format_ritual_prompt(["Morgens kurz umarmen", "Abends kochen"])
        assert prompt.endswith("\n- Morgens kurz umarmen\n- Abends kochen")


class TestGatherKnowledge:
    def test_infers_topics_and_assembles(self) -> None:
        rows = [_row(0, "Mikro-Ritual: Monatlich das Konto gemeinsam pruefen.", "geld", ["FINANZEN"])]
        client = _corpus_client(rows)

        knowledge = gather_knowledge("Wie reden wir ueber Schulden?", client=client)

        assert knowledge.topics == [Topic.FINANZEN]
        assert [s.id for s in knowledge.snippets] == ["chunk-0"]
        assert knowledge.context.startswith("Source 1 (geld): ")
        assert knowledge.ritual_candidates == ["Monatlich das Konto gemeinsam pruefen"]

    def test_explicit_topics_override_inference(self) -> None:
        client = _corpus_client(CORPUS)
        knowledge = gather_knowledge("Schulden", topics=[], client=client)
        assert knowledge.topics == []
        assert client.rpc.call_args.args[1]["filter_topics"] is None

    def test_swappable_strategies(self) -> None:
        client = _corpus_client(CORPUS)
        knowledge = gather_knowledge(
            "Pause",
            client=client,
            classify=lambda text: [Topic.KONFLIKT],
            extract_rituals=lambda text: ["fest"],
        )
        assert knowledge.topics == [Topic.KONFLIKT]
        assert knowledge.ritual_candidates == ["fest"]

    def test_no_results(self) -> None:
        knowledge = gather_knowledge("Pause", client=_corpus_client([]))
        assert knowledge.snippets == []
        assert knowledge.context == NO_SNIPPETS_FOUND
        assert knowledge.ritual_candidates == []
