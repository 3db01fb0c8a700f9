"""Prompt-ready knowledge context and mini-ritual candidates from transcript snippets."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from coaching_knowledge.retrieval.models import KnowledgeContext, RankedSnippet
from coaching_knowledge.retrieval.search import search_transcript_chunks
from coaching_knowledge.topics import Topic, TopicClassifier, infer_topics_from_query, parse_topics

if TYPE_CHECKING:
    from supabase import Client

NO_SNIPPETS_FOUND = "No matching snippets found."
NO_RITUAL_CANDIDATES = "No mini-ritual candidates found."

MAX_RITUAL_CANDIDATES = 6
MIN_RITUAL_LENGTH = 10

# "Mikro-Ritual:" followed by up to three sentences; a sentence never spans a
# line break or swallows the next marker.
_RITUAL_RE = re.compile(
    r"Mikro-Ritual:\s*([^.?!\n]+(?:[.?!](?!\s*Mikro-Ritual:)[^.?!\n]+){0,2})",
    re.IGNORECASE,
)

RitualExtractor = Callable[[str], list[str]]


def build_knowledge_context(snippets: list[RankedSnippet]) -> str:
    """Render snippets as numbered sources separated by blank lines.

    Input order is kept; callers pass snippets already ranked.
    """
    if not snippets:
        return NO_SNIPPETS_FOUND
    return "\n\n".join(
        f"Source {i + 1} ({snippet.title}): {snippet.content}"
        for i, snippet in enumerate(snippets)
    )


def extract_ritual_candidates(text: str) -> list[str]:
    """Collect distinct mini-ritual phrases following ``Mikro-Ritual:`` markers.

    Matches under ten characters are dropped. At most six candidates are
    returned, in order of first appearance.
    """
    candidates: list[str] = []
    for match in _RITUAL_RE.finditer(text):
        candidate = match.group(1).strip()
        if len(candidate) < MIN_RITUAL_LENGTH or candidate in candidates:
            continue
        candidates.append(candidate)
        if len(candidates) >= MAX_RITUAL_CANDIDATES:
            break
    return candidates


def format_ritual_prompt(candidates: list[str]) -> str:
    """Render ritual candidates as the instruction block handed to the model."""
    if not candidates:
        return NO_RITUAL_CANDIDATES
    lines = "\n".join(f"- {c}" for c in candidates)
    return f"Mini-ritual candidates (from coaching calls, adapt one if it fits):\n{lines}"


def gather_knowledge(
    query: str,
    limit: int = 6,
    topics: Iterable[Topic | str] | None = None,
    *,
    client: Client | None = None,
    classify: TopicClassifier = infer_topics_from_query,
    extract_rituals: RitualExtractor = extract_ritual_candidates,
) -> KnowledgeContext:
    """Look up grounding knowledge for one conversation turn.

    Topics are inferred from *query* with *classify* unless given
    explicitly. Both strategies can be swapped without touching the search.

    Raises:
        SearchUnavailableError: The backing search failed.
    """
    topic_filter = parse_topics(topics) if topics is not None else classify(query)
    snippets = search_transcript_chunks(query, limit=limit, topics=topic_filter, client=client)
    context = build_knowledge_context(snippets)
    return KnowledgeContext(
        query=query,
        topics=topic_filter,
        snippets=snippets,
        context=context,
        ritual_candidates=extract_rituals(context),
    )
