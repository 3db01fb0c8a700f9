"""Knowledge endpoint: ranked transcript snippets and context for the thinking partner."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, HTTPException

from coaching_knowledge.api.models import SearchRequest, SearchResponse, SnippetResponse
from coaching_knowledge.config import settings
from coaching_knowledge.errors import SearchUnavailableError
from coaching_knowledge.retrieval.context import gather_knowledge

router = APIRouter()


@router.post("/api/knowledge/search", response_model=SearchResponse)
def search_knowledge(request: SearchRequest) -> SearchResponse:
    """Search coaching-call transcripts for grounding context.

    Returns 503 when the search backend fails, so the caller can tell
    "knowledge base unavailable" apart from "nothing relevant found".
    """
    try:
        knowledge = gather_knowledge(
            request.query,
            limit=request.limit or settings.knowledge_search_limit,
            topics=request.topics,
        )
    except SearchUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    return SearchResponse(
        query=knowledge.query,
        topics=knowledge.topics,
        snippets=[SnippetResponse(**asdict(s)) for s in knowledge.snippets],
        context=knowledge.context,
        ritual_candidates=knowledge.ritual_candidates,
    )
