from __future__ import annotations

from typing import Any, Iterable

from trendscope import llm_client
from trendscope.config import settings
from trendscope.errors import TrendScopeError
from trendscope.models.content import ContentItem
from trendscope.models.schemas import ExpandedQuery, SemanticSearchResult
from trendscope.services import logger as log_service
from trendscope.services.normalizer import normalize_query_analysis
from trendscope.services.prompt_store import render_prompt

BASIC_INTENT = "Basic search"
AI_UNAVAILABLE_INTENT = "Basic search (AI unavailable)"
EXACT_MATCH_PADDING_THRESHOLD = 5


def top_by_engagement(items: Iterable[ContentItem], limit: int) -> list[ContentItem]:
    """Highest-engagement items first; does not reorder the input."""
    return sorted(items, key=lambda item: item.engagement_score, reverse=True)[:limit]


def _keyword_match(item: ContentItem, needle: str) -> bool:
    return (
        needle in item.title.lower()
        or needle in item.summary.lower()
        or any(needle in tag.lower() for tag in item.tags)
    )


def keyword_search(
    query: str,
    content: list[ContentItem],
    *,
    intent: str = BASIC_INTENT,
    trending_limit: int | None = None,
) -> SemanticSearchResult:
    """Plain substring search; falls back to trending items when nothing matches.

    Never raises, so it is safe as the degraded path of semantic search.
    """
    limit = settings.fallback_trending_limit if trending_limit is None else trending_limit
    needle = (query or "").lower()
    matched = [item for item in content if _keyword_match(item, needle)]
    items = matched if matched else top_by_engagement(content, limit)
    return SemanticSearchResult(
        items=items,
        expandedQuery=ExpandedQuery(original=query or "", intent=intent),
        hasExactMatches=bool(matched),
    )


def search_terms(query: str, analysis: dict[str, Any]) -> list[str]:
    terms: list[str] = [query.lower()]
    for key in ("synonyms", "relatedTopics", "broaderConcepts", "narrowerConcepts"):
        for term in analysis.get(key) or []:
            lowered = str(term).lower()
            if lowered not in terms:
                terms.append(lowered)
    return terms


def relevance_score(item: ContentItem, query: str, terms: list[str]) -> float:
    query_lower = query.lower()
    title = item.title.lower()
    summary = item.summary.lower()
    tags = [tag.lower() for tag in item.tags]

    score = 0.0
    for term in terms:
        is_query = term == query_lower
        if term in title:
            score += 100 if is_query else 50
        if term in summary:
            score += 40 if is_query else 20
        if any(term in tag or tag in term for tag in tags):
            score += 60 if is_query else 30
    return score + item.engagement_score * 0.1


def rank_semantic(
    query: str,
    content: list[ContentItem],
    analysis: dict[str, Any],
    *,
    trending_limit: int | None = None,
) -> SemanticSearchResult:
    """Rank ``content`` against the query expanded by ``analysis``."""
    limit = settings.semantic_trending_limit if trending_limit is None else trending_limit
    terms = search_terms(query, analysis)
    scored = sorted(
        ((relevance_score(item, query, terms), item) for item in content),
        key=lambda pair: pair[0],
        reverse=True,
    )

    query_lower = query.lower()
    has_exact = any(
        query_lower in item.title.lower() or query_lower in item.summary.lower()
        for _, item in scored
    )

    results = [item for score, item in scored if score > 0]
    if not has_exact and len(results) < EXACT_MATCH_PADDING_THRESHOLD:
        seen = {item.id for item in results}
        results.extend(item for item in top_by_engagement(content, limit) if item.id not in seen)

    return SemanticSearchResult(
        items=results,
        expandedQuery=ExpandedQuery(
            original=query,
            synonyms=[str(s) for s in analysis.get("synonyms") or []],
            relatedTopics=[str(t) for t in analysis.get("relatedTopics") or []],
            intent=str(analysis.get("intent") or "General search"),
        ),
        hasExactMatches=has_exact,
    )


async def semantic_search(query: str, content: list[ContentItem]) -> SemanticSearchResult:
    """Expand the query with the gateway and rank; degrade to keyword search on any failure."""
    try:
        raw = await llm_client.complete(
            purpose="search",
            system=render_prompt("semantic_search.system"),
            user=render_prompt("semantic_search.user", query=query),
            caller="semantic_search",
        )
        analysis = normalize_query_analysis(raw)
    except TrendScopeError as exc:
        log_service.log_event(
            event_type="search_fallback",
            message="Semantic search unavailable, using keyword search",
            level="WARNING",
            error=exc.message,
            query=query[:100],
        )
        return keyword_search(query, content, intent=AI_UNAVAILABLE_INTENT)
    return rank_semantic(query, content, analysis)
