"""Server side of ResearchMind: one structured-generation call per paper."""
from __future__ import annotations

from typing import Any

from trendscope import llm_client
from trendscope.config import settings
from trendscope.errors import ParseError
from trendscope.models.schemas import PaperInput, ResearchMindRequest
from trendscope.services import logger as log_service
from trendscope.services.normalizer import normalize_analysis
from trendscope.services.prompt_store import render_prompt


def _related_context(papers: list[PaperInput]) -> str:
    if not papers:
        return render_prompt("research_mind.no_related")
    return "\n\n".join(
        render_prompt(
            "research_mind.related_entry",
            index=i,
            title=p.title,
            author=p.author,
            published_at=p.published_at or "unknown",
            source=p.source,
            summary=p.summary,
            tags=", ".join(p.tags),
        )
        for i, p in enumerate(papers, start=1)
    )


def build_prompts(request: ResearchMindRequest) -> tuple[str, str]:
    paper = request.paper
    related = request.relatedPapers[: settings.research_max_related_papers]
    top_n = settings.research_ranked_top_n
    system = render_prompt("research_mind.system", top_n=top_n)
    user = render_prompt(
        "research_mind.user",
        title=paper.title,
        author=paper.author,
        published_at=paper.published_at or "unknown",
        summary=paper.summary,
        tags=", ".join(paper.tags),
        source=paper.source,
        related_context=_related_context(related),
        top_n=top_n,
    )
    return system, user


async def analyze_paper(request: ResearchMindRequest) -> dict[str, Any]:
    """Run the analysis and return the normalized payload.

    Raises ConfigurationError, TransportError or ParseError.
    """
    system, user = build_prompts(request)
    raw = await llm_client.complete(
        purpose="research",
        system=system,
        user=user,
        caller="research_mind",
    )
    try:
        return normalize_analysis(raw)
    except ParseError as exc:
        log_service.log_event(
            event_type="analysis_parse_error",
            message="Failed to parse AI response",
            level="WARNING",
            paper_id=request.paper.id,
            raw=exc.raw,
        )
        raise
