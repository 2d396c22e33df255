from __future__ import annotations

from fastapi import APIRouter

from trendscope.api.deps import error_response, transport_error_response
from trendscope.errors import ConfigurationError, ParseError, TransportError
from trendscope.models.schemas import ResearchMindRequest
from trendscope.services import logger as log_service
from trendscope.services.research_mind import analyze_paper

router = APIRouter(prefix="/api", tags=["research"])


@router.post("/research-mind")
async def research_mind(request: ResearchMindRequest):
    """Analyze one paper against its related papers."""
    log_service.log_event(
        event_type="analysis_requested",
        message="ResearchMind analysis requested",
        paper_id=request.paper.id,
        related=len(request.relatedPapers),
    )
    try:
        analysis = await analyze_paper(request)
    except ConfigurationError:
        return error_response("AI service not configured", 500)
    except ParseError:
        return error_response("Failed to parse analysis results", 500)
    except TransportError as exc:
        return transport_error_response(exc)

    return {"success": True, "data": analysis}
