from __future__ import annotations

import httpx
from fastapi import APIRouter

from trendscope.errors import ConfigurationError
from trendscope.models.schemas import VideoLookupRequest
from trendscope.services import logger as log_service
from trendscope.tools import youtube_search

router = APIRouter(prefix="/api", tags=["videos"])


@router.post("/youtube-research")
async def youtube_research(request: VideoLookupRequest):
    """Find an explainer video. Always succeeds; ``data`` is null when nothing is found."""
    if not request.query.strip():
        return {"success": True, "data": None, "message": "Query is required"}
    try:
        videos = await youtube_search.search(request.query)
    except ConfigurationError as exc:
        return {"success": True, "data": None, "message": exc.message}
    except (httpx.HTTPError, ValueError) as exc:
        log_service.log_event(
            event_type="youtube_error",
            message="YouTube search unavailable",
            level="WARNING",
            error=str(exc),
        )
        return {"success": True, "data": None, "message": "YouTube search unavailable"}

    return {
        "success": True,
        "data": videos[0].model_dump() if videos else None,
        "all": [video.model_dump() for video in videos],
    }
