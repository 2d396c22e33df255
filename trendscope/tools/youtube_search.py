from __future__ import annotations

from typing import Any

import httpx

from trendscope.config import settings
from trendscope.errors import ConfigurationError
from trendscope.models.schemas import VideoResult


def _map_item(item: dict[str, Any]) -> VideoResult:
    snippet = item.get("snippet") or {}
    thumbnails = snippet.get("thumbnails") or {}
    thumbnail = (thumbnails.get("medium") or {}).get("url") or (thumbnails.get("default") or {}).get("url") or ""
    return VideoResult(
        videoId=(item.get("id") or {}).get("videoId") or "",
        title=snippet.get("title") or "",
        channel=snippet.get("channelTitle") or "",
        thumbnail=thumbnail,
    )


async def search(query: str, *, max_results: int | None = None) -> list[VideoResult]:
    """Search YouTube for explainer videos about ``query``."""
    if not settings.youtube_api_key:
        raise ConfigurationError("YouTube API not configured")

    params: dict[str, Any] = {
        "part": "snippet",
        "q": f"{query} research explanation",
        "type": "video",
        "maxResults": max_results or settings.youtube_max_results,
        "relevanceLanguage": "en",
        "key": settings.youtube_api_key,
    }

    async with httpx.AsyncClient(timeout=30.0) as client:
        response = await client.get(settings.youtube_search_url, params=params)
        response.raise_for_status()
        payload = response.json()

    videos = [_map_item(item) for item in payload.get("items") or []]
    return [video for video in videos if video.videoId]
