"""Async client for the TrendScope API routes."""
from __future__ import annotations

from typing import Any, AsyncIterator

import httpx

from trendscope.config import settings
from trendscope.errors import ParseError, TransportError, TrendScopeError
from trendscope.models.content import ContentItem
from trendscope.models.schemas import (
    ChatMessage,
    PaperInput,
    PlatformContext,
    SemanticSearchResult,
    VideoResult,
)
from trendscope.services import logger as log_service
from trendscope.services.search import keyword_search


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
        return body["error"]
    return fallback


class TrendScopeClient:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        key = settings.api_key if api_key is None else api_key
        headers = {"Authorization": f"Bearer {key}"} if key else {}
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout or settings.request_timeout_s,
            headers=headers,
            transport=transport,
        )

    async def __aenter__(self) -> "TrendScopeClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def stream_chat(
        self,
        messages: list[ChatMessage],
        platform_context: PlatformContext | None = None,
    ) -> AsyncIterator[bytes]:
        """Yield the raw body chunks of a streamed assistant reply."""
        body: dict[str, Any] = {"messages": [m.model_dump() for m in messages]}
        if platform_context is not None:
            body["platformContext"] = platform_context.model_dump()

        try:
            async with self._http.stream("POST", "/api/ai-assistant", json=body) as response:
                if not response.is_success:
                    await response.aread()
                    raise TransportError(
                        _error_message(response, "Failed to get response"),
                        status_code=response.status_code,
                    )
                received = False
                async for chunk in response.aiter_bytes():
                    received = True
                    yield chunk
                if not received:
                    raise TransportError("No response stream", status_code=response.status_code)
        except httpx.HTTPError as exc:
            raise TransportError("Failed to connect to AI assistant") from exc

    async def analyze(self, paper: PaperInput, related: list[PaperInput]) -> dict[str, Any]:
        """Request a ResearchMind analysis and return the ``data`` payload."""
        body = {
            "paper": paper.model_dump(exclude_none=True),
            "relatedPapers": [p.model_dump(exclude_none=True) for p in related],
        }
        try:
            response = await self._http.post("/api/research-mind", json=body)
        except httpx.HTTPError as exc:
            raise TransportError("Analysis failed") from exc

        if not response.is_success:
            raise TransportError(
                _error_message(response, "Analysis failed"),
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise ParseError(raw=response.text) from exc
        if not isinstance(payload, dict):
            raise ParseError(raw=response.text)
        if payload.get("error"):
            raise TransportError(str(payload["error"]), status_code=response.status_code)
        data = payload.get("data")
        if not isinstance(data, dict):
            raise ParseError(raw=response.text)
        return data

    async def lookup_video(self, query: str) -> VideoResult | None:
        try:
            response = await self._http.post("/api/youtube-research", json={"query": query})
            response.raise_for_status()
            data = response.json().get("data")
        except (httpx.HTTPError, ValueError, AttributeError) as exc:
            raise TransportError("Video lookup failed") from exc
        if not data:
            return None
        try:
            return VideoResult.model_validate(data)
        except ValueError as exc:
            raise ParseError(raw=str(data)) from exc

    async def semantic_search(self, query: str, content: list[ContentItem]) -> SemanticSearchResult:
        """Semantic search with a local keyword fallback; never raises."""
        body = {"query": query, "content": [item.model_dump() for item in content]}
        try:
            response = await self._http.post("/api/semantic-search", json=body)
            response.raise_for_status()
            data = response.json().get("data")
            if data:
                return SemanticSearchResult.model_validate(data)
        except (httpx.HTTPError, ValueError, AttributeError, TrendScopeError) as exc:
            log_service.log_event(
                event_type="search_fallback",
                message="Semantic search request failed, using local keyword search",
                level="WARNING",
                error=str(exc),
            )
        return keyword_search(query, content)
