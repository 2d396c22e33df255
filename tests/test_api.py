"""Tests for API routes."""
import json
from unittest.mock import AsyncMock, patch

import pytest

from trendscope import llm_client
from trendscope.config import settings
from trendscope.errors import TransportError
from trendscope.models.schemas import VideoResult

PAPER = {"id": "p1", "title": "Attention Is All You Need", "summary": "Transformers", "tags": ["nlp"]}


@pytest.fixture
def app():
    from trendscope.main import app
    yield app


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture
def no_gateway(monkeypatch):
    monkeypatch.setattr(settings, "ai_gateway_api_key", "")
    monkeypatch.setattr(llm_client, "_client", None)


def _sse_data(body: str) -> list[str]:
    return [line[len("data: "):] for line in body.splitlines() if line.startswith("data: ")]


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "trendscope"


def test_research_mind_returns_normalized_analysis(client):
    raw = '```json\n{"claims": [{"text": "Attention suffices", "type": "empirical", "strength": "strong"}], "confidence_score": 0.9}\n```'
    with patch("trendscope.llm_client.complete", new=AsyncMock(return_value=raw)) as complete:
        response = client.post("/api/research-mind", json={"paper": PAPER, "relatedPapers": []})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["claims"][0]["text"] == "Attention suffices"
    assert body["data"]["contradictions"] == []
    assert body["data"]["confidence_breakdown"] == {"recency": 0.5, "relevance": 0.5, "agreement": 0.5}
    assert complete.await_args.kwargs["purpose"] == "research"
    assert "Attention Is All You Need" in complete.await_args.kwargs["user"]


def test_research_mind_unparseable_output(client):
    with patch("trendscope.llm_client.complete", new=AsyncMock(return_value="Sorry, I can't help")):
        response = client.post("/api/research-mind", json={"paper": PAPER})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to parse analysis results"}


def test_research_mind_rate_limit_passes_through(client):
    error = TransportError("Rate limit exceeded. Please try again shortly.", status_code=429)
    with patch("trendscope.llm_client.complete", new=AsyncMock(side_effect=error)):
        response = client.post("/api/research-mind", json={"paper": PAPER})

    assert response.status_code == 429
    assert response.json()["error"].startswith("Rate limit exceeded")


def test_research_mind_other_upstream_errors_become_500(client):
    error = TransportError("AI analysis failed", status_code=503)
    with patch("trendscope.llm_client.complete", new=AsyncMock(side_effect=error)):
        response = client.post("/api/research-mind", json={"paper": PAPER})

    assert response.status_code == 500
    assert response.json() == {"error": "AI analysis failed"}


def test_research_mind_without_gateway_key(client, no_gateway):
    response = client.post("/api/research-mind", json={"paper": PAPER})

    assert response.status_code == 500
    assert response.json() == {"error": "AI service not configured"}


def test_research_mind_requires_paper(client):
    response = client.post("/api/research-mind", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Paper data is required"}


def test_assistant_requires_messages(client):
    response = client.post("/api/ai-assistant", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Messages array required"}


def test_assistant_without_gateway_key(client, no_gateway):
    response = client.post("/api/ai-assistant", json={"messages": [{"role": "user", "content": "hi"}]})

    assert response.status_code == 500
    assert response.json() == {"error": "AI not configured"}


def test_assistant_streams_chunks_and_done(client):
    async def payloads():
        yield {"choices": [{"delta": {"content": "Hel"}}]}
        yield {"choices": [{"delta": {"content": "lo"}}]}

    with patch("trendscope.llm_client.open_chat_stream", new=AsyncMock(return_value=payloads())) as opened:
        response = client.post(
            "/api/ai-assistant",
            json={
                "messages": [{"role": "user", "content": "hi"}],
                "platformContext": {"totalItems": 3, "trendingTags": ["rust"], "contentTypes": "article: 3"},
            },
        )

    assert response.status_code == 200
    frames = _sse_data(response.text)
    assert frames[-1] == "[DONE]"
    deltas = [json.loads(f)["choices"][0]["delta"]["content"] for f in frames[:-1]]
    assert "".join(deltas) == "Hello"
    assert "rust" in opened.await_args.kwargs["system"]


def test_assistant_mid_stream_failure_sends_error_then_done(client):
    async def payloads():
        yield {"choices": [{"delta": {"content": "partial"}}]}
        raise RuntimeError("connection reset")

    with patch("trendscope.llm_client.open_chat_stream", new=AsyncMock(return_value=payloads())):
        response = client.post("/api/ai-assistant", json={"messages": [{"role": "user", "content": "hi"}]})

    frames = _sse_data(response.text)
    assert frames[-1] == "[DONE]"
    assert json.loads(frames[-2]) == {"error": "AI service temporarily unavailable"}


def test_assistant_credit_exhaustion_passes_through(client):
    error = TransportError("AI credits exhausted. Please add credits.", status_code=402)
    with patch("trendscope.llm_client.open_chat_stream", new=AsyncMock(side_effect=error)):
        response = client.post("/api/ai-assistant", json={"messages": [{"role": "user", "content": "hi"}]})

    assert response.status_code == 402
    assert response.json() == {"error": "AI credits exhausted. Please add credits."}


def test_assistant_requires_bearer_token_when_configured(client, monkeypatch):
    monkeypatch.setattr(settings, "api_key", "secret")
    body = {"messages": [{"role": "user", "content": "hi"}]}

    assert client.post("/api/ai-assistant", json=body).status_code == 401
    wrong = client.post("/api/ai-assistant", json=body, headers={"Authorization": "Bearer nope"})
    assert wrong.status_code == 401


def test_youtube_without_key_still_succeeds(client, monkeypatch):
    monkeypatch.setattr(settings, "youtube_api_key", "")

    response = client.post("/api/youtube-research", json={"query": "transformers"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": None, "message": "YouTube API not configured"}


def test_youtube_returns_first_video(client):
    videos = [
        VideoResult(videoId="v1", title="Transformers explained", channel="Lab", thumbnail="t1"),
        VideoResult(videoId="v2", title="Attention", channel="Lab", thumbnail="t2"),
    ]
    with patch("trendscope.tools.youtube_search.search", new=AsyncMock(return_value=videos)):
        response = client.post("/api/youtube-research", json={"query": "transformers"})

    body = response.json()
    assert body["success"] is True
    assert body["data"]["videoId"] == "v1"
    assert len(body["all"]) == 2


def test_youtube_upstream_failure_is_not_an_error(client):
    with patch("trendscope.tools.youtube_search.search", new=AsyncMock(side_effect=ValueError("bad json"))):
        response = client.post("/api/youtube-research", json={"query": "transformers"})

    assert response.status_code == 200
    assert response.json()["data"] is None


def test_semantic_search_falls_back_without_gateway(client, no_gateway):
    content = [
        {"id": "1", "title": "Rust in production", "content_type": "article", "engagement_score": 10},
        {"id": "2", "title": "Gardening", "content_type": "article", "engagement_score": 90},
    ]

    response = client.post("/api/semantic-search", json={"query": "rust", "content": content})

    assert response.status_code == 200
    data = response.json()["data"]
    assert [item["id"] for item in data["items"]] == ["1"]
    assert data["hasExactMatches"] is True
    assert data["expandedQuery"]["intent"] == "Basic search (AI unavailable)"


def test_semantic_search_rejects_empty_query(client):
    response = client.post("/api/semantic-search", json={"query": " ", "content": []})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing query or content array"}
