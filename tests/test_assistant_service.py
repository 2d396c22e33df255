from __future__ import annotations

from trendscope.models.content import ContentItem
from trendscope.models.schemas import PlatformContext
from trendscope.services.assistant import build_platform_context, build_system_prompt


def _items() -> list[ContentItem]:
    return [
        ContentItem(id="1", title="Rust 2.0", content_type="article", tags=["rust", "systems"], engagement_score=10, author="Ferris"),
        ContentItem(id="2", title="tokio", content_type="repo", tags=["rust"], engagement_score=80),
        ContentItem(id="3", title="LLM survey", content_type="paper", tags=["ml"], engagement_score=50),
    ]


def test_platform_context_summarizes_feed():
    context = build_platform_context(_items())

    assert context.totalItems == 3
    assert context.trendingTags[0] == "rust"
    assert context.contentTypes == "article: 1, paper: 1, repo: 1"
    assert context.contentSummary.splitlines()[0].strip().startswith("- tokio")


def test_system_prompt_embeds_context():
    prompt = build_system_prompt(PlatformContext(totalItems=42, trendingTags=["rust", "ml"], contentTypes="article: 42"))

    assert "Total content items currently loaded: 42" in prompt
    assert "Trending tags: rust, ml" in prompt
    assert "$total_items" not in prompt


def test_system_prompt_without_context():
    prompt = build_system_prompt(None)

    assert "Total content items currently loaded: 0" in prompt
    assert "Content snapshot" not in prompt
