from __future__ import annotations

from typing import Literal, Protocol

from pydantic import BaseModel, Field


ContentType = Literal["article", "repo", "paper", "video", "tool"]


class ContentItem(BaseModel):
    """Uniform shape every content adapter (GitHub, arXiv, YouTube, ...) returns."""

    id: str
    title: str
    content_type: ContentType
    summary: str = ""
    key_insights: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    difficulty_level: Literal["beginner", "intermediate", "advanced"] = "intermediate"
    estimated_read_time: str = ""
    engagement_score: float = 0
    source: str = ""
    author: str = ""
    published_at: str = ""
    url: str = ""
    image: str | None = None
    stars: int | None = None
    forks: int | None = None
    language: str | None = None
    thumbnail: str | None = None
    video_id: str | None = None
    arxiv_id: str | None = None
    tool_category: str | None = None
    pricing: str | None = None


class ContentSource(Protocol):
    """An external adapter producing content items."""

    name: str

    async def fetch(self) -> list[ContentItem]: ...
