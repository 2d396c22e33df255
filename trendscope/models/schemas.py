from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from trendscope.models.content import ContentItem


# --- Chat ---


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class PlatformContext(BaseModel):
    contentSummary: str = ""
    trendingTags: list[str] = Field(default_factory=list)
    contentTypes: str = ""
    totalItems: int = 0


class ChatRequest(BaseModel):
    messages: list[ChatMessage]
    platformContext: PlatformContext | None = None


# --- ResearchMind ---


class PaperInput(BaseModel):
    id: str
    title: str
    summary: str = ""
    tags: list[str] = Field(default_factory=list)
    author: str = ""
    source: str = ""
    arxiv_id: str | None = None
    published_at: str | None = None
    url: str | None = None

    @classmethod
    def from_content(cls, item: ContentItem) -> "PaperInput":
        return cls(
            id=item.id,
            title=item.title,
            summary=item.summary,
            tags=list(item.tags),
            author=item.author,
            source=item.source,
            arxiv_id=item.arxiv_id,
            published_at=item.published_at or None,
            url=item.url or None,
        )


class ResearchMindRequest(BaseModel):
    paper: PaperInput
    relatedPapers: list[PaperInput] = Field(default_factory=list)


# --- Auxiliary video lookup ---


class VideoLookupRequest(BaseModel):
    query: str


class VideoResult(BaseModel):
    videoId: str
    title: str = ""
    channel: str = ""
    thumbnail: str = ""

    @property
    def watch_url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.videoId}"


# --- Semantic search ---


class SearchRequest(BaseModel):
    query: str
    content: list[ContentItem]


class ExpandedQuery(BaseModel):
    original: str
    synonyms: list[str] = Field(default_factory=list)
    relatedTopics: list[str] = Field(default_factory=list)
    intent: str = "General search"


class SemanticSearchResult(BaseModel):
    items: list[ContentItem]
    expandedQuery: ExpandedQuery
    hasExactMatches: bool
