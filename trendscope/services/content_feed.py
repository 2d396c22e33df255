from __future__ import annotations

import asyncio
import json
from pathlib import Path

from trendscope.models.content import ContentItem, ContentSource
from trendscope.services import logger as log_service


class JsonFeedSource:
    """Content exported to a JSON file: a list of items or ``{"items": [...]}``."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.name = self.path.name

    async def fetch(self) -> list[ContentItem]:
        text = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
        payload = json.loads(text)
        if isinstance(payload, dict):
            payload = payload.get("items") or []
        return [ContentItem.model_validate(item) for item in payload]


async def fetch_all_content(sources: list[ContentSource]) -> list[ContentItem]:
    """Fetch every source concurrently; a failing source contributes nothing."""
    results = await asyncio.gather(*(source.fetch() for source in sources), return_exceptions=True)

    items: list[ContentItem] = []
    for source, result in zip(sources, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            log_service.log_event(
                event_type="content_source_error",
                message=f"Error fetching {source.name}",
                level="WARNING",
                error=str(result),
            )
            continue
        items.extend(result)
    return sorted(items, key=lambda item: item.engagement_score, reverse=True)


async def load_feed(paths: list[Path]) -> list[ContentItem]:
    """Merged feed from JSON files, de-duplicated by id, highest engagement first."""
    items = await fetch_all_content([JsonFeedSource(path) for path in paths])
    seen: set[str] = set()
    unique = []
    for item in items:
        if item.id not in seen:
            seen.add(item.id)
            unique.append(item)
    return unique
