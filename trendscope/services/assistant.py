from __future__ import annotations

from collections import Counter

from trendscope.models.content import ContentItem
from trendscope.models.schemas import PlatformContext
from trendscope.services.prompt_store import render_prompt
from trendscope.services.search import top_by_engagement

TRENDING_TAG_COUNT = 10
SNAPSHOT_ITEM_COUNT = 10


def build_platform_context(items: list[ContentItem]) -> PlatformContext:
    """Summarize the loaded feed for the assistant's system prompt."""
    type_counts = Counter(item.content_type for item in items)
    tag_counts = Counter(tag for item in items for tag in item.tags)
    snapshot = "\n".join(
        f"  - {item.title} ({item.content_type}, by {item.author or 'unknown'})"
        for item in top_by_engagement(items, SNAPSHOT_ITEM_COUNT)
    )
    return PlatformContext(
        contentSummary=snapshot,
        trendingTags=[tag for tag, _ in tag_counts.most_common(TRENDING_TAG_COUNT)],
        contentTypes=", ".join(f"{kind}: {count}" for kind, count in sorted(type_counts.items())),
        totalItems=len(items),
    )


def build_system_prompt(context: PlatformContext | None) -> str:
    context = context or PlatformContext()
    snapshot = f"- Content snapshot:\n{context.contentSummary}" if context.contentSummary else ""
    return render_prompt(
        "assistant.system",
        total_items=context.totalItems,
        content_types=context.contentTypes,
        trending_tags=", ".join(context.trendingTags),
        content_snapshot=snapshot,
    )
