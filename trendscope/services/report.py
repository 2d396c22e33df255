"""Markdown rendering of a ResearchMind analysis."""
from __future__ import annotations

import re
from datetime import date

from trendscope.config import settings
from trendscope.models.analysis import AnalysisResult
from trendscope.models.schemas import VideoResult


def _percent(value: float) -> str:
    return f"{round(value * 100)}%"


def report_filename(paper_title: str) -> str:
    return f"ResearchMind_{re.sub(r'[^a-zA-Z0-9]', '_', paper_title[:40])}.md"


def render_report(
    paper_title: str,
    analysis: AnalysisResult,
    video: VideoResult | None = None,
    *,
    generated: date | None = None,
) -> str:
    generated = generated or date.today()
    lines: list[str] = [
        "# ResearchMind Analysis Report",
        "",
        f"**{paper_title}**",
        "",
        f"_Generated: {generated.isoformat()}_",
        "",
        "## Executive Summary",
        "",
        analysis.reasoning_summary,
    ]

    def section(title: str) -> None:
        lines.extend(["", f"## {title}", ""])

    if analysis.ranked_papers:
        section("Top Ranked Papers")
        for i, paper in enumerate(analysis.ranked_papers[: settings.research_ranked_top_n], start=1):
            lines.append(f"{i}. **{paper.title}**")
            lines.append(f"   Author: {paper.author or 'N/A'} | Relevance: {_percent(paper.relevance_score)}")

    if analysis.claims:
        section("Key Claims")
        for i, claim in enumerate(analysis.claims, start=1):
            lines.append(f"{i}. [{claim.strength.upper()}] {claim.text}")
            lines.append(f"   Type: {claim.type}")

    if analysis.contradictions:
        section("Contradictions")
        for i, item in enumerate(analysis.contradictions, start=1):
            lines.append(f"{i}. [{item.severity}] {item.description}")

    if analysis.devils_advocate:
        section("Devil's Advocate Review")
        for i, item in enumerate(analysis.devils_advocate, start=1):
            lines.append(f"{i}. {item.challenge}")
            lines.append(f'   Re: "{item.target_claim}"')

    section("Confidence Score Breakdown")
    breakdown = analysis.confidence_breakdown
    lines.append(f"**Overall Confidence: {_percent(analysis.confidence_score)}**")
    lines.append("")
    lines.append(
        f"Recency: {_percent(breakdown.recency)} | "
        f"Relevance: {_percent(breakdown.relevance)} | "
        f"Agreement: {_percent(breakdown.agreement)}"
    )
    if analysis.confidence_explanation:
        lines.extend(["", analysis.confidence_explanation])

    signals = analysis.confidence_signals
    for heading, entries in (
        ("Positive Signals", signals.positive),
        ("Negative Signals", signals.negative),
        ("Neutral Observations", signals.neutral),
    ):
        if entries:
            lines.extend(["", f"### {heading}", ""])
            lines.extend(f"- {entry}" for entry in entries)

    if video is not None:
        section("Video Explanation")
        lines.append(f"**{video.title}**")
        lines.append(f"Channel: {video.channel}")
        lines.append(video.watch_url)

    return "\n".join(lines) + "\n"
