from __future__ import annotations

from datetime import date

from trendscope.models.analysis import AnalysisResult
from trendscope.models.schemas import VideoResult
from trendscope.services.report import render_report, report_filename


def _analysis() -> AnalysisResult:
    return AnalysisResult.model_validate(
        {
            "ranked_papers": [{"title": f"Paper {i}", "author": "A", "relevance_score": 0.9} for i in range(7)],
            "claims": [{"text": "Scaling helps", "type": "empirical", "strength": "strong"}],
            "contradictions": [{"description": "Disagrees on data", "severity": "medium"}],
            "devils_advocate": [{"challenge": "Small benchmark", "target_claim": "Scaling helps"}],
            "confidence_score": 0.72,
            "confidence_signals": {"positive": ["Recent"], "negative": [], "neutral": ["Single venue"]},
            "reasoning_summary": "Promising but narrow.",
        }
    )


def test_report_filename_sanitizes_and_truncates():
    name = report_filename("Attention Is All You Need: a very long subtitle here")

    assert name.startswith("ResearchMind_Attention_Is_All_You_Need__a")
    assert name.endswith(".md")
    assert len(name) == len("ResearchMind_") + 40 + len(".md")


def test_render_report_sections():
    report = render_report("Attention", _analysis(), generated=date(2026, 1, 2))

    assert report.startswith("# ResearchMind Analysis Report")
    assert "_Generated: 2026-01-02_" in report
    assert "## Executive Summary\n\nPromising but narrow." in report
    assert "1. [STRONG] Scaling helps" in report
    assert "**Overall Confidence: 72%**" in report
    assert "Recency: 50% | Relevance: 50% | Agreement: 50%" in report
    assert "### Positive Signals" in report
    assert "### Negative Signals" not in report
    assert "## Video Explanation" not in report


def test_render_report_limits_ranked_papers():
    report = render_report("Attention", _analysis())

    assert "5. **Paper 4**" in report
    assert "Paper 5" not in report


def test_render_report_includes_video():
    video = VideoResult(videoId="abc", title="Explained", channel="Lab")

    report = render_report("Attention", _analysis(), video)

    assert "## Video Explanation" in report
    assert "https://www.youtube.com/watch?v=abc" in report
