"""ResearchMind analysis result.

The model is lenient: gateway output is only backfilled for absent fields
(see ``services.normalizer``), numeric scores are not clamped, and unknown
keys are kept.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="allow")


class RankedPaper(_Lenient):
    title: str = ""
    author: str = ""
    relevance_score: float = 0.0
    url: str | None = None
    published_at: str | None = None


class Claim(_Lenient):
    text: str = ""
    type: str = ""
    strength: str = ""


class SupportingPaper(_Lenient):
    title: str = ""
    relation: str = ""


class ConflictingPaper(_Lenient):
    title: str = ""
    contradiction: str = ""


class Contradiction(_Lenient):
    description: str = ""
    severity: str = ""


class Challenge(_Lenient):
    challenge: str = ""
    target_claim: str = ""


class ConfidenceBreakdown(_Lenient):
    recency: float = 0.5
    relevance: float = 0.5
    agreement: float = 0.5


class ConfidenceSignals(_Lenient):
    positive: list[str] = Field(default_factory=list)
    negative: list[str] = Field(default_factory=list)
    neutral: list[str] = Field(default_factory=list)


class AnalysisResult(_Lenient):
    ranked_papers: list[RankedPaper] = Field(default_factory=list)
    claims: list[Claim] = Field(default_factory=list)
    supporting_papers: list[SupportingPaper] = Field(default_factory=list)
    conflicting_papers: list[ConflictingPaper] = Field(default_factory=list)
    contradictions: list[Contradiction] = Field(default_factory=list)
    evidence_gaps: list[str] = Field(default_factory=list)
    devils_advocate: list[Challenge] = Field(default_factory=list)
    confidence_score: float = 0.0
    confidence_breakdown: ConfidenceBreakdown = Field(default_factory=ConfidenceBreakdown)
    confidence_explanation: str = ""
    confidence_signals: ConfidenceSignals = Field(default_factory=ConfidenceSignals)
    reasoning_summary: str = ""
