"""Parse and backfill structured (JSON) gateway output.

Only absent (or null) fields are backfilled. Fields present with the wrong
type, and numeric scores outside [0, 1], are passed through untouched.
"""
from __future__ import annotations

import json
import re
from copy import deepcopy
from typing import Any

from pydantic import ValidationError

from trendscope.errors import ParseError
from trendscope.models.analysis import AnalysisResult

_LEADING_FENCE = re.compile(r"^```[ \t]*(?:json)?[ \t]*\r?\n?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\r?\n?[ \t]*```$")

ANALYSIS_LIST_FIELDS = (
    "ranked_papers",
    "claims",
    "supporting_papers",
    "conflicting_papers",
    "contradictions",
    "evidence_gaps",
    "devils_advocate",
)
ANALYSIS_TEXT_FIELDS = ("confidence_explanation", "reasoning_summary")
NEUTRAL_BREAKDOWN = {"recency": 0.5, "relevance": 0.5, "agreement": 0.5}
EMPTY_SIGNALS = {"positive": [], "negative": [], "neutral": []}

QUERY_LIST_FIELDS = ("synonyms", "relatedTopics", "broaderConcepts", "narrowerConcepts")


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence (with or without ``json``)."""
    cleaned = text.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_json_response(raw: str) -> Any:
    try:
        return json.loads(strip_code_fences(raw))
    except json.JSONDecodeError as exc:
        raise ParseError(raw=raw) from exc


def _parse_object(raw: str | dict[str, Any]) -> dict[str, Any]:
    payload = parse_json_response(raw) if isinstance(raw, str) else deepcopy(raw)
    if not isinstance(payload, dict):
        raise ParseError("Structured response is not a JSON object", raw=str(raw))
    return payload


def _backfill(payload: dict[str, Any], key: str, default: Any) -> None:
    if payload.get(key) is None:
        payload[key] = deepcopy(default)


def normalize_analysis(raw: str | dict[str, Any]) -> dict[str, Any]:
    """Return the analysis payload with every optional field present."""
    payload = _parse_object(raw)
    for key in ANALYSIS_LIST_FIELDS:
        _backfill(payload, key, [])
    for key in ANALYSIS_TEXT_FIELDS:
        _backfill(payload, key, "")
    _backfill(payload, "confidence_breakdown", NEUTRAL_BREAKDOWN)
    _backfill(payload, "confidence_signals", EMPTY_SIGNALS)
    return payload


def normalize_query_analysis(raw: str | dict[str, Any]) -> dict[str, Any]:
    payload = _parse_object(raw)
    for key in QUERY_LIST_FIELDS:
        _backfill(payload, key, [])
    _backfill(payload, "intent", "General search")
    return payload


def to_analysis_result(payload: dict[str, Any]) -> AnalysisResult:
    try:
        return AnalysisResult.model_validate(normalize_analysis(payload))
    except ValidationError as exc:
        raise ParseError("Analysis result does not match the expected schema", raw=str(payload)) from exc
