from __future__ import annotations

import json

import pytest

from trendscope.errors import ParseError
from trendscope.services.normalizer import (
    normalize_analysis,
    normalize_query_analysis,
    strip_code_fences,
    to_analysis_result,
)


def test_empty_object_is_backfilled_with_defaults():
    payload = normalize_analysis("{}")

    for key in ("ranked_papers", "claims", "contradictions", "evidence_gaps", "devils_advocate"):
        assert payload[key] == []
    assert payload["confidence_breakdown"] == {"recency": 0.5, "relevance": 0.5, "agreement": 0.5}
    assert payload["confidence_signals"] == {"positive": [], "negative": [], "neutral": []}
    assert payload["reasoning_summary"] == ""
    assert "confidence_score" not in payload


def test_present_fields_are_not_overwritten():
    raw = json.dumps({"claims": [{"text": "X", "type": "empirical", "strength": "strong"}], "confidence_score": 0.7})
    payload = normalize_analysis(raw)

    assert payload["claims"] == [{"text": "X", "type": "empirical", "strength": "strong"}]
    assert payload["confidence_score"] == 0.7
    assert payload["contradictions"] == []


def test_null_fields_count_as_absent():
    payload = normalize_analysis('{"claims": null, "confidence_breakdown": null}')

    assert payload["claims"] == []
    assert payload["confidence_breakdown"]["agreement"] == 0.5


def test_fenced_and_bare_json_normalize_identically():
    body = '{"confidence_score": 0.42, "evidence_gaps": ["small sample"]}'

    assert normalize_analysis(f"```json\n{body}\n```") == normalize_analysis(body)
    assert normalize_analysis(f"```\n{body}\n```") == normalize_analysis(body)


def test_strip_code_fences_leaves_plain_text_alone():
    assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'


def test_invalid_json_raises_parse_error_with_raw_text():
    with pytest.raises(ParseError) as excinfo:
        normalize_analysis("I cannot answer that")

    assert excinfo.value.raw == "I cannot answer that"
    assert excinfo.value.message == "Failed to parse analysis results"


def test_non_object_json_raises_parse_error():
    with pytest.raises(ParseError):
        normalize_analysis("[1, 2, 3]")


def test_scores_are_not_clamped():
    payload = normalize_analysis('{"confidence_score": 1.7, "ranked_papers": [{"title": "A", "relevance_score": -2}]}')
    result = to_analysis_result(payload)

    assert result.confidence_score == 1.7
    assert result.ranked_papers[0].relevance_score == -2


def test_wrong_typed_field_is_passed_through():
    payload = normalize_analysis('{"evidence_gaps": "none found"}')

    assert payload["evidence_gaps"] == "none found"


def test_to_analysis_result_rejects_unusable_shapes():
    with pytest.raises(ParseError):
        to_analysis_result({"claims": "not a list"})


def test_unknown_keys_survive_validation():
    result = to_analysis_result({"model_notes": "extra"})

    assert result.model_dump()["model_notes"] == "extra"


def test_query_analysis_defaults():
    payload = normalize_query_analysis('```json\n{"synonyms": ["llm"]}\n```')

    assert payload["synonyms"] == ["llm"]
    assert payload["relatedTopics"] == []
    assert payload["broaderConcepts"] == []
    assert payload["intent"] == "General search"
