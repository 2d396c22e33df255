from __future__ import annotations

import pytest
from loguru import logger

from trendscope.services import logger as log_service


@pytest.fixture
def records():
    captured = []
    handler_id = logger.add(lambda message: captured.append(message.record), level="DEBUG", format="{message}")
    yield captured
    logger.remove(handler_id)


def test_log_stage_binds_session_fields(records):
    log_service.log_stage(session_token=3, stage="ranking", status="running", paper_id="p1", candidates=4)

    record = records[-1]
    assert record["level"].name == "INFO"
    assert record["extra"]["kind"] == "research_stage"
    assert record["extra"]["session_token"] == 3
    assert record["extra"]["candidates"] == 4
    assert "session 3 [p1]: ranking (running)" in record["message"]


def test_failed_stage_logs_a_warning(records):
    log_service.log_stage(session_token=1, stage="error", status="failed", error="Rate limit exceeded")

    assert records[-1]["level"].name == "WARNING"
    assert records[-1]["extra"]["error"] == "Rate limit exceeded"


def test_log_llm_call_error_level(records):
    log_service.log_llm_call(model="m", caller="research_mind", status="error", error="boom")

    assert records[-1]["level"].name == "ERROR"
    assert records[-1]["extra"]["caller"] == "research_mind"


def test_log_event_level_and_fields(records):
    log_service.log_event("search_fallback", "using keyword search", level="WARNING", query="rust")

    record = records[-1]
    assert record["level"].name == "WARNING"
    assert record["extra"] == {"kind": "event", "event_type": "search_fallback", "query": "rust"}
    assert record["message"] == "search_fallback: using keyword search"
