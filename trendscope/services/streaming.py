from __future__ import annotations

import json
from typing import Any, AsyncIterator

from trendscope.models.frames import DONE_SENTINEL, Frame, FrameKind
from trendscope.services import logger as log_service


def delta(content: str) -> Frame:
    return Frame(kind=FrameKind.DATA, payload={"choices": [{"delta": {"content": content}}]})


def chunk(payload: dict[str, Any]) -> Frame:
    return Frame(kind=FrameKind.DATA, payload=payload)


def done() -> Frame:
    return Frame(kind=FrameKind.DONE)


def error(message: str) -> Frame:
    return Frame(kind=FrameKind.DATA, payload={"error": message})


def to_sse(frame: Frame) -> dict[str, str]:
    """Shape a frame for ``sse_starlette.EventSourceResponse``."""
    if frame.is_terminator:
        return {"data": DONE_SENTINEL}
    return {"data": json.dumps(frame.payload)}


async def relay(payloads: AsyncIterator[dict[str, Any]]) -> AsyncIterator[dict[str, str]]:
    """Relay upstream chunk payloads as data frames, always ending with [DONE]."""
    try:
        async for payload in payloads:
            yield to_sse(chunk(payload))
    except Exception as e:
        log_service.log_event(
            event_type="stream_error",
            message="Upstream chat stream failed mid-response",
            level="WARNING",
            error=str(e),
        )
        yield to_sse(error("AI service temporarily unavailable"))
    yield to_sse(done())
