from __future__ import annotations

from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse

from trendscope import llm_client
from trendscope.api.deps import error_response, transport_error_response, verify_api_key
from trendscope.errors import ConfigurationError, TransportError
from trendscope.models.schemas import ChatRequest
from trendscope.services import logger as log_service
from trendscope.services import streaming
from trendscope.services.assistant import build_system_prompt

router = APIRouter(prefix="/api", tags=["assistant"])


@router.post("/ai-assistant", dependencies=[Depends(verify_api_key)])
async def chat(request: ChatRequest):
    """Relay a streamed assistant reply as ``data:`` frames ending in ``[DONE]``."""
    system = build_system_prompt(request.platformContext)
    messages = [m.model_dump() for m in request.messages]

    try:
        payloads = await llm_client.open_chat_stream(messages=messages, system=system)
    except ConfigurationError:
        return error_response("AI not configured", 500)
    except TransportError as exc:
        log_service.log_event(
            event_type="assistant_error",
            message="AI gateway rejected chat request",
            level="WARNING",
            error=exc.message,
            status_code=exc.status_code,
        )
        return transport_error_response(exc)

    return EventSourceResponse(streaming.relay(payloads))
