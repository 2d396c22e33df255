"""OpenAI-compatible AI gateway client factory and completion helpers."""
from __future__ import annotations

import time
from typing import Any, AsyncIterator, Literal

import openai

from trendscope.config import settings
from trendscope.errors import ConfigurationError, TransportError
from trendscope.services import logger as log_service

Purpose = Literal["assistant", "research", "search"]

# Per-route texts for the upstream statuses that are passed through to callers.
ANALYSIS_ERROR_MESSAGES = {
    429: "Rate limit exceeded. Please try again shortly.",
    402: "AI credits exhausted. Please add credits.",
}
ASSISTANT_ERROR_MESSAGES = {
    429: "Rate limit exceeded. Please wait a moment and try again.",
    402: "AI credits exhausted. Please add credits to continue.",
}


def get_client() -> openai.AsyncOpenAI:
    """Build the gateway client; raises ConfigurationError without a key."""
    if not settings.ai_gateway_api_key:
        raise ConfigurationError()
    base_url = settings.ai_gateway_base_url.strip() or "https://ai.gateway.lovable.dev/v1"
    return openai.AsyncOpenAI(api_key=settings.ai_gateway_api_key, base_url=base_url)


def get_model(purpose: Purpose) -> str:
    if purpose == "assistant":
        return settings.assistant_model
    if purpose == "research":
        return settings.research_model
    return settings.search_model


_client: openai.AsyncOpenAI | None = None


def client() -> openai.AsyncOpenAI:
    """Get or create the gateway client."""
    global _client
    if _client is None:
        _client = get_client()
    return _client


def _to_transport_error(
    exc: openai.OpenAIError,
    fallback: str,
    status_messages: dict[int, str],
) -> TransportError:
    if isinstance(exc, openai.APIStatusError):
        message = status_messages.get(exc.status_code, fallback)
        return TransportError(message, status_code=exc.status_code)
    return TransportError(fallback, status_code=502)


async def complete(
    *,
    purpose: Purpose,
    system: str,
    user: str,
    caller: str,
    fallback_error: str = "AI analysis failed",
    status_messages: dict[int, str] | None = None,
) -> str:
    """One non-streaming completion; returns the first choice's text."""
    model = get_model(purpose)
    t0 = time.monotonic()
    try:
        response = await client().chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        )
    except openai.OpenAIError as exc:
        log_service.log_llm_call(
            model=model,
            caller=caller,
            duration_ms=int((time.monotonic() - t0) * 1000),
            status="error",
            error=str(exc),
        )
        raise _to_transport_error(exc, fallback_error, status_messages or ANALYSIS_ERROR_MESSAGES) from exc

    usage = getattr(response, "usage", None)
    log_service.log_llm_call(
        model=model,
        caller=caller,
        input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
        output_tokens=getattr(usage, "completion_tokens", 0) or 0,
        duration_ms=int((time.monotonic() - t0) * 1000),
    )
    if not response.choices:
        return ""
    return response.choices[0].message.content or ""


async def open_chat_stream(
    *,
    messages: list[dict[str, Any]],
    system: str,
    caller: str = "assistant",
    fallback_error: str = "AI service temporarily unavailable",
    status_messages: dict[int, str] | None = None,
) -> AsyncIterator[dict[str, Any]]:
    """Start a streamed completion and return an iterator of chunk payloads.

    The request is issued before this coroutine returns, so upstream errors
    surface here rather than midway through a relayed response.
    """
    model = get_model("assistant")
    try:
        stream = await client().chat.completions.create(
            model=model,
            messages=[{"role": "system", "content": system}, *messages],
            stream=True,
        )
    except openai.OpenAIError as exc:
        log_service.log_llm_call(model=model, caller=caller, status="error", error=str(exc))
        raise _to_transport_error(exc, fallback_error, status_messages or ASSISTANT_ERROR_MESSAGES) from exc

    log_service.log_llm_call(model=model, caller=caller, status="streaming")

    async def payloads() -> AsyncIterator[dict[str, Any]]:
        async for chunk in stream:
            yield chunk.model_dump(exclude_none=True)

    return payloads()
