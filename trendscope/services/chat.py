"""Chat assistant conversation state and the streamed-turn driver."""
from __future__ import annotations

import asyncio
from contextlib import aclosing
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

from trendscope.errors import TransportError
from trendscope.models.frames import Frame
from trendscope.models.schemas import ChatMessage, PlatformContext
from trendscope.services import logger as log_service
from trendscope.services.frames import FrameDecoder, iter_frames

if TYPE_CHECKING:
    from trendscope.api_client import TrendScopeClient

CANCELLED_MESSAGE = "Request cancelled"
INTERRUPTED_MESSAGE = "Failed to get response"


class ChatStatus(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    DONE = "done"
    ERROR = "error"


class ChatAccumulator:
    """Owns the conversation list and folds streamed deltas into it.

    The list is replaced, never mutated in place, so snapshots handed out
    earlier stay valid. Only the trailing assistant message of the current
    turn ever changes.
    """

    def __init__(self, messages: list[ChatMessage] | None = None):
        self._messages: list[ChatMessage] = list(messages or [])
        self._turn_start = len(self._messages)
        self._terminated = False
        self.status = ChatStatus.IDLE
        self.error: str | None = None

    @property
    def messages(self) -> list[ChatMessage]:
        return self.snapshot()

    @property
    def is_streaming(self) -> bool:
        return self.status is ChatStatus.STREAMING

    @property
    def terminated(self) -> bool:
        return self._terminated

    def snapshot(self) -> list[ChatMessage]:
        return list(self._messages)

    def append_user_message(self, content: str) -> ChatMessage:
        message = ChatMessage(role="user", content=content)
        self._messages = [*self._messages, message]
        self._turn_start = len(self._messages)
        self._terminated = False
        self.status = ChatStatus.STREAMING
        self.error = None
        return message

    def apply_delta(self, delta: str) -> bool:
        if self._terminated or not delta:
            return False
        last = self._messages[-1] if self._messages else None
        if last is not None and last.role == "assistant":
            updated = last.model_copy(update={"content": last.content + delta})
            self._messages = [*self._messages[:-1], updated]
        else:
            self._messages = [*self._messages, ChatMessage(role="assistant", content=delta)]
        return True

    def apply_frame(self, frame: Frame) -> bool:
        if frame.is_terminator:
            self.mark_done()
            return False
        delta = frame.delta
        if delta is None:
            return False
        return self.apply_delta(delta)

    def mark_done(self) -> None:
        self._terminated = True
        if self.status is ChatStatus.STREAMING:
            self.status = ChatStatus.DONE

    def fail(self, message: str) -> None:
        """End the turn with an error, dropping any partial assistant text."""
        self._messages = self._messages[: self._turn_start]
        self._terminated = True
        self.status = ChatStatus.ERROR
        self.error = message

    def clear(self) -> None:
        self._messages = []
        self._turn_start = 0
        self._terminated = False
        self.status = ChatStatus.IDLE
        self.error = None


@dataclass
class ChatTurn:
    status: ChatStatus
    content: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ChatStatus.DONE


class ChatSession:
    """Sends a conversation to the assistant route and streams the reply in."""

    def __init__(
        self,
        client: "TrendScopeClient",
        *,
        platform_context: PlatformContext | None = None,
        on_update: Callable[[list[ChatMessage]], None] | None = None,
    ):
        self._client = client
        self.platform_context = platform_context
        self.accumulator = ChatAccumulator()
        self._on_update = on_update

    @property
    def messages(self) -> list[ChatMessage]:
        return self.accumulator.snapshot()

    def clear(self) -> None:
        self.accumulator.clear()
        self._notify()

    def _notify(self) -> None:
        if self._on_update is not None:
            self._on_update(self.accumulator.snapshot())

    async def send(self, content: str) -> ChatTurn | None:
        text = content.strip()
        if not text or self.accumulator.is_streaming:
            return None

        self.accumulator.append_user_message(text)
        conversation = self.accumulator.snapshot()

        try:
            self._notify()
            async with (
                aclosing(self._client.stream_chat(conversation, self.platform_context)) as chunks,
                aclosing(iter_frames(chunks, FrameDecoder())) as frames,
            ):
                async for frame in frames:
                    if isinstance(frame.payload, dict) and frame.payload.get("error"):
                        raise TransportError(str(frame.payload["error"]))
                    if self.accumulator.apply_frame(frame):
                        self._notify()
                    if self.accumulator.terminated:
                        break
            self.accumulator.mark_done()
        except TransportError as exc:
            log_service.log_event(
                event_type="chat_stream_error",
                message="Chat stream failed",
                level="WARNING",
                error=exc.message,
                status_code=exc.status_code,
            )
            self.accumulator.fail(exc.message)
        except BaseException as exc:
            # Any other exit, cancellation included, still ends the turn. No notify: the view may be gone.
            if self.accumulator.is_streaming:
                cancelled = isinstance(exc, asyncio.CancelledError)
                self.accumulator.fail(CANCELLED_MESSAGE if cancelled else str(exc) or INTERRUPTED_MESSAGE)
                log_service.log_event(
                    event_type="chat_stream_interrupted",
                    message="Chat turn ended without a reply",
                    error=self.accumulator.error,
                    level="WARNING",
                )
            raise
        self._notify()

        last = self.accumulator.snapshot()[-1]
        reply = last.content if last.role == "assistant" else ""
        return ChatTurn(
            status=self.accumulator.status,
            content=reply,
            error=self.accumulator.error,
        )
