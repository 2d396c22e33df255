from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class FrameKind(str, Enum):
    COMMENT = "comment"
    BLANK = "blank"
    DONE = "done"
    DATA = "data"


@dataclass
class Frame:
    """One line-unit of a server-sent-event stream.

    Only ``DATA`` and ``DONE`` frames leave the decoder; comments and blank
    lines are classified and dropped.
    """

    kind: FrameKind
    payload: Any = None
    raw: str = field(default="", repr=False)

    @property
    def is_terminator(self) -> bool:
        return self.kind is FrameKind.DONE

    @property
    def delta(self) -> str | None:
        """``choices[0].delta.content`` of a chat-completion chunk, if present."""
        if self.kind is not FrameKind.DATA:
            return None
        return extract_delta(self.payload)


def extract_delta(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    if isinstance(content, str) and content:
        return content
    return None
