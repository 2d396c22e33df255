"""Incremental decoder for ``data:``-framed event streams.

Chunks arrive at arbitrary byte boundaries. The decoder carries incomplete
multi-byte characters and incomplete lines between calls and never raises on
bad input: unparseable payloads are retried once and then dropped.
"""
from __future__ import annotations

import codecs
import json
from typing import AsyncIterable, AsyncIterator

from loguru import logger

from trendscope.models.frames import DATA_PREFIX, DONE_SENTINEL, Frame, FrameKind

_MALFORMED = object()


def classify_line(line: str) -> Frame | None | object:
    """Classify one line (without its newline).

    Returns a ``Frame`` for data and terminator lines, ``None`` for lines to
    ignore, and ``_MALFORMED`` when a data payload is not valid JSON.
    """
    if line.endswith("\r"):
        line = line[:-1]
    if line.startswith(":") or not line.strip():
        return None
    if not line.startswith(DATA_PREFIX):
        return None

    body = line[len(DATA_PREFIX):].strip()
    if body == DONE_SENTINEL:
        return Frame(kind=FrameKind.DONE, raw=line)
    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        return _MALFORMED
    return Frame(kind=FrameKind.DATA, payload=payload, raw=line)


class FrameDecoder:
    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self._retry_line: str | None = None
        self.frames_dropped = 0

    @property
    def pending(self) -> str:
        """Text carried over to the next ``feed`` call."""
        return self._buffer

    def _decode(self, chunk: bytes | str, *, final: bool = False) -> str:
        if isinstance(chunk, str):
            return chunk
        return self._decoder.decode(chunk, final=final)

    def feed(self, chunk: bytes | str) -> list[Frame]:
        self._buffer += self._decode(chunk)
        frames: list[Frame] = []

        while True:
            newline = self._buffer.find("\n")
            if newline == -1:
                break
            line = self._buffer[:newline]
            self._buffer = self._buffer[newline + 1:]

            result = classify_line(line)
            if result is _MALFORMED:
                if self._retry_line == line:
                    # Second failure on the same line: more bytes did not help.
                    self._retry_line = None
                    self.frames_dropped += 1
                    logger.debug(f"Dropping malformed stream frame: {line[:200]!r}")
                    continue
                self._retry_line = line
                self._buffer = line + "\n" + self._buffer
                break

            if line == self._retry_line:
                self._retry_line = None
            if result is not None:
                frames.append(result)

        return frames

    def flush(self) -> list[Frame]:
        """Process whatever is left once the source is exhausted."""
        self._buffer += self._decoder.decode(b"", final=True)
        remaining, self._buffer = self._buffer, ""
        self._retry_line = None

        frames: list[Frame] = []
        for line in remaining.split("\n"):
            result = classify_line(line)
            if result is _MALFORMED:
                self.frames_dropped += 1
                logger.debug(f"Dropping incomplete stream frame at end of input: {line[:200]!r}")
                continue
            if result is not None:
                frames.append(result)
        return frames


async def iter_frames(
    chunks: AsyncIterable[bytes | str],
    decoder: FrameDecoder | None = None,
) -> AsyncIterator[Frame]:
    """Yield frames from an async chunk source in arrival order."""
    decoder = decoder or FrameDecoder()
    async for chunk in chunks:
        for frame in decoder.feed(chunk):
            yield frame
    for frame in decoder.flush():
        yield frame
