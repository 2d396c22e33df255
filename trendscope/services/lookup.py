from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from trendscope.models.schemas import VideoResult
from trendscope.services import logger as log_service

VideoFetcher = Callable[[str], Awaitable[VideoResult | None]]


class AuxiliaryLookup:
    """Runs the explainer-video lookup beside the main analysis.

    Its loading flag and result live apart from the pipeline state, and a
    failure here only leaves ``result`` as ``None``.
    """

    def __init__(self, fetch: VideoFetcher, *, on_change: Callable[[], None] | None = None):
        self._fetch = fetch
        self._on_change = on_change
        self._generation = 0
        self._task: asyncio.Task | None = None
        self.loading = False
        self.result: VideoResult | None = None

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def reset(self) -> None:
        """Forget the current lookup; a still-running request is cancelled."""
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self.loading = False
        self.result = None

    def launch(self, query: str) -> asyncio.Task:
        self.reset()
        generation = self._generation
        self.loading = True
        self._changed()
        self._task = asyncio.get_running_loop().create_task(self._run(query, generation))
        return self._task

    async def _run(self, query: str, generation: int) -> None:
        result: VideoResult | None = None
        try:
            result = await self._fetch(query)
        except Exception as e:
            log_service.log_event(
                event_type="video_lookup_error",
                message="Video lookup failed, continuing without it",
                level="WARNING",
                error=str(e),
                query=query[:100],
            )
        if generation != self._generation:
            return
        self.result = result
        self.loading = False
        self._changed()

    async def wait(self) -> VideoResult | None:
        """Wait for the current lookup, if any, and return its result."""
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)
        return self.result
