"""ResearchMind session: simulated stage progress around one real request.

Two pieces of state are kept apart: the simulated stage index, advanced by a
fixed-interval timer, and the real outcome, set once the analysis request
resolves. The outcome always wins: it cancels the timer and the visible stage
snaps to ``done`` or ``error``.

Every ``start()`` takes a new session token. Timer ticks, request
completions, and the deferred clear after ``close()`` carry the token they
were scheduled with and do nothing once it is stale.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Union

from loguru import logger

from trendscope.config import settings
from trendscope.errors import TrendScopeError
from trendscope.models.analysis import AnalysisResult
from trendscope.models.content import ContentItem
from trendscope.models.schemas import PaperInput, VideoResult
from trendscope.services import logger as log_service
from trendscope.services.lookup import AuxiliaryLookup, VideoFetcher
from trendscope.services.normalizer import to_analysis_result

Analyzer = Callable[[PaperInput, list[PaperInput]], Awaitable[dict[str, Any]]]
PaperLike = Union[ContentItem, PaperInput]


class PipelineStage(str, Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    RANKING = "ranking"
    EXTRACTING = "extracting"
    CONTRADICTIONS = "contradictions"
    DEVILS_ADVOCATE = "devils_advocate"
    CONFIDENCE = "confidence"
    REPORT = "report"
    DONE = "done"
    ERROR = "error"


SIMULATED_STAGES: tuple[PipelineStage, ...] = (
    PipelineStage.SEARCHING,
    PipelineStage.RANKING,
    PipelineStage.EXTRACTING,
    PipelineStage.CONTRADICTIONS,
    PipelineStage.DEVILS_ADVOCATE,
    PipelineStage.CONFIDENCE,
    PipelineStage.REPORT,
)

STAGE_LABELS = {
    PipelineStage.SEARCHING: "Searching Papers",
    PipelineStage.RANKING: "Ranking Top 5",
    PipelineStage.EXTRACTING: "Extracting Claims",
    PipelineStage.CONTRADICTIONS: "Detecting Contradictions",
    PipelineStage.DEVILS_ADVOCATE: "Devil Advocate Review",
    PipelineStage.CONFIDENCE: "Generating Confidence Score",
    PipelineStage.REPORT: "Creating Report",
}


def _as_paper(item: PaperLike) -> PaperInput:
    if isinstance(item, PaperInput):
        return item
    return PaperInput.from_content(item)


def select_related(
    subject: ContentItem,
    pool: list[ContentItem],
    limit: int | None = None,
) -> list[ContentItem]:
    """Other papers, or items sharing a tag with ``subject``, in pool order."""
    limit = settings.research_max_related_papers if limit is None else limit
    subject_tags = set(subject.tags)
    related = [
        item
        for item in pool
        if item.id != subject.id
        and (item.content_type == "paper" or any(tag in subject_tags for tag in item.tags))
    ]
    return related[:limit]


@dataclass(frozen=True)
class SessionSnapshot:
    token: int
    is_open: bool
    stage: PipelineStage
    subject: PaperInput | None
    candidates: list[PaperInput] = field(default_factory=list)
    result: AnalysisResult | None = None
    error: str | None = None
    video: VideoResult | None = None
    video_loading: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.stage in (PipelineStage.DONE, PipelineStage.ERROR)


class ResearchSession:
    def __init__(
        self,
        analyze: Analyzer,
        lookup_video: VideoFetcher,
        *,
        stage_interval: float | None = None,
        close_grace: float | None = None,
        max_candidates: int | None = None,
    ):
        self._analyze = analyze
        self.stage_interval = settings.pipeline_stage_interval_s if stage_interval is None else stage_interval
        self.close_grace = settings.pipeline_close_grace_s if close_grace is None else close_grace
        self.max_candidates = settings.research_max_related_papers if max_candidates is None else max_candidates

        self._token = 0
        self._stage_index = -1
        self._outcome: PipelineStage | None = None
        self._timer: asyncio.Task | None = None
        self._primary: asyncio.Task | None = None
        self._listeners: list[Callable[[SessionSnapshot], None]] = []

        self.is_open = False
        self.subject: PaperInput | None = None
        self.candidates: list[PaperInput] = []
        self.result: AnalysisResult | None = None
        self.error: str | None = None
        self.lookup = AuxiliaryLookup(lookup_video, on_change=self._notify)

    @classmethod
    def from_client(cls, client: Any, **kwargs: Any) -> "ResearchSession":
        """Bind a session to a ``TrendScopeClient``."""
        return cls(client.analyze, client.lookup_video, **kwargs)

    # --- observable state ---

    @property
    def token(self) -> int:
        return self._token

    @property
    def stage(self) -> PipelineStage:
        if self._outcome is not None:
            return self._outcome
        if self._stage_index < 0:
            return PipelineStage.IDLE
        return SIMULATED_STAGES[self._stage_index]

    @property
    def stage_label(self) -> str:
        return STAGE_LABELS.get(self.stage, self.stage.value)

    @property
    def timer_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            token=self._token,
            is_open=self.is_open,
            stage=self.stage,
            subject=self.subject,
            candidates=list(self.candidates),
            result=self.result,
            error=self.error,
            video=self.lookup.result,
            video_loading=self.lookup.loading,
        )

    def subscribe(self, listener: Callable[[SessionSnapshot], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def _log_stage(self, status: str, **detail: Any) -> None:
        log_service.log_stage(
            session_token=self._token,
            stage=self.stage.value,
            status=status,
            paper_id=self.subject.id if self.subject else None,
            **detail,
        )

    # --- lifecycle ---

    def start(self, subject: PaperLike, candidates: list[PaperLike]) -> asyncio.Task:
        """Open a new session and launch the analysis and video lookup.

        Returns the task of the analysis request; awaiting it never raises.
        """
        loop = asyncio.get_running_loop()
        self.cancel_timer()
        self._token += 1
        token = self._token

        self.subject = _as_paper(subject)
        self.candidates = [_as_paper(c) for c in candidates[: self.max_candidates]]
        self.result = None
        self.error = None
        self.is_open = True
        self._outcome = None
        self._stage_index = 0
        self._log_stage("running", candidates=len(self.candidates))
        self._notify()

        self._timer = loop.create_task(self._advance_stages(token))
        self._primary = loop.create_task(self._run_primary(token, self.subject, list(self.candidates)))
        self.lookup.launch(self.subject.title)
        return self._primary

    async def analyze(self, paper: ContentItem, pool: list[ContentItem]) -> SessionSnapshot:
        """Start a session for ``paper`` against related items from ``pool`` and wait for it."""
        await self.start(paper, select_related(paper, pool, self.max_candidates))
        return self.snapshot()

    async def _advance_stages(self, token: int) -> None:
        while self._stage_index < len(SIMULATED_STAGES) - 1:
            await asyncio.sleep(self.stage_interval)
            if token != self._token or self._outcome is not None:
                return
            self._stage_index += 1
            self._log_stage("running")
            self._notify()

    async def _run_primary(self, token: int, subject: PaperInput, candidates: list[PaperInput]) -> None:
        try:
            payload = await self._analyze(subject, candidates)
            result = to_analysis_result(payload)
        except TrendScopeError as exc:
            self._resolve(token, error=exc.message)
        except Exception as exc:
            logger.exception(f"ResearchMind analysis crashed: {exc}")
            self._resolve(token, error=str(exc) or "Unexpected error")
        else:
            self._resolve(token, result=result)

    def _resolve(
        self,
        token: int,
        *,
        result: AnalysisResult | None = None,
        error: str | None = None,
    ) -> None:
        if token != self._token:
            return
        self.cancel_timer()
        if not self.is_open:
            return
        self.result = result
        self.error = error
        self._outcome = PipelineStage.ERROR if error is not None else PipelineStage.DONE
        if error is not None:
            self._log_stage("failed", error=error)
        else:
            self._log_stage("completed")
        self._notify()

    def cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def close(self) -> None:
        """Hide the session now and clear it after the grace delay."""
        self.is_open = False
        self.cancel_timer()
        self._notify()
        token = self._token
        asyncio.get_running_loop().call_later(self.close_grace, self._clear_if_current, token)

    def _clear_if_current(self, token: int) -> None:
        if token != self._token or self.is_open:
            return
        self._stage_index = -1
        self._outcome = None
        self.result = None
        self.error = None
        self.subject = None
        self.candidates = []
        self.lookup.reset()
        self._notify()

    async def dispose(self) -> None:
        """Invalidate the session and cancel everything still in flight."""
        self._token += 1
        self.is_open = False
        self.cancel_timer()
        self.lookup.reset()
        if self._primary is not None and not self._primary.done():
            self._primary.cancel()
            await asyncio.gather(self._primary, return_exceptions=True)
        self._primary = None
