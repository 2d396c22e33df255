"""Loguru setup and the structured log helpers used across TrendScope.

Helpers attach their fields with ``logger.bind`` so they land in
``record["extra"]``; the file sink writes them next to the message, the
console shows the message only.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from trendscope.config import settings

LOG_DIR = Path("logs")

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message} | {extra}"

# stdlib loggers that flood the console at INFO
NOISY_LOGGERS = (
    "uvicorn.access",
    "httpx",
    "httpcore",
    "openai._base_client",
    "sse_starlette.sse",
)


def configure_logging(log_dir: Optional[Path] = LOG_DIR) -> None:
    """(Re)install the sinks. ``log_dir=None`` keeps console output only."""
    logger.remove()
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=settings.app_log_level.upper(),
        colorize=True,
    )
    if log_dir is not None:
        log_dir.mkdir(exist_ok=True)
        logger.add(
            log_dir / "trendscope_{time:YYYY-MM-DD}.log",
            format=FILE_FORMAT,
            level="DEBUG",
            rotation="00:00",
            retention="7 days",
            compression="zip",
        )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(settings.noisy_log_level.upper())


configure_logging()


def log_llm_call(
    *,
    model: str,
    caller: str,
    status: str = "success",
    duration_ms: int = 0,
    input_tokens: int = 0,
    output_tokens: int = 0,
    error: Optional[str] = None,
) -> None:
    """One gateway request: completion, stream open, or failure."""
    bound = logger.bind(
        kind="gateway",
        model=model,
        caller=caller,
        status=status,
        duration_ms=duration_ms,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
    )
    if error:
        bound.error(f"Gateway call from {caller} ({model}) failed after {duration_ms}ms: {error}")
    elif status == "streaming":
        bound.info(f"Gateway stream opened for {caller} ({model})")
    else:
        bound.info(
            f"Gateway call from {caller} ({model}) took {duration_ms}ms, "
            f"{input_tokens}+{output_tokens} tokens"
        )


def log_stage(
    *,
    session_token: int,
    stage: str,
    status: str,
    paper_id: Optional[str] = None,
    **detail: Any,
) -> None:
    """A ResearchMind session entering a stage or resolving."""
    bound = logger.bind(
        kind="research_stage",
        session_token=session_token,
        stage=stage,
        status=status,
        paper_id=paper_id,
        **detail,
    )
    level = "WARNING" if status == "failed" else "INFO"
    bound.log(level, f"ResearchMind session {session_token} [{paper_id or '-'}]: {stage} ({status})")


def log_event(event_type: str, message: str, *, level: str = "INFO", **fields: Any) -> None:
    logger.bind(kind="event", event_type=event_type, **fields).log(level, f"{event_type}: {message}")
