from __future__ import annotations

from fastapi import Header, HTTPException
from fastapi.responses import JSONResponse

from trendscope.config import settings
from trendscope.errors import TransportError

PASSTHROUGH_STATUS_CODES = {429, 402}


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def transport_error_response(exc: TransportError) -> JSONResponse:
    """Keep rate-limit and credit statuses; everything else becomes a 500."""
    status = exc.status_code if exc.status_code in PASSTHROUGH_STATUS_CODES else 500
    return error_response(exc.message, status)


async def verify_api_key(authorization: str | None = Header(default=None)) -> None:
    """Require ``Authorization: Bearer <api_key>`` when an API key is configured."""
    if not settings.api_key:
        return
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or token.strip() != settings.api_key:
        raise HTTPException(status_code=401, detail="Unauthorized")
