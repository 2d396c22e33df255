"""Error taxonomy shared by the server routes and the client-side core."""
from __future__ import annotations


class TrendScopeError(Exception):
    """Base error carrying a human-readable message."""

    default_message = "Unexpected error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class TransportError(TrendScopeError):
    """Non-2xx response, missing body, or network failure."""

    default_message = "stream unavailable"

    def __init__(self, message: str | None = None, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(TrendScopeError):
    """A structured response that must be JSON could not be decoded."""

    default_message = "Failed to parse analysis results"

    def __init__(self, message: str | None = None, *, raw: str = ""):
        super().__init__(message)
        self.raw = raw[:500]


class ConfigurationError(TrendScopeError):
    """A backend credential required for the request is missing."""

    default_message = "AI service not configured"
