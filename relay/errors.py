"""
errors.py — Error taxonomy for the relay
========================================
Every failure the HTTP surface can report is a ``RelayError`` subclass
carrying its status code and the ``type`` string clients switch on.
Handlers registered in ``main.py`` render them as JSON.

Business outcomes inside the usage core (a denied admission) are values,
not exceptions; the route turns a denial into ``UsageLimitError``.
"""
from __future__ import annotations

from typing import Any, Dict


class RelayError(Exception):
    status_code: int = 500
    error_type: str = "internal_error"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message, "type": self.error_type}


class ValidationError(RelayError):
    """Missing or malformed request fields."""

    status_code = 400
    error_type = "validation_error"
    default_message = "Invalid request"


class UsageLimitError(RelayError):
    """The admission gate denied the request for this user."""

    status_code = 402
    error_type = "usage_limit"
    default_message = "Free tier limit reached. Please upgrade."

    def __init__(self, current_usage: int, limit: int, message: str | None = None) -> None:
        super().__init__(message)
        self.current_usage = current_usage
        self.limit = limit

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        body.update(currentUsage=self.current_usage, limit=self.limit)
        return body


class ProviderError(RelayError):
    """The upstream generation provider failed (network, non-2xx, bad payload, timeout)."""

    status_code = 503
    error_type = "service_error"
    default_message = "AI service temporarily unavailable."

    def __init__(self, detail: str, message: str | None = None) -> None:
        # ``detail`` is for logs only; clients always get the generic message.
        super().__init__(message)
        self.detail = detail

    def __str__(self) -> str:
        return self.detail


class InternalError(RelayError):
    status_code = 500
    error_type = "internal_error"
    default_message = "Generation failed. Please try again."
