"""
rate_limit.py — Per-IP request rate limiting for the generate endpoint
======================================================================
Uses slowapi as a coarse guard in front of the per-user usage quota:
an IP over its hourly budget is rejected before the admission gate runs.
"""
from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import settings

limiter = Limiter(key_func=get_remote_address)


def generate_rate_limit() -> str:
    """Read per request so the limit follows the live settings object."""
    return settings.generate_rate_limit


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded. Please try again later.",
            "type": "rate_limit",
        },
    )
