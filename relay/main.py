from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pythonjsonlogger import jsonlogger
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import routes_generate, routes_meta, routes_usage
from .config import Settings, settings
from .errors import InternalError, RelayError, ValidationError
from .generation import GenerationOrchestrator, OpenAIProvider
from .rate_limit import limiter, rate_limit_exceeded_handler
from .usage import AdmissionGate, UsageResetScheduler, UsageStore

logger = logging.getLogger("relay")

# ---------------------------------------------------------------------------
# Structured logging
# ---------------------------------------------------------------------------

def _configure_logging() -> None:
    """Configure structured JSON logging when log_format=json (default)."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    if settings.log_format == "json":
        handler.setFormatter(
            jsonlogger.JsonFormatter(
                "%(asctime)s %(name)s %(levelname)s %(message)s",
                rename_fields={"asctime": "timestamp", "levelname": "level"},
            )
        )
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)

_configure_logging()


# ---------------------------------------------------------------------------
# Usage core + generation collaborators
# ---------------------------------------------------------------------------

def _init_state(app: FastAPI, cfg: Settings) -> None:
    store = UsageStore(window=cfg.usage_window)
    app.state.usage_store = store
    app.state.gate = AdmissionGate(store, limit=cfg.free_tier_limit)
    app.state.reset_scheduler = UsageResetScheduler(store, cfg.usage_reset_interval_seconds)
    app.state.orchestrator = GenerationOrchestrator(OpenAIProvider.from_settings(cfg))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    scheduler: UsageResetScheduler = app.state.reset_scheduler
    scheduler.start()
    logger.info("%s running on port %d", settings.service_name, settings.port)
    logger.info("Environment: %s", settings.environment)
    try:
        yield
    finally:
        await scheduler.stop()


app = FastAPI(
    title="Supra AI Relay",
    version=settings.service_version,
    description=(
        "Generates Supra Move smart contracts from natural-language prompts "
        "through a hosted LLM, with a per-user free-tier usage quota."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)
_init_state(app, settings)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(routes_meta.router)
app.include_router(routes_generate.router)
app.include_router(routes_usage.router)


# ---------------------------------------------------------------------------
# Error rendering
# ---------------------------------------------------------------------------

@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = {str(part) for err in exc.errors() for part in err.get("loc", ())}
    if "prompt" in fields:
        error = ValidationError("Missing or invalid prompt")
    elif "userId" in fields:
        error = ValidationError("Missing user ID")
    else:
        error = ValidationError("Invalid request body")
    return JSONResponse(status_code=error.status_code, content=error.to_body())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        body = {"error": "Endpoint not found", "type": "not_found"}
    else:
        body = {"error": str(exc.detail), "type": "http_error"}
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error", exc_info=exc)
    error = InternalError("Internal server error")
    return JSONResponse(status_code=error.status_code, content=error.to_body())


def run() -> None:
    import uvicorn

    uvicorn.run("relay.main:app", host="0.0.0.0", port=settings.port)
