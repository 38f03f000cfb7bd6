"""FastAPI application exposing the knowledge engine."""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ....composition import container
from ....config import settings, setup_logging
from ....core.domain.exceptions import OutreachRAGError
from ...common.exception_handler import (
    format_exception_json,
    get_http_status_code,
    log_exception,
)
from .routers import health, knowledge

setup_logging(settings.log_level, json_format=settings.log_json)
logger = logging.getLogger(__name__)

# Determine if we're in debug mode (shows full stack traces)
DEBUG_MODE = os.getenv("DEBUG", "false").lower() == "true"

app = FastAPI(
    title="Outreach RAG API",
    description=(
        "Knowledge base retrieval for sales outreach and support inbox drafting. "
        "Semantic search over internal product documents."
    ),
    version=health.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Dashboard dev servers
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(knowledge.router)


# =============================================================================
# Global Exception Handlers
# =============================================================================


@app.exception_handler(OutreachRAGError)
async def rag_error_handler(request: Request, exc: OutreachRAGError) -> JSONResponse:
    """Handle all OutreachRAGError exceptions with structured JSON response."""
    log_exception(
        exc,
        level=logging.WARNING if get_http_status_code(exc) < 500 else logging.ERROR,
        extra_context={"path": str(request.url.path), "method": request.method},
    )

    return JSONResponse(
        status_code=get_http_status_code(exc),
        content=exc.to_dict(include_trace=DEBUG_MODE),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all unhandled exceptions with structured JSON response."""
    log_exception(exc, extra_context={"path": str(request.url.path), "method": request.method})

    return JSONResponse(
        status_code=get_http_status_code(exc),
        content=format_exception_json(exc, include_trace=DEBUG_MODE),
    )


# =============================================================================
# Lifecycle Events
# =============================================================================


@app.on_event("startup")
async def startup_event():
    """Load the knowledge base before serving requests."""
    logger.info("Outreach RAG API starting up...")
    try:
        container.startup()
    except OutreachRAGError as exc:
        # Requests will retry initialization and surface the error
        log_exception(exc, extra_context={"phase": "startup"})
    logger.info("Debug mode: %s", "ENABLED" if DEBUG_MODE else "DISABLED")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup resources on shutdown."""
    logger.info("Outreach RAG API shutting down...")


__all__ = ["app"]
