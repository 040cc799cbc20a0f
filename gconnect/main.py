"""GConnect FastAPI application entry point.

Creates the FastAPI app, configures middleware, includes routers, and
manages the lifecycle of the backend services (storage, seed data and
the optional Gemini chat assistant).
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from config.languages import get_ui_locales
from config.settings import settings
from gconnect.api.router import api_router
from gconnect.middleware.privacy import RequestLoggingMiddleware

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Structured logging configuration
# ---------------------------------------------------------------------------


def _configure_logging() -> None:
    """Set up structlog with JSON or console rendering based on settings."""
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.log_level.upper()),
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Application lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage startup and shutdown of the GConnect services.

    On startup:
      1. Create the in-memory store
      2. Load the bundled scheme catalog (when ``seed_schemes`` is on)
      3. Create the Gemini chat assistant (when a GCP project is set)
      4. Store everything on ``app.state``
    """
    _configure_logging()
    logger.info("app.startup", env=settings.env, gcp_project=settings.gcp_project_id)

    app.state.start_time = time.time()

    # -- 1. Storage ---------------------------------------------------------
    from gconnect.services.storage import InMemoryStorage

    storage = InMemoryStorage()
    app.state.storage = storage

    # -- 2. Seed data -------------------------------------------------------
    if settings.seed_schemes:
        from gconnect.data.seed import seed_storage

        try:
            seeded = seed_storage(storage)
            logger.info("app.schemes_seeded", count=len(seeded))
        except Exception:
            logger.warning("app.scheme_seed_failed", exc_info=True)

    # -- 3. Chat assistant (Vertex AI / Gemini) -----------------------------
    from gconnect.services.llm import ChatAssistant

    assistant: ChatAssistant | None = None
    if settings.gcp_project_id:
        assistant = ChatAssistant(
            project_id=settings.gcp_project_id,
            region=settings.vertex_ai_location,
            model_name=settings.vertex_ai_model,
        )
        logger.info("app.chat_assistant_initialised", model=settings.vertex_ai_model)
    else:
        logger.warning("app.chat_assistant_disabled", note="GCP_PROJECT_ID not set")
    app.state.chat_assistant = assistant

    logger.info("app.startup_complete")

    yield

    logger.info("app.shutdown_complete")


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="GConnect API",
    description=(
        "GConnect (जीकनेक्ट) -- discover Indian government welfare schemes, "
        "check eligibility and track applications, in English and Hindi."
    ),
    version="0.1.0",
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

# -- CORS middleware --------------------------------------------------------
# allow_credentials=True must not be combined with allow_origins=["*"].
if settings.is_production:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["Content-Type", "Authorization"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:5000", "http://127.0.0.1:5000"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "OPTIONS", "HEAD"],
        allow_headers=["Content-Type", "Accept", "Authorization"],
    )

# -- Custom middleware ------------------------------------------------------
app.add_middleware(RequestLoggingMiddleware)

# -- Include routers -------------------------------------------------------
app.include_router(api_router)


# -- Error handling --------------------------------------------------------


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    logger.error(
        "app.unhandled_exception",
        method=request.method,
        path=request.url.path,
        exc_info=exc,
    )
    return ORJSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/api", response_class=ORJSONResponse)
async def api_info() -> dict:
    """API information endpoint."""
    return {
        "name": "GConnect API",
        "description": "Government scheme discovery and eligibility assistant",
        "version": app.version,
        "docs": "/docs",
        "health": "/api/v1/health",
        "languages_supported": get_ui_locales(),
        "endpoints": {
            "auth": "/api/v1/auth",
            "profile": "/api/v1/profile",
            "schemes": "/api/v1/schemes",
            "applications": "/api/v1/applications",
            "notifications": "/api/v1/notifications",
            "chat": "/api/v1/chat",
            "dashboard": "/api/v1/dashboard/stats",
            "health": "/api/v1/health",
        },
    }


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "gconnect.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
