"""Health check endpoints for GConnect API v1.

Liveness and readiness probes for container deployments.  Readiness
only looks at in-process state: the store exists and the scheme catalog
is loaded.
"""

from __future__ import annotations

import time

import structlog
from fastapi import APIRouter, Request
from pydantic import BaseModel

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class ReadinessResponse(BaseModel):
    """Readiness check response with individual component statuses."""

    status: str
    checks: dict[str, str]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Liveness probe; does not look at any component."""
    start_time: float = getattr(request.app.state, "start_time", time.time())
    return HealthResponse(
        status="healthy",
        version=request.app.version,
        uptime_seconds=round(time.time() - start_time, 2),
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request) -> ReadinessResponse:
    checks: dict[str, str] = {}
    all_ok = True

    store = getattr(request.app.state, "storage", None)
    if store is None:
        checks["storage"] = "not_initialised"
        all_ok = False
    else:
        checks["storage"] = "ok"
        active = len(store.get_active_schemes())
        if active:
            checks["schemes"] = f"ok ({active} active schemes)"
        else:
            checks["schemes"] = "no_data"
            all_ok = False

    # The assistant is optional; its absence does not fail readiness.
    if getattr(request.app.state, "chat_assistant", None) is not None:
        checks["chat_assistant"] = "ok"
    else:
        checks["chat_assistant"] = "not_configured"

    status = "ready" if all_ok else "degraded"
    logger.info("health.readiness_check", status=status, checks=checks)
    return ReadinessResponse(status=status, checks=checks)
