"""Main API router combining all v1 route modules.

Aggregates all routers under the ``/api/v1`` prefix so the
FastAPI application only needs to include a single router.
"""

from __future__ import annotations

from fastapi import APIRouter

from gconnect.api.v1 import (
    applications,
    auth,
    chat,
    dashboard,
    health,
    notifications,
    profile,
    schemes,
)

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(auth.router)
api_router.include_router(profile.router)
api_router.include_router(schemes.router)
api_router.include_router(applications.router)
api_router.include_router(notifications.router)
api_router.include_router(chat.router)
api_router.include_router(dashboard.router)
api_router.include_router(health.router)
