"""Dashboard counters for GConnect v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from config.settings import settings
from gconnect.middleware.auth import get_storage, require_user
from gconnect.models.user_profile import User
from gconnect.services.storage import InMemoryStorage

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class DashboardStatsResponse(BaseModel):
    total_applications: int
    approved_applications: int
    pending_applications: int
    upcoming_deadlines: int
    eligible_schemes: int
    profile_completion: int


@router.get("/stats", response_model=DashboardStatsResponse)
async def dashboard_stats(
    user: User = Depends(require_user),
    store: InMemoryStorage = Depends(get_storage),
) -> DashboardStatsResponse:
    """Application counts, deadlines this week and eligible scheme count."""
    stats = store.get_dashboard_stats(
        user.user_id,
        window_days=settings.deadline_window_days,
    )
    return DashboardStatsResponse(**stats, profile_completion=user.profile_completion)
