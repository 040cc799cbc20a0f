"""Scheme catalog endpoints for GConnect v1.

Provides listing/search, personal recommendations with a match
percentage, scheme detail and a per-scheme eligibility check.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from config.settings import settings
from gconnect.middleware.auth import get_storage, optional_user, require_user
from gconnect.models.scheme import SchemeCategory, SchemeRecord
from gconnect.models.user_profile import User
from gconnect.services.eligibility import (
    MatchResult,
    check_eligibility,
    recommend_with_scores,
)
from gconnect.services.storage import InMemoryStorage

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

router = APIRouter(prefix="/schemes", tags=["schemes"])


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class SchemeListItem(BaseModel):
    """A scheme, plus the caller's verdict when they are signed in."""

    scheme: SchemeRecord
    eligibility: MatchResult | None = None


class SchemeListResponse(BaseModel):
    schemes: list[SchemeListItem]
    total: int


class RecommendedScheme(BaseModel):
    scheme: SchemeRecord
    match_percentage: int
    reasons: list[str]


class RecommendedResponse(BaseModel):
    schemes: list[RecommendedScheme]
    total: int


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=SchemeListResponse)
async def list_schemes(
    search: str | None = Query(default=None, max_length=200, description="Text to look for"),
    category: SchemeCategory | None = Query(default=None, description="Filter by category"),
    user: User | None = Depends(optional_user),
    store: InMemoryStorage = Depends(get_storage),
) -> SchemeListResponse:
    """List active schemes, newest first.

    ``search`` matches the English or Hindi name, the description and the
    category, ignoring case.
    """
    schemes = store.search_schemes(search, category)
    profile = user.to_profile() if user is not None else None

    items = [
        SchemeListItem(
            scheme=scheme,
            eligibility=check_eligibility(profile, scheme) if profile is not None else None,
        )
        for scheme in schemes
    ]
    logger.info(
        "api.schemes.list",
        search=bool(search),
        category=category.value if category else None,
        total=len(items),
    )
    return SchemeListResponse(schemes=items, total=len(items))


@router.get("/recommended", response_model=RecommendedResponse)
async def recommended_schemes(
    user: User = Depends(require_user),
    store: InMemoryStorage = Depends(get_storage),
) -> RecommendedResponse:
    """Schemes the current user is not excluded from, with a match score."""
    scored = recommend_with_scores(
        user.to_profile(),
        store.get_all_schemes(),
        settings.recommendation_limit,
    )
    items = [
        RecommendedScheme(
            scheme=scheme,
            match_percentage=verdict.match_percentage,
            reasons=verdict.reasons,
        )
        for scheme, verdict in scored
    ]
    return RecommendedResponse(schemes=items, total=len(items))


@router.get("/{scheme_id}", response_model=SchemeRecord)
async def get_scheme(
    scheme_id: int,
    store: InMemoryStorage = Depends(get_storage),
) -> SchemeRecord:
    scheme = store.get_scheme(scheme_id)
    if scheme is None:
        raise HTTPException(status_code=404, detail="Scheme not found")
    return scheme


@router.get("/{scheme_id}/eligibility", response_model=MatchResult)
async def scheme_eligibility(
    scheme_id: int,
    user: User = Depends(require_user),
    store: InMemoryStorage = Depends(get_storage),
) -> MatchResult:
    """Check the current user's profile against one scheme."""
    scheme = store.get_scheme(scheme_id)
    if scheme is None:
        raise HTTPException(status_code=404, detail="Scheme not found")

    result = check_eligibility(user.to_profile(), scheme)
    logger.info(
        "api.schemes.eligibility",
        scheme_id=scheme_id,
        eligible=result.eligible,
    )
    return result
