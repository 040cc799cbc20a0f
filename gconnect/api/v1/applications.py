"""Application tracking endpoints for GConnect v1.

Users record applications they have filed on a scheme's own portal and
keep their status current here.  Every status change produces a
notification.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from gconnect.middleware.auth import get_storage, require_user
from gconnect.models.application import (
    ApplicationCreate,
    ApplicationStatusUpdate,
    ApplicationWithScheme,
)
from gconnect.models.user_profile import User
from gconnect.services.notifications import notify_status_change
from gconnect.services.storage import InMemoryStorage, NotFoundError

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])


class ApplicationListResponse(BaseModel):
    applications: list[ApplicationWithScheme]
    total: int


@router.get("", response_model=ApplicationListResponse)
async def list_applications(
    user: User = Depends(require_user),
    store: InMemoryStorage = Depends(get_storage),
) -> ApplicationListResponse:
    applications = store.get_user_applications(user.user_id)
    return ApplicationListResponse(applications=applications, total=len(applications))


@router.post("", response_model=ApplicationWithScheme, status_code=201)
async def create_application(
    body: ApplicationCreate,
    user: User = Depends(require_user),
    store: InMemoryStorage = Depends(get_storage),
) -> ApplicationWithScheme:
    """Start tracking an application; it begins in ``pending``."""
    try:
        application = store.create_application(user.user_id, body)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Scheme not found")

    logger.info(
        "api.applications.created",
        application_id=application.application_id,
        scheme_id=application.scheme_id,
    )
    joined = store.get_application(application.application_id)
    assert joined is not None  # noqa: S101
    return joined


@router.put("/{application_id}", response_model=ApplicationWithScheme)
async def update_application(
    application_id: int,
    body: ApplicationStatusUpdate,
    user: User = Depends(require_user),
    store: InMemoryStorage = Depends(get_storage),
) -> ApplicationWithScheme:
    """Change status and notes of one of the current user's applications.

    Another user's application is reported as not found.
    """
    existing = store.get_application(application_id)
    if existing is None or existing.user_id != user.user_id:
        raise HTTPException(status_code=404, detail="Application not found")

    updated = store.update_application_status(application_id, body.status, body.notes)
    notify_status_change(store, updated)

    logger.info(
        "api.applications.status_updated",
        application_id=application_id,
        status=body.status.value,
    )
    joined = store.get_application(application_id)
    assert joined is not None  # noqa: S101
    return joined
