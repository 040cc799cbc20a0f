"""Notification inbox endpoints for GConnect v1."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from config.settings import settings
from gconnect.middleware.auth import get_storage, require_user
from gconnect.models.notification import Notification
from gconnect.models.user_profile import User
from gconnect.services.storage import InMemoryStorage

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


class NotificationListResponse(BaseModel):
    notifications: list[Notification]
    unread: int


class MarkReadResponse(BaseModel):
    success: bool
    updated: int


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    user: User = Depends(require_user),
    store: InMemoryStorage = Depends(get_storage),
) -> NotificationListResponse:
    """The user's most recent notifications, newest first."""
    notifications = store.get_user_notifications(user.user_id, settings.notification_limit)
    return NotificationListResponse(
        notifications=notifications,
        unread=sum(1 for n in notifications if not n.is_read),
    )


@router.put("/read-all", response_model=MarkReadResponse)
async def mark_all_read(
    user: User = Depends(require_user),
    store: InMemoryStorage = Depends(get_storage),
) -> MarkReadResponse:
    updated = store.mark_all_notifications_read(user.user_id)
    logger.info("api.notifications.read_all", updated=updated)
    return MarkReadResponse(success=True, updated=updated)


@router.put("/{notification_id}/read", response_model=MarkReadResponse)
async def mark_read(
    notification_id: int,
    user: User = Depends(require_user),
    store: InMemoryStorage = Depends(get_storage),
) -> MarkReadResponse:
    notification = store.get_notification(notification_id)
    if notification is None or notification.user_id != user.user_id:
        raise HTTPException(status_code=404, detail="Notification not found")

    updated = 0 if notification.is_read else 1
    store.mark_notification_read(notification_id)
    return MarkReadResponse(success=True, updated=updated)
