from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from gconnect.models.enums import NotificationType


class Notification(BaseModel):
    notification_id: int
    user_id: int
    title: str
    title_hindi: str | None = None
    message: str
    message_hindi: str | None = None
    notification_type: NotificationType
    is_read: bool = False
    metadata: dict[str, Any] | None = None  # e.g. {"scheme_id": 3}
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
