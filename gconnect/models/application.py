from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from gconnect.models.enums import ApplicationStatus
from gconnect.models.scheme import SchemeRecord


class ApplicationCreate(BaseModel):
    scheme_id: int
    application_ref: str | None = Field(default=None, max_length=50)  # External portal ID
    submitted_at: datetime | None = None
    notes: str | None = None
    documents: dict[str, Any] | None = None


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    notes: str | None = None


class Application(BaseModel):
    """A user's tracked application for a scheme."""

    application_id: int
    user_id: int
    scheme_id: int
    status: ApplicationStatus = ApplicationStatus.PENDING
    application_ref: str | None = None
    submitted_at: datetime | None = None
    notes: str | None = None
    documents: dict[str, Any] | None = None
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ApplicationWithScheme(Application):
    scheme: SchemeRecord
