from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field, computed_field, field_validator

from gconnect.models.enums import TargetGender


class SchemeCategory(StrEnum):
    __slots__ = ()

    EDUCATION = "education"
    HEALTH = "health"
    BUSINESS = "business"
    AGRICULTURE = "agriculture"
    EMPLOYMENT = "employment"
    SOCIAL = "social"
    HOUSING = "housing"
    OTHER = "other"


# Display fields that carry a ``<field>_hindi`` counterpart.
_LOCALIZED_FIELDS: frozenset[str] = frozenset({
    "name",
    "description",
    "eligibility",
    "benefits",
    "application_process",
})


class SchemeCreate(BaseModel):
    """Writable scheme fields, as accepted by the catalog."""

    name: str
    name_hindi: str | None = None
    description: str
    description_hindi: str | None = None
    eligibility: str
    eligibility_hindi: str | None = None
    benefits: str
    benefits_hindi: str | None = None
    application_process: str
    application_process_hindi: str | None = None
    official_link: str | None = None
    category: SchemeCategory = SchemeCategory.OTHER

    # -- Eligibility constraints (all optional, bounds inclusive) ------------
    min_age: int | None = Field(default=None, ge=0)
    max_age: int | None = Field(default=None, ge=0)
    min_income: int | None = Field(default=None, ge=0)
    max_income: int | None = Field(default=None, ge=0)
    target_gender: TargetGender | None = None
    target_states: list[str] = Field(default_factory=list)
    target_occupations: list[str] = Field(default_factory=list)

    application_deadline: datetime | None = None  # display only
    is_active: bool = True
    documents: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class SchemeRecord(SchemeCreate):
    """A scheme as stored in the catalog.

    Read-only input to the eligibility engine.  ``created_at`` drives the
    newest-first ordering of listings and recommendations.
    """

    model_config = {"frozen": True}

    scheme_id: int
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are taken as UTC, as for deadlines.
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_open_deadline(self) -> bool:
        """True when there is no deadline or it has not passed yet."""
        if self.application_deadline is None:
            return True
        deadline = self.application_deadline
        if deadline.tzinfo is None:
            deadline = deadline.replace(tzinfo=UTC)
        return deadline >= datetime.now(UTC)

    def localized(self, field: str, locale: str) -> str:
        """Return *field* in *locale*, falling back to the English text."""
        if field not in _LOCALIZED_FIELDS:
            raise ValueError(f"Field '{field}' has no translations")
        if locale == "hi":
            hindi = getattr(self, f"{field}_hindi")
            if hindi:
                return hindi
        return getattr(self, field)
