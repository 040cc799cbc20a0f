"""User and profile models for GConnect.

``User`` is the stored account record.  ``UserProfile`` is the narrow,
read-only view of it that the eligibility engine works with: every
attribute is optional and an absent attribute never disqualifies.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field, computed_field

from gconnect.models.enums import Gender


class UserProfile(BaseModel):
    """Demographic/economic attributes used for scheme matching."""

    model_config = {"frozen": True}

    user_id: int | None = None
    age: int | None = Field(default=None, ge=0)
    gender: Gender | None = None
    income: int | None = Field(default=None, ge=0)  # Annual, in INR
    occupation: str | None = None
    state: str | None = None


class ProfileUpdate(BaseModel):
    """Fields a user may edit on their own profile."""

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    age: int | None = Field(default=None, ge=0, le=150)
    gender: Gender | None = None
    income: int | None = Field(default=None, ge=0)
    occupation: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=50)
    district: str | None = Field(default=None, max_length=50)


class UserCreate(ProfileUpdate):
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=255)
    password: str = Field(min_length=6)


class User(BaseModel):
    """A registered user as held by the profile store."""

    user_id: int
    email: str
    password_hash: str
    first_name: str
    last_name: str
    age: int | None = None
    gender: Gender | None = None
    income: int | None = None
    occupation: str | None = None
    state: str | None = None
    district: str | None = None
    is_profile_complete: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def profile_completion(self) -> int:
        """Percentage of the seven profile fields that are filled in."""
        fields = (
            self.first_name,
            self.last_name,
            self.age,
            self.gender,
            self.income,
            self.occupation,
            self.state,
        )
        filled = sum(1 for value in fields if value not in (None, ""))
        return round(filled / len(fields) * 100)

    def to_profile(self) -> UserProfile:
        """Project the account onto the attributes used for matching."""
        return UserProfile(
            user_id=self.user_id,
            age=self.age,
            gender=self.gender,
            income=self.income,
            occupation=self.occupation,
            state=self.state,
        )

    def public_dict(self) -> dict:
        """Serialise the user without the password hash."""
        return self.model_dump(mode="json", exclude={"password_hash"})
