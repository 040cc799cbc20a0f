from __future__ import annotations

from enum import StrEnum


class Gender(StrEnum):
    __slots__ = ()

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class TargetGender(StrEnum):
    """Gender restriction on a scheme; ``ALL`` means unrestricted."""

    __slots__ = ()

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    ALL = "all"


class ApplicationStatus(StrEnum):
    __slots__ = ()

    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationType(StrEnum):
    __slots__ = ()

    SCHEME_MATCH = "scheme_match"
    DEADLINE_REMINDER = "deadline_reminder"
    STATUS_UPDATE = "status_update"


class ChatLanguage(StrEnum):
    __slots__ = ()

    EN = "en"
    HI = "hi"
    HINGLISH = "hinglish"
