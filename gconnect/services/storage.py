"""In-memory data store for users, schemes, applications, notifications
and chat history.

Implements the profile-store (``get_user``) and scheme-catalog
(``get_active_schemes`` / ``get_scheme``) contracts the eligibility
engine depends on, plus the bookkeeping the API needs.  State is
process-local; a deployment with several workers would swap this class
for a database-backed one with the same methods.

Reads hand out the stored pydantic models; writes replace them, so a
caller holding an old instance never sees it mutate.
"""

from __future__ import annotations

import itertools
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog

from gconnect.models.application import (
    Application,
    ApplicationCreate,
    ApplicationWithScheme,
)
from gconnect.models.chat import ChatMessage
from gconnect.models.enums import ApplicationStatus, ChatLanguage, NotificationType
from gconnect.models.notification import Notification
from gconnect.models.scheme import SchemeCategory, SchemeCreate, SchemeRecord
from gconnect.models.user_profile import ProfileUpdate, User
from gconnect.services.eligibility import RECOMMENDATION_LIMIT, get_recommended

logger = structlog.get_logger(__name__)


class StorageError(Exception):
    """Base class for store write failures."""


class DuplicateEmailError(StorageError):
    pass


class NotFoundError(StorageError):
    pass


class InMemoryStorage:
    """Dictionary-backed store with auto-incrementing integer ids."""

    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._schemes: dict[int, SchemeRecord] = {}
        self._applications: dict[int, Application] = {}
        self._notifications: dict[int, Notification] = {}
        self._chat_messages: dict[int, ChatMessage] = {}

        self._user_ids = itertools.count(1)
        self._scheme_ids = itertools.count(1)
        self._application_ids = itertools.count(1)
        self._notification_ids = itertools.count(1)
        self._chat_ids = itertools.count(1)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> User | None:
        wanted = email.strip().lower()
        for user in self._users.values():
            if user.email == wanted:
                return user
        return None

    def create_user(
        self,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        **profile: Any,
    ) -> User:
        if self.get_user_by_email(email) is not None:
            raise DuplicateEmailError(email)

        user = User(
            user_id=next(self._user_ids),
            email=email.strip().lower(),
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            **profile,
        )
        self._users[user.user_id] = user
        logger.info("storage.user_created", user_id=user.user_id)
        return user

    def update_user_profile(self, user_id: int, update: ProfileUpdate) -> User:
        existing = self._users.get(user_id)
        if existing is None:
            raise NotFoundError(f"user {user_id}")

        updated = existing.model_copy(update={
            **update.model_dump(),
            "is_profile_complete": True,
            "updated_at": datetime.now(UTC),
        })
        self._users[user_id] = updated
        logger.info("storage.profile_updated", user_id=user_id)
        return updated

    # ------------------------------------------------------------------
    # Schemes
    # ------------------------------------------------------------------

    def create_scheme(self, scheme: SchemeCreate, *, created_at: datetime | None = None) -> SchemeRecord:
        now = datetime.now(UTC)
        record = SchemeRecord(
            **scheme.model_dump(),
            scheme_id=next(self._scheme_ids),
            created_at=created_at or now,
            updated_at=now,
        )
        self._schemes[record.scheme_id] = record
        return record

    def get_scheme(self, scheme_id: int) -> SchemeRecord | None:
        """Return the scheme if it exists and is active."""
        scheme = self._schemes.get(scheme_id)
        if scheme is None or not scheme.is_active:
            return None
        return scheme

    def get_active_schemes(self) -> list[SchemeRecord]:
        return _newest_first(s for s in self._schemes.values() if s.is_active)

    def get_all_schemes(self) -> list[SchemeRecord]:
        """Every scheme, active or not (for the recommendation catalog)."""
        return list(self._schemes.values())

    def search_schemes(
        self,
        query: str | None = None,
        category: SchemeCategory | None = None,
    ) -> list[SchemeRecord]:
        """Case-insensitive substring search over active schemes.

        Matches the English and Hindi names, the description and the
        category label.
        """
        needle = (query or "").strip().casefold()
        results = []
        for scheme in self._schemes.values():
            if not scheme.is_active:
                continue
            if category is not None and scheme.category != category:
                continue
            if needle:
                haystacks = (
                    scheme.name,
                    scheme.name_hindi or "",
                    scheme.description,
                    scheme.category.value,
                )
                if not any(needle in text.casefold() for text in haystacks):
                    continue
            results.append(scheme)
        return _newest_first(results)

    def get_recommended_schemes(
        self,
        user_id: int,
        limit: int = RECOMMENDATION_LIMIT,
    ) -> list[SchemeRecord]:
        user = self._users.get(user_id)
        if user is None:
            return []
        return get_recommended(user.to_profile(), self._schemes.values(), limit)

    # ------------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------------

    def create_application(self, user_id: int, data: ApplicationCreate) -> Application:
        if self.get_scheme(data.scheme_id) is None:
            raise NotFoundError(f"scheme {data.scheme_id}")

        application = Application(
            application_id=next(self._application_ids),
            user_id=user_id,
            **data.model_dump(),
        )
        self._applications[application.application_id] = application
        logger.info(
            "storage.application_created",
            application_id=application.application_id,
            user_id=user_id,
            scheme_id=data.scheme_id,
        )
        return application

    def get_application(self, application_id: int) -> ApplicationWithScheme | None:
        application = self._applications.get(application_id)
        if application is None:
            return None
        return self._with_scheme(application)

    def get_user_applications(self, user_id: int) -> list[ApplicationWithScheme]:
        owned = sorted(
            (a for a in self._applications.values() if a.user_id == user_id),
            key=lambda a: (a.created_at, a.application_id),
            reverse=True,
        )
        joined = (self._with_scheme(a) for a in owned)
        return [a for a in joined if a is not None]

    def update_application_status(
        self,
        application_id: int,
        status: ApplicationStatus,
        notes: str | None = None,
    ) -> Application:
        existing = self._applications.get(application_id)
        if existing is None:
            raise NotFoundError(f"application {application_id}")

        updated = existing.model_copy(update={
            "status": status,
            "notes": notes,
            "last_updated": datetime.now(UTC),
        })
        self._applications[application_id] = updated
        logger.info(
            "storage.application_status_updated",
            application_id=application_id,
            status=status.value,
        )
        return updated

    def _with_scheme(self, application: Application) -> ApplicationWithScheme | None:
        scheme = self.get_scheme(application.scheme_id)
        if scheme is None:
            return None
        return ApplicationWithScheme(**application.model_dump(), scheme=scheme)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def create_notification(
        self,
        user_id: int,
        *,
        title: str,
        message: str,
        notification_type: NotificationType,
        title_hindi: str | None = None,
        message_hindi: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Notification:
        notification = Notification(
            notification_id=next(self._notification_ids),
            user_id=user_id,
            title=title,
            title_hindi=title_hindi,
            message=message,
            message_hindi=message_hindi,
            notification_type=notification_type,
            metadata=metadata,
        )
        self._notifications[notification.notification_id] = notification
        return notification

    def get_notification(self, notification_id: int) -> Notification | None:
        return self._notifications.get(notification_id)

    def get_user_notifications(self, user_id: int, limit: int = 50) -> list[Notification]:
        owned = sorted(
            (n for n in self._notifications.values() if n.user_id == user_id),
            key=lambda n: (n.created_at, n.notification_id),
            reverse=True,
        )
        return owned[:limit]

    def notified_scheme_ids(self, user_id: int) -> set[int]:
        """Ids of every scheme *user_id* already has a ``scheme_match`` notification for."""
        return {
            n.metadata["scheme_id"]
            for n in self._notifications.values()
            if n.user_id == user_id
            and n.notification_type == NotificationType.SCHEME_MATCH
            and n.metadata
            and "scheme_id" in n.metadata
        }

    def mark_notification_read(self, notification_id: int) -> None:
        existing = self._notifications.get(notification_id)
        if existing is None:
            raise NotFoundError(f"notification {notification_id}")
        self._notifications[notification_id] = existing.model_copy(update={"is_read": True})

    def mark_all_notifications_read(self, user_id: int) -> int:
        """Mark every notification of *user_id* read; returns how many changed."""
        changed = 0
        for notification_id, notification in list(self._notifications.items()):
            if notification.user_id == user_id and not notification.is_read:
                self._notifications[notification_id] = notification.model_copy(
                    update={"is_read": True}
                )
                changed += 1
        return changed

    # ------------------------------------------------------------------
    # Chat history
    # ------------------------------------------------------------------

    def save_chat_message(
        self,
        user_id: int | None,
        message: str,
        response: str,
        language: ChatLanguage = ChatLanguage.EN,
    ) -> ChatMessage:
        chat_message = ChatMessage(
            message_id=next(self._chat_ids),
            user_id=user_id,
            message=message,
            response=response,
            language=language,
        )
        self._chat_messages[chat_message.message_id] = chat_message
        return chat_message

    def get_user_chat_history(self, user_id: int, limit: int = 50) -> list[ChatMessage]:
        owned = sorted(
            (m for m in self._chat_messages.values() if m.user_id == user_id),
            key=lambda m: (m.created_at, m.message_id),
            reverse=True,
        )
        return owned[:limit]

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def get_dashboard_stats(
        self,
        user_id: int,
        *,
        now: datetime | None = None,
        window_days: int = 7,
    ) -> dict[str, int]:
        """Counters for the dashboard header.

        ``upcoming_deadlines`` counts the user's applications whose scheme
        deadline falls between *now* and *now* + *window_days*.
        """
        if user_id not in self._users:
            return {
                "total_applications": 0,
                "approved_applications": 0,
                "pending_applications": 0,
                "upcoming_deadlines": 0,
                "eligible_schemes": 0,
            }

        now = now or datetime.now(UTC)
        horizon = now + timedelta(days=window_days)
        owned = [a for a in self._applications.values() if a.user_id == user_id]

        upcoming = 0
        for application in owned:
            scheme = self._schemes.get(application.scheme_id)
            if scheme is None or scheme.application_deadline is None:
                continue
            deadline = scheme.application_deadline
            if deadline.tzinfo is None:
                deadline = deadline.replace(tzinfo=UTC)
            if now <= deadline <= horizon:
                upcoming += 1

        return {
            "total_applications": len(owned),
            "approved_applications": sum(
                1 for a in owned if a.status == ApplicationStatus.APPROVED
            ),
            "pending_applications": sum(
                1 for a in owned if a.status == ApplicationStatus.PENDING
            ),
            "upcoming_deadlines": upcoming,
            "eligible_schemes": len(self.get_recommended_schemes(user_id)),
        }


def _newest_first(schemes) -> list[SchemeRecord]:
    return sorted(schemes, key=lambda s: (s.created_at, s.scheme_id), reverse=True)
