"""Generates user notifications from profile and application changes.

Two triggers:

    * a profile update that surfaces recommended schemes the user has not
      been told about yet -> one ``scheme_match`` notification per scheme;
    * an application status change -> one ``status_update`` notification.

Titles and messages are stored in both English and Hindi so the client
can pick either without another round trip.
"""

from __future__ import annotations

import structlog

from gconnect.models.application import Application
from gconnect.models.enums import NotificationType
from gconnect.models.notification import Notification
from gconnect.services.i18n import translate
from gconnect.services.storage import InMemoryStorage

logger = structlog.get_logger(__name__)


def notify_new_matches(store: InMemoryStorage, user_id: int) -> list[Notification]:
    """Create ``scheme_match`` notifications for newly recommended schemes.

    A scheme is announced to a user at most once, however many times the
    profile changes.
    """
    already_notified = store.notified_scheme_ids(user_id)

    created: list[Notification] = []
    for scheme in store.get_recommended_schemes(user_id):
        if scheme.scheme_id in already_notified:
            continue
        created.append(
            store.create_notification(
                user_id,
                title=translate("newSchemeMatch", "en", name=scheme.name),
                title_hindi=translate(
                    "newSchemeMatch", "hi", name=scheme.localized("name", "hi")
                ),
                message=translate("newSchemeMatchMessage", "en", name=scheme.name),
                message_hindi=translate(
                    "newSchemeMatchMessage", "hi", name=scheme.localized("name", "hi")
                ),
                notification_type=NotificationType.SCHEME_MATCH,
                metadata={"scheme_id": scheme.scheme_id},
            )
        )

    if created:
        logger.info("notifications.scheme_matches", user_id=user_id, created=len(created))
    return created


def notify_status_change(
    store: InMemoryStorage,
    application: Application,
) -> Notification | None:
    """Tell the applicant their application moved to a new status."""
    scheme = store.get_scheme(application.scheme_id)
    if scheme is None:
        return None

    status = application.status.value
    notification = store.create_notification(
        application.user_id,
        title=translate("applicationStatusChanged", "en"),
        title_hindi=translate("applicationStatusChanged", "hi"),
        message=translate(
            "applicationStatusChangedMessage",
            "en",
            name=scheme.name,
            status=translate(status, "en"),
        ),
        message_hindi=translate(
            "applicationStatusChangedMessage",
            "hi",
            name=scheme.localized("name", "hi"),
            status=translate(status, "hi"),
        ),
        notification_type=NotificationType.STATUS_UPDATE,
        metadata={
            "scheme_id": scheme.scheme_id,
            "application_id": application.application_id,
            "status": status,
        },
    )
    logger.info(
        "notifications.status_update",
        user_id=application.user_id,
        application_id=application.application_id,
        status=status,
    )
    return notification
