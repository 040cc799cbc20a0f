"""Tests for scheme-match and status-change notifications."""

from __future__ import annotations

import pytest

from gconnect.models.application import ApplicationCreate
from gconnect.models.enums import ApplicationStatus, Gender, NotificationType
from gconnect.models.scheme import SchemeCreate
from gconnect.models.user_profile import ProfileUpdate
from gconnect.services.notifications import notify_new_matches, notify_status_change
from gconnect.services.storage import InMemoryStorage


def _scheme_data(name: str, **overrides) -> SchemeCreate:
    fields = {
        "name": name,
        "name_hindi": f"{name} (हिंदी)",
        "description": "d",
        "eligibility": "e",
        "benefits": "b",
        "application_process": "a",
    }
    fields.update(overrides)
    return SchemeCreate(**fields)


@pytest.fixture
def store() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def user_id(store: InMemoryStorage) -> int:
    user = store.create_user(email="n@x.in", password_hash="h", first_name="N", last_name="X")
    return user.user_id


class TestNotifyNewMatches:
    def test_one_notification_per_recommended_scheme(self, store, user_id):
        store.create_scheme(_scheme_data("Youth", max_age=30))
        store.create_scheme(_scheme_data("Seniors", min_age=60))
        store.update_user_profile(user_id, ProfileUpdate(first_name="N", last_name="X", age=25))

        created = notify_new_matches(store, user_id)

        assert len(created) == 1
        notification = created[0]
        assert notification.notification_type == NotificationType.SCHEME_MATCH
        assert notification.title == "New scheme match: Youth"
        assert notification.title_hindi == "नई योजना मिली: Youth (हिंदी)"
        assert notification.metadata == {"scheme_id": 1}

    def test_scheme_announced_only_once(self, store, user_id):
        store.create_scheme(_scheme_data("Everyone"))

        first = notify_new_matches(store, user_id)
        second = notify_new_matches(store, user_id)

        assert len(first) == 1
        assert second == []
        assert len(store.get_user_notifications(user_id)) == 1

    def test_newly_qualifying_scheme_is_announced(self, store, user_id):
        store.create_scheme(_scheme_data("Everyone"))
        store.create_scheme(_scheme_data("Women", target_gender="female"))
        store.update_user_profile(
            user_id, ProfileUpdate(first_name="N", last_name="X", gender=Gender.MALE)
        )
        notify_new_matches(store, user_id)

        store.update_user_profile(
            user_id, ProfileUpdate(first_name="N", last_name="X", gender=Gender.FEMALE)
        )
        created = notify_new_matches(store, user_id)

        assert [n.metadata["scheme_id"] for n in created] == [2]

    def test_old_matches_still_deduplicated(self, store, user_id):
        store.create_scheme(_scheme_data("Everyone"))
        notify_new_matches(store, user_id)
        for i in range(60):
            store.create_notification(
                user_id,
                title=f"Update {i}",
                message="m",
                notification_type=NotificationType.STATUS_UPDATE,
            )

        assert notify_new_matches(store, user_id) == []


class TestNotifyStatusChange:
    def test_bilingual_status_message(self, store, user_id):
        scheme = store.create_scheme(_scheme_data("Awas"))
        app = store.create_application(user_id, ApplicationCreate(scheme_id=scheme.scheme_id))
        updated = store.update_application_status(app.application_id, ApplicationStatus.APPROVED)

        notification = notify_status_change(store, updated)

        assert notification.notification_type == NotificationType.STATUS_UPDATE
        assert notification.message == "Your application for Awas is now Approved."
        assert notification.message_hindi == "Awas (हिंदी) के लिए आपके आवेदन की स्थिति अब अनुमोदित है।"
        assert notification.metadata == {
            "scheme_id": scheme.scheme_id,
            "application_id": app.application_id,
            "status": "approved",
        }
