"""End-to-end tests for the GConnect HTTP API.

Each test gets a fresh application lifespan: a new in-memory store seeded
with the bundled scheme catalog and no chat assistant configured.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from config.settings import settings
from gconnect.models.chat import ChatReply, SuggestedScheme
from gconnect.models.enums import ChatLanguage
from gconnect.services.security import issue_token

_FARMER_PROFILE = {
    "first_name": "Ravi",
    "last_name": "Kumar",
    "age": 45,
    "gender": "male",
    "income": 80000,
    "occupation": "farmer",
    "state": "Odisha",
    "district": "Cuttack",
}

# Ids follow the order of gconnect/data/schemes/schemes.json.
_PM_KISAN_ID = 1
_SUKANYA_ID = 3
_INACTIVE_ID = 11


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(settings, "password_hash_iterations", 1000)
    monkeypatch.setattr(settings, "gcp_project_id", "")
    monkeypatch.setattr(settings, "seed_schemes", True)

    from gconnect.main import app

    with TestClient(app) as test_client:
        yield test_client


def _register(client: TestClient, email: str = "ravi@example.com", **extra) -> str:
    response = client.post(
        "/api/v1/auth/register",
        json={
            "email": email,
            "password": "secret123",
            "first_name": "Ravi",
            "last_name": "Kumar",
            **extra,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()["token"]


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class TestAuth:
    def test_register_returns_user_and_token(self, client):
        response = client.post(
            "/api/v1/auth/register",
            json={
                "email": "Asha@Example.com",
                "password": "secret123",
                "first_name": "Asha",
                "last_name": "Verma",
                "state": "Bihar",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["token"]
        assert data["user"]["email"] == "asha@example.com"
        assert data["user"]["state"] == "Bihar"
        assert "password_hash" not in data["user"]

    def test_duplicate_email(self, client):
        _register(client)
        response = client.post(
            "/api/v1/auth/register",
            json={"email": "RAVI@example.com", "password": "secret123", "first_name": "R", "last_name": "K"},
        )

        assert response.status_code == 409

    def test_register_validation(self, client):
        response = client.post(
            "/api/v1/auth/register",
            json={"email": "not-an-email", "password": "123", "first_name": "", "last_name": "K"},
        )

        assert response.status_code == 422

    def test_login(self, client):
        _register(client)

        response = client.post(
            "/api/v1/auth/login",
            json={"email": "ravi@example.com", "password": "secret123"},
        )

        assert response.status_code == 200
        assert response.json()["user"]["first_name"] == "Ravi"

    @pytest.mark.parametrize(
        ("email", "password"),
        [("ravi@example.com", "wrong-password"), ("nobody@example.com", "secret123")],
    )
    def test_login_bad_credentials(self, client, email, password):
        _register(client)

        response = client.post("/api/v1/auth/login", json={"email": email, "password": password})

        assert response.status_code == 401

    def test_me(self, client):
        token = _register(client)

        response = client.get("/api/v1/auth/me", headers=_auth(token))

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "ravi@example.com"

    def test_me_without_token(self, client):
        assert client.get("/api/v1/auth/me").status_code == 401

    def test_me_with_invalid_token(self, client):
        response = client.get("/api/v1/auth/me", headers=_auth("garbage.token"))

        assert response.status_code == 403

    def test_token_for_unknown_user(self, client):
        token = issue_token(999, "ghost@example.com")

        assert client.get("/api/v1/auth/me", headers=_auth(token)).status_code == 403


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


class TestProfile:
    def test_update_profile(self, client):
        token = _register(client)

        response = client.put("/api/v1/profile", json=_FARMER_PROFILE, headers=_auth(token))

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["occupation"] == "farmer"
        assert user["is_profile_complete"] is True
        assert user["profile_completion"] == 100

    def test_update_announces_matching_schemes(self, client):
        token = _register(client)
        client.put("/api/v1/profile", json=_FARMER_PROFILE, headers=_auth(token))

        notifications = client.get("/api/v1/notifications", headers=_auth(token)).json()

        titles = [n["title"] for n in notifications["notifications"]]
        assert "New scheme match: Kalia Yojana" in titles
        assert all(n["notification_type"] == "scheme_match" for n in notifications["notifications"])

        # Saving the same profile again announces nothing new.
        client.put("/api/v1/profile", json=_FARMER_PROFILE, headers=_auth(token))
        again = client.get("/api/v1/notifications", headers=_auth(token)).json()
        assert len(again["notifications"]) == len(titles)

    def test_requires_auth(self, client):
        assert client.put("/api/v1/profile", json=_FARMER_PROFILE).status_code == 401


# ---------------------------------------------------------------------------
# Schemes
# ---------------------------------------------------------------------------


class TestSchemes:
    def test_anonymous_listing(self, client):
        response = client.get("/api/v1/schemes")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 10
        assert all(item["eligibility"] is None for item in data["schemes"])
        assert all(item["scheme"]["is_active"] for item in data["schemes"])

    def test_search_and_category(self, client):
        found = client.get("/api/v1/schemes", params={"search": "KISAN"}).json()
        health = client.get("/api/v1/schemes", params={"category": "health"}).json()

        assert [i["scheme"]["name"] for i in found["schemes"]] == ["PM Kisan Samman Nidhi"]
        assert [i["scheme"]["name"] for i in health["schemes"]] == ["Ayushman Bharat PM-JAY"]

    def test_invalid_category(self, client):
        assert client.get("/api/v1/schemes", params={"category": "space"}).status_code == 422

    def test_signed_in_listing_includes_verdict(self, client):
        token = _register(client)
        client.put("/api/v1/profile", json=_FARMER_PROFILE, headers=_auth(token))

        data = client.get("/api/v1/schemes", headers=_auth(token)).json()

        verdicts = {i["scheme"]["scheme_id"]: i["eligibility"] for i in data["schemes"]}
        assert verdicts[_PM_KISAN_ID]["eligible"] is True
        assert verdicts[_SUKANYA_ID]["eligible"] is False

    def test_recommended(self, client):
        token = _register(client)
        client.put("/api/v1/profile", json=_FARMER_PROFILE, headers=_auth(token))

        response = client.get("/api/v1/schemes/recommended", headers=_auth(token))

        assert response.status_code == 200
        data = response.json()
        names = [item["scheme"]["name"] for item in data["schemes"]]
        assert names[0] == "Kalia Yojana"
        assert "PM Kisan Samman Nidhi" in names
        assert "Sukanya Samriddhi Yojana" not in names
        assert data["total"] <= 10
        assert all(70 <= item["match_percentage"] <= 100 for item in data["schemes"])

    def test_recommended_requires_auth(self, client):
        assert client.get("/api/v1/schemes/recommended").status_code == 401

    def test_detail(self, client):
        response = client.get(f"/api/v1/schemes/{_PM_KISAN_ID}")

        assert response.status_code == 200
        assert response.json()["name_hindi"] == "पीएम किसान सम्मान निधि"
        assert response.json()["has_open_deadline"] is True

    @pytest.mark.parametrize("scheme_id", [_INACTIVE_ID, 9999])
    def test_detail_not_found(self, client, scheme_id):
        assert client.get(f"/api/v1/schemes/{scheme_id}").status_code == 404

    def test_eligibility_check(self, client):
        token = _register(client)
        client.put("/api/v1/profile", json=_FARMER_PROFILE, headers=_auth(token))

        response = client.get(f"/api/v1/schemes/{_SUKANYA_ID}/eligibility", headers=_auth(token))

        assert response.status_code == 200
        assert response.json() == {
            "eligible": False,
            "reasons": ["maximum age limit: 10", "target gender: female"],
            "match_percentage": None,
        }

    def test_eligibility_with_empty_profile_is_disclaimed(self, client):
        token = _register(client)

        data = client.get(f"/api/v1/schemes/{_PM_KISAN_ID}/eligibility", headers=_auth(token)).json()

        assert data["eligible"] is True
        assert data["reasons"][0] == "meets all eligibility criteria"
        assert data["reasons"][1].startswith("eligibility could not be fully verified")


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------


class TestApplications:
    def test_create_and_list(self, client):
        token = _register(client)

        created = client.post(
            "/api/v1/applications",
            json={"scheme_id": _PM_KISAN_ID, "application_ref": "PMK-123"},
            headers=_auth(token),
        )
        listed = client.get("/api/v1/applications", headers=_auth(token)).json()

        assert created.status_code == 201
        assert created.json()["status"] == "pending"
        assert created.json()["scheme"]["name"] == "PM Kisan Samman Nidhi"
        assert listed["total"] == 1

    @pytest.mark.parametrize("scheme_id", [_INACTIVE_ID, 9999])
    def test_unknown_scheme(self, client, scheme_id):
        token = _register(client)

        response = client.post("/api/v1/applications", json={"scheme_id": scheme_id}, headers=_auth(token))

        assert response.status_code == 404

    def test_status_update_notifies(self, client):
        token = _register(client)
        app_id = client.post(
            "/api/v1/applications", json={"scheme_id": _PM_KISAN_ID}, headers=_auth(token)
        ).json()["application_id"]

        response = client.put(
            f"/api/v1/applications/{app_id}",
            json={"status": "approved", "notes": "First instalment received"},
            headers=_auth(token),
        )

        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        notifications = client.get("/api/v1/notifications", headers=_auth(token)).json()
        assert notifications["notifications"][0]["notification_type"] == "status_update"
        assert notifications["unread"] == 1

    def test_cannot_update_someone_elses_application(self, client):
        owner = _register(client)
        intruder = _register(client, email="other@example.com")
        app_id = client.post(
            "/api/v1/applications", json={"scheme_id": _PM_KISAN_ID}, headers=_auth(owner)
        ).json()["application_id"]

        response = client.put(
            f"/api/v1/applications/{app_id}",
            json={"status": "rejected"},
            headers=_auth(intruder),
        )

        assert response.status_code == 404

    def test_invalid_status(self, client):
        token = _register(client)
        app_id = client.post(
            "/api/v1/applications", json={"scheme_id": _PM_KISAN_ID}, headers=_auth(token)
        ).json()["application_id"]

        response = client.put(f"/api/v1/applications/{app_id}", json={"status": "lost"}, headers=_auth(token))

        assert response.status_code == 422


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


class TestNotifications:
    def test_mark_read_and_read_all(self, client):
        token = _register(client)
        client.put("/api/v1/profile", json=_FARMER_PROFILE, headers=_auth(token))
        listed = client.get("/api/v1/notifications", headers=_auth(token)).json()
        first_id = listed["notifications"][0]["notification_id"]

        one = client.put(f"/api/v1/notifications/{first_id}/read", headers=_auth(token))
        rest = client.put("/api/v1/notifications/read-all", headers=_auth(token))

        assert one.json() == {"success": True, "updated": 1}
        assert rest.json()["updated"] == listed["unread"] - 1
        assert client.get("/api/v1/notifications", headers=_auth(token)).json()["unread"] == 0

    def test_other_users_notification(self, client):
        owner = _register(client)
        other = _register(client, email="other@example.com")
        client.put("/api/v1/profile", json=_FARMER_PROFILE, headers=_auth(owner))
        notification_id = client.get("/api/v1/notifications", headers=_auth(owner)).json()[
            "notifications"
        ][0]["notification_id"]

        response = client.put(f"/api/v1/notifications/{notification_id}/read", headers=_auth(other))

        assert response.status_code == 404


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class TestChat:
    def test_fallback_without_assistant(self, client):
        token = _register(client)

        response = client.post("/api/v1/chat", json={"message": "कौन सी योजना?"}, headers=_auth(token))

        assert response.status_code == 200
        assert response.json()["language"] == "hi"
        assert response.json()["message"].startswith("माफ करें")

    def test_assistant_reply_saved_to_history(self, client):
        token = _register(client)
        assistant = MagicMock()
        assistant.process_chat = AsyncMock(
            return_value=ChatReply(
                message="You may qualify for PM Kisan.",
                schemes=[SuggestedScheme(name="PM Kisan")],
                language=ChatLanguage.EN,
            )
        )
        client.app.state.chat_assistant = assistant

        response = client.post("/api/v1/chat", json={"message": "farmer schemes?"}, headers=_auth(token))
        history = client.get("/api/v1/chat/history", headers=_auth(token)).json()

        assert response.json()["schemes"][0]["name"] == "PM Kisan"
        assert history["total"] == 1
        assert history["messages"][0]["response"] == "You may qualify for PM Kisan."

    def test_requested_language_wins(self, client):
        token = _register(client)

        response = client.post(
            "/api/v1/chat",
            json={"message": "yojana batao", "language": "hinglish"},
            headers=_auth(token),
        )

        assert response.json()["language"] == "hinglish"

    def test_empty_message_rejected(self, client):
        token = _register(client)

        assert client.post("/api/v1/chat", json={"message": ""}, headers=_auth(token)).status_code == 422

    def test_history_limit(self, client):
        token = _register(client)
        for i in range(3):
            client.post("/api/v1/chat", json={"message": f"q{i}"}, headers=_auth(token))

        history = client.get("/api/v1/chat/history", params={"limit": 2}, headers=_auth(token)).json()

        assert [m["message"] for m in history["messages"]] == ["q2", "q1"]


# ---------------------------------------------------------------------------
# Dashboard, health and app-level behaviour
# ---------------------------------------------------------------------------


class TestDashboard:
    def test_stats(self, client):
        token = _register(client)
        client.put("/api/v1/profile", json=_FARMER_PROFILE, headers=_auth(token))
        client.post("/api/v1/applications", json={"scheme_id": _PM_KISAN_ID}, headers=_auth(token))

        stats = client.get("/api/v1/dashboard/stats", headers=_auth(token)).json()

        assert stats["total_applications"] == 1
        assert stats["pending_applications"] == 1
        assert stats["approved_applications"] == 0
        assert stats["upcoming_deadlines"] == 0
        assert stats["eligible_schemes"] == 6
        assert stats["profile_completion"] == 100


class TestAppLevel:
    def test_health(self, client):
        data = client.get("/api/v1/health").json()

        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"

    def test_readiness(self, client):
        data = client.get("/api/v1/health/ready").json()

        assert data["status"] == "ready"
        assert data["checks"]["chat_assistant"] == "not_configured"

    def test_api_info(self, client):
        data = client.get("/api").json()

        assert data["languages_supported"] == ["en", "hi"]
        assert data["endpoints"]["schemes"] == "/api/v1/schemes"

    def test_security_headers(self, client):
        response = client.get("/api/v1/health", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Request-ID"] == "abc123"


@pytest.mark.parametrize("level", ["debug", "INFO", "warning", "ERROR"])
def test_logging_accepts_level_names(monkeypatch, level):
    import structlog

    from gconnect.main import _configure_logging

    monkeypatch.setattr(settings, "log_level", level)

    _configure_logging()

    assert structlog.is_configured()

def test_unhandled_error_is_500(monkeypatch):
    monkeypatch.setattr(settings, "password_hash_iterations", 1000)
    monkeypatch.setattr(settings, "gcp_project_id", "")

    from gconnect.main import app

    with TestClient(app, raise_server_exceptions=False) as raw_client:
        token = _register(raw_client)
        raw_client.app.state.storage.get_dashboard_stats = MagicMock(side_effect=RuntimeError("boom"))
        response = raw_client.get("/api/v1/dashboard/stats", headers=_auth(token))

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
