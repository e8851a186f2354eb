"""Tests for Strava API routes."""

import urllib.parse
from datetime import datetime, timedelta

import httpx
import pytest
from fastapi.testclient import TestClient

from tri_pacer.api import deps
from tri_pacer.config import Settings
from tri_pacer.integrations.base import OAuthCredentials
from tri_pacer.integrations.strava import StravaClient, StravaOAuthFlow
from tri_pacer.main import app
from tri_pacer.services.token_store import InMemoryTokenStore


# Test client
client = TestClient(app)


def activity_json(activity_id: int, sport: str, distance: float = 10000, moving_time: int = 3000) -> dict:
    return {
        "id": activity_id,
        "name": f"{sport} {activity_id}",
        "sport_type": sport,
        "start_date": "2024-05-28T07:00:00Z",
        "moving_time": moving_time,
        "distance": distance,
    }


def token_handler(request: httpx.Request) -> httpx.Response:
    form = dict(urllib.parse.parse_qsl(request.content.decode()))
    if form.get("code") == "bad_code":
        return httpx.Response(400, json={"message": "Bad Request"})
    if form["grant_type"] == "refresh_token":
        return httpx.Response(200, json={"access_token": "refreshed_access", "refresh_token": "refresh_2"})
    return httpx.Response(200, json={
        "access_token": "access_abc",
        "refresh_token": "refresh_abc",
        "expires_at": int((datetime.now() + timedelta(hours=6)).timestamp()),
        "athlete": {"id": 42, "firstname": "Jane", "lastname": "Doe"},
    })


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def token_store():
    """Fresh token store per test."""
    store = InMemoryTokenStore()
    app.dependency_overrides[deps.get_tokens] = lambda: store
    app.dependency_overrides[deps.get_optional_strava_oauth_flow] = lambda: None

    yield store

    app.dependency_overrides.pop(deps.get_tokens, None)
    app.dependency_overrides.pop(deps.get_optional_strava_oauth_flow, None)


@pytest.fixture
def oauth_flow():
    """Strava OAuth flow talking to a mock token endpoint."""
    flow = StravaOAuthFlow(
        client_id="123",
        client_secret="secret",
        redirect_uri="http://localhost:5173/strava/callback",
        transport=httpx.MockTransport(token_handler),
    )
    app.dependency_overrides[deps.get_strava_oauth_flow] = lambda: flow
    app.dependency_overrides[deps.get_optional_strava_oauth_flow] = lambda: flow

    yield flow

    app.dependency_overrides.pop(deps.get_strava_oauth_flow, None)


@pytest.fixture
def strava_api():
    """Route Strava API calls through a mock transport; returns the seen requests."""
    seen = []
    responses = {"status": 200}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if responses["status"] != 200:
            return httpx.Response(responses["status"], json={"message": "error"})
        return httpx.Response(200, json=[
            activity_json(1, "Swim", 1500, 1800),
            activity_json(2, "Ride", 40000, 4800),
            activity_json(3, "Run"),
            activity_json(4, "Walk"),
        ])

    transport = httpx.MockTransport(handler)
    app.dependency_overrides[deps.get_strava_client_factory] = (
        lambda: lambda creds: StravaClient(creds, transport=transport)
    )

    yield seen, responses

    app.dependency_overrides.pop(deps.get_strava_client_factory, None)


# ============================================================================
# OAuth
# ============================================================================

class TestStravaAuth:
    """Tests for GET /api/v1/strava/auth."""

    def test_authorization_url(self, oauth_flow):
        response = client.get("/api/v1/strava/auth")

        assert response.status_code == 200
        data = response.json()
        assert data["authorization_url"].startswith("https://www.strava.com/oauth/authorize?")
        assert "activity%3Aread_all" in data["authorization_url"]
        assert oauth_flow.validate_state(data["state"])

    def test_not_configured(self, monkeypatch):
        monkeypatch.setattr(deps, "get_settings", lambda: Settings(strava_client_id="", strava_client_secret=""))
        deps.get_strava_oauth_flow.cache_clear()

        response = client.get("/api/v1/strava/auth")

        assert response.status_code == 501
        assert response.json()["error"]["code"] == "STRAVA_NOT_CONFIGURED"


class TestStravaCallback:
    """Tests for POST /api/v1/strava/callback."""

    def test_stores_token(self, oauth_flow, token_store):
        state = oauth_flow.generate_state()
        response = client.post("/api/v1/strava/callback", json={"code": "auth_code", "state": state})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["athlete_id"] == "42"
        assert data["athlete_name"] == "Jane Doe"
        assert token_store.get_token("42").access_token == "access_abc"

    def test_invalid_state(self, oauth_flow, token_store):
        oauth_flow.generate_state()
        response = client.post("/api/v1/strava/callback", json={"code": "auth_code", "state": "forged"})

        assert response.status_code == 400
        assert response.json()["error"]["details"]["field"] == "state"
        assert len(token_store) == 0

    def test_exchange_failure(self, oauth_flow, token_store):
        state = oauth_flow.generate_state()
        response = client.post("/api/v1/strava/callback", json={"code": "bad_code", "state": state})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "STRAVA_AUTH_FAILED"
        assert len(token_store) == 0

    def test_missing_state(self, oauth_flow, token_store):
        response = client.post("/api/v1/strava/callback", json={"code": "auth_code"})

        assert response.status_code == 422
        assert len(token_store) == 0

    def test_replayed_state(self, oauth_flow, token_store):
        state = oauth_flow.generate_state()
        client.post("/api/v1/strava/callback", json={"code": "auth_code", "state": state})

        response = client.post("/api/v1/strava/callback", json={"code": "auth_code", "state": state})

        assert response.status_code == 400
        assert response.json()["error"]["details"]["field"] == "state"

    def test_overlapping_logins(self, oauth_flow, token_store):
        """A second /auth request does not invalidate the first login."""
        first = client.get("/api/v1/strava/auth").json()["state"]
        second = client.get("/api/v1/strava/auth").json()["state"]

        response = client.post("/api/v1/strava/callback", json={"code": "auth_code", "state": first})
        assert response.status_code == 200

        response = client.post("/api/v1/strava/callback", json={"code": "auth_code", "state": second})
        assert response.status_code == 200


# ============================================================================
# Token storage
# ============================================================================

class TestStravaToken:
    """Tests for the token endpoints."""

    def test_save_and_check(self, token_store):
        response = client.post(
            "/api/v1/strava/token",
            json={"athlete_id": "7", "access_token": "abc", "refresh_token": "def"},
        )

        assert response.status_code == 200
        assert response.json() == {"message": "saved"}
        assert client.get("/api/v1/strava/token/7").json() == {"exists": True}

    def test_missing_token(self):
        response = client.get("/api/v1/strava/token/unknown")

        assert response.status_code == 404
        assert response.json() == {"exists": False}

    def test_logout(self, token_store):
        token_store.set_token("7", OAuthCredentials(provider="strava", access_token="abc"))

        response = client.post("/api/v1/strava/logout", json={"athlete_id": "7"})

        assert response.status_code == 200
        assert response.json() == {"message": "Logged out"}
        assert client.get("/api/v1/strava/token/7").status_code == 404

    def test_save_rejects_empty_token(self):
        response = client.post("/api/v1/strava/token", json={"athlete_id": "7", "access_token": ""})
        assert response.status_code == 422


# ============================================================================
# Activities
# ============================================================================

class TestStravaActivities:
    """Tests for GET /api/v1/strava/activities/{athlete_id}."""

    def test_not_connected(self, strava_api):
        response = client.get("/api/v1/strava/activities/7")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "STRAVA_NOT_CONNECTED"

    def test_recent_activities(self, token_store, strava_api):
        seen, _ = strava_api
        token_store.set_token("7", OAuthCredentials(provider="strava", access_token="abc"))

        response = client.get("/api/v1/strava/activities/7", params={"weeks": 2})

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        assert {a["sport_type"] for a in data["activities"]} == {"Swim", "Ride", "Run"}
        assert seen[0].headers["Authorization"] == "Bearer abc"

    def test_expired_token_is_refreshed(self, token_store, oauth_flow, strava_api):
        seen, _ = strava_api
        token_store.set_token("7", OAuthCredentials(
            provider="strava",
            access_token="stale",
            refresh_token="refresh_1",
            expires_at=datetime.now() - timedelta(hours=1),
        ))

        response = client.get("/api/v1/strava/activities/7")

        assert response.status_code == 200
        assert seen[0].headers["Authorization"] == "Bearer refreshed_access"
        assert token_store.get_token("7").access_token == "refreshed_access"

    def test_strava_rejects_token(self, token_store, strava_api):
        _, responses = strava_api
        responses["status"] = 401
        token_store.set_token("7", OAuthCredentials(provider="strava", access_token="abc"))

        response = client.get("/api/v1/strava/activities/7")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "STRAVA_AUTH_FAILED"

    def test_strava_server_error(self, token_store, strava_api):
        _, responses = strava_api
        responses["status"] = 503
        token_store.set_token("7", OAuthCredentials(provider="strava", access_token="abc"))

        response = client.get("/api/v1/strava/activities/7")

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "STRAVA_API_ERROR"

    def test_weeks_out_of_range(self, token_store, strava_api):
        response = client.get("/api/v1/strava/activities/7", params={"weeks": 0})
        assert response.status_code == 422
