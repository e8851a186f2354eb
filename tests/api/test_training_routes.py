"""Tests for training analysis API routes."""

import httpx
import pytest
from fastapi.testclient import TestClient

from tri_pacer.api import deps
from tri_pacer.integrations.base import OAuthCredentials
from tri_pacer.integrations.strava import StravaClient
from tri_pacer.main import app
from tri_pacer.services.token_store import InMemoryTokenStore


# Test client
client = TestClient(app)


GOAL = {"hours": 2, "minutes": 30, "seconds": 0, "t1_minutes": 2, "t2_minutes": 3}

ACTIVITIES = [
    {"type": "Swim", "distance": 1500, "moving_time": 1800},
    {"type": "Swim", "distance": 500, "moving_time": 600},
    {"type": "Ride", "distance": 36000, "moving_time": 3600},
    {"type": "Run", "distance": 10000, "moving_time": 3000},
]


@pytest.fixture
def token_store():
    store = InMemoryTokenStore()
    app.dependency_overrides[deps.get_tokens] = lambda: store
    app.dependency_overrides[deps.get_optional_strava_oauth_flow] = lambda: None

    yield store

    app.dependency_overrides.pop(deps.get_tokens, None)
    app.dependency_overrides.pop(deps.get_optional_strava_oauth_flow, None)


@pytest.fixture
def strava_api():
    payload = [
        {"id": i, "name": a["type"], "sport_type": a["type"], "start_date": "2024-05-28T07:00:00Z",
         "moving_time": a["moving_time"], "distance": a["distance"]}
        for i, a in enumerate(ACTIVITIES, start=1)
    ]
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=payload))
    app.dependency_overrides[deps.get_strava_client_factory] = (
        lambda: lambda creds: StravaClient(creds, transport=transport)
    )

    yield

    app.dependency_overrides.pop(deps.get_strava_client_factory, None)


class TestAnalysisEndpoint:
    """Tests for POST /api/v1/training/analysis."""

    def test_averages(self):
        response = client.post("/api/v1/training/analysis", json={"activities": ACTIVITIES})

        assert response.status_code == 200
        data = response.json()
        assert data["swim"]["average_pace"] == 120
        assert data["swim"]["session_count"] == 2
        assert data["bike"]["average_speed"] == 36
        assert data["run"]["average_pace"] == 300

    def test_empty(self):
        response = client.post("/api/v1/training/analysis", json={"activities": []})

        assert response.status_code == 200
        assert response.json()["run"]["average_pace"] == 0

    def test_negative_distance_rejected(self):
        activities = [{"type": "Run", "distance": -1, "moving_time": 100}]
        response = client.post("/api/v1/training/analysis", json={"activities": activities})

        assert response.status_code == 422


class TestPlanEndpoint:
    """Tests for POST /api/v1/training/plan."""

    def test_plan(self):
        response = client.post(
            "/api/v1/training/plan",
            json={"course": "olympic", "goal": GOAL, "activities": ACTIVITIES},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["goal_time_seconds"] == 9000
        assert data["comparison"]["priority"] == "run"
        assert [r["discipline"] for r in data["training_plan"]] == ["run", "swim"]
        assert data["prediction"]["total_predict_seconds"] == 8800

    def test_plan_without_activities(self):
        response = client.post("/api/v1/training/plan", json={"course": "olympic", "goal": GOAL})

        assert response.status_code == 200
        data = response.json()
        assert data["training_plan"] == []
        assert data["prediction"] is None
        assert data["comparison"]["swim"]["current"] == "데이터 없음"

    def test_unreachable_goal(self):
        """A goal no leg split can reach is planned without an improvement."""
        activities = [
            {"type": "Swim", "distance": 1500, "moving_time": 900},
            {"type": "Ride", "distance": 36000, "moving_time": 3600},
            {"type": "Run", "distance": 10000, "moving_time": 3000},
        ]
        goal = {"hours": 0, "minutes": 10, "seconds": 0, "t1_minutes": 2, "t2_minutes": 3}

        response = client.post(
            "/api/v1/training/plan",
            json={"course": "olympic", "goal": goal, "activities": activities},
        )

        assert response.status_code == 200
        comparison = response.json()["prediction"]["comparison"]
        assert comparison["total_status"] == "slower"
        assert comparison["improvement"] is None

    def test_unknown_course(self):
        response = client.post("/api/v1/training/plan", json={"course": "sprint", "goal": GOAL})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "UNKNOWN_COURSE"

    def test_plan_from_strava(self, token_store, strava_api):
        token_store.set_token("7", OAuthCredentials(provider="strava", access_token="abc"))

        response = client.post("/api/v1/training/plan/7", json={"course": "olympic", "goal": GOAL})

        assert response.status_code == 200
        assert response.json()["current_stats"]["bike"]["average_speed"] == 36

    def test_plan_from_strava_not_connected(self, token_store, strava_api):
        response = client.post("/api/v1/training/plan/7", json={"course": "olympic", "goal": GOAL})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "STRAVA_NOT_CONNECTED"


class TestRecommendationsEndpoint:
    """Tests for POST /api/v1/training/recommendations."""

    def test_from_comparison(self):
        plan = client.post(
            "/api/v1/training/plan",
            json={"course": "olympic", "goal": GOAL, "activities": ACTIVITIES},
        ).json()

        response = client.post("/api/v1/training/recommendations", json=plan["comparison"])

        assert response.status_code == 200
        recommendations = response.json()
        assert [r["priority"] for r in recommendations] == [1, 2]
        assert recommendations[0]["discipline"] == "run"
        assert "monday" in recommendations[0]["weekly_plan"]
