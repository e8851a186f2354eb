"""Tests for TCX export API routes."""

from fastapi.testclient import TestClient
from lxml import etree

from tri_pacer.export.tcx import TCX_NAMESPACE
from tri_pacer.main import app


# Test client
client = TestClient(app)


GOAL = {"hours": 2, "minutes": 30, "seconds": 0, "t1_minutes": 2, "t2_minutes": 3}


class TestExportTCX:
    """Tests for POST /api/v1/export/tcx."""

    def test_download(self):
        response = client.post(
            "/api/v1/export/tcx",
            json={"course": "olympic", "goal": GOAL, "start": "2024-05-01T07:00:00"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/vnd.garmin.tcx+xml")
        assert 'filename="olympic_race_plan.tcx"' in response.headers["content-disposition"]

        root = etree.fromstring(response.content)
        laps = root.findall(".//tcx:Lap", {"tcx": TCX_NAMESPACE})
        assert len(laps) == 5
        assert laps[0].get("StartTime") == "2024-05-01T07:00:00.000Z"

    def test_custom_name(self):
        response = client.post(
            "/api/v1/export/tcx",
            json={"course": "olympic", "goal": GOAL, "start": "2024-05-01T07:00:00", "name": "Race Day"},
        )

        assert 'filename="race_day.tcx"' in response.headers["content-disposition"]

    def test_uses_current_paces(self):
        paces = {"swim_minutes": 1, "swim_seconds": 50, "bike_kmh": 32, "run_minutes": 5, "run_seconds": 0}
        response = client.post(
            "/api/v1/export/tcx",
            json={"course": "olympic", "goal": GOAL, "paces": paces, "start": "2024-05-01T07:00:00Z"},
        )

        root = etree.fromstring(response.content)
        times = [e.text for e in root.iter(f"{{{TCX_NAMESPACE}}}TotalTimeSeconds")]
        assert times == ["1650", "120", "4500", "180", "3000"]

    def test_unknown_course(self):
        response = client.post(
            "/api/v1/export/tcx",
            json={"course": "sprint", "goal": GOAL, "start": "2024-05-01T07:00:00"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "UNKNOWN_COURSE"

    def test_missing_start(self):
        response = client.post("/api/v1/export/tcx", json={"course": "olympic", "goal": GOAL})
        assert response.status_code == 422
