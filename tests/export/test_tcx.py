"""Tests for the TCX race-plan encoder."""

from datetime import datetime, timedelta, timezone

import pytest
from lxml import etree

from tri_pacer.exceptions import ExportError
from tri_pacer.export.tcx import (
    TCX_NAMESPACE,
    TCXEncoder,
    build_race_laps,
    create_tcx,
    format_timestamp,
)
from tri_pacer.metrics.pacing import compute_goal_paces
from tri_pacer.models.course import Discipline
from tri_pacer.models.training import Lap


NS = {"tcx": TCX_NAMESPACE}
START = datetime(2024, 5, 1, 7, 0, 0)


@pytest.fixture
def result():
    """Olympic prediction: 1650 s swim, 4500 s bike, 3000 s run."""
    return compute_goal_paces(
        "olympic", 2, 30, 0, 2, 3,
        swim_min=1, swim_sec=50, bike_kmh=32, run_min=5, run_sec=0,
    )


@pytest.fixture
def laps(result):
    return build_race_laps(result, t1_minutes=2, t2_minutes=3)


def parse(tcx_bytes: bytes):
    return etree.fromstring(tcx_bytes)


class TestBuildRaceLaps:
    """Tests for turning a pace result into laps."""

    def test_lap_order(self, laps):
        assert [lap.discipline for lap in laps] == [
            Discipline.SWIM, Discipline.T1, Discipline.BIKE, Discipline.T2, Discipline.RUN,
        ]

    def test_durations_and_distances(self, laps):
        assert [lap.duration_seconds for lap in laps] == [1650, 120, 4500, 180, 3000]
        assert [lap.distance_meters for lap in laps] == [1500, 0, 40000, 0, 10000]

    def test_ironman_marathon_distance(self):
        result = compute_goal_paces("ironman", 11, 0, 0, 5, 5)
        laps = build_race_laps(result, 5, 5)

        assert laps[-1].distance_meters == 42195


class TestTCXEncoder:
    """Tests for the TCX document."""

    def test_declaration_and_root(self, laps):
        tcx_bytes = create_tcx(START, laps)
        root = parse(tcx_bytes)

        assert tcx_bytes.startswith(b"<?xml")
        assert root.tag == f"{{{TCX_NAMESPACE}}}TrainingCenterDatabase"

    def test_single_activity(self, laps):
        root = parse(create_tcx(START, laps))
        activities = root.findall("tcx:Activities/tcx:Activity", NS)

        assert len(activities) == 1
        assert activities[0].get("Sport") == "Other"
        assert activities[0].findtext("tcx:Id", namespaces=NS) == "2024-05-01T07:00:00.000Z"

    def test_lap_start_times_accumulate(self, laps):
        """Each lap starts where the previous one ended."""
        root = parse(create_tcx(START, laps))
        starts = [lap.get("StartTime") for lap in root.iter(f"{{{TCX_NAMESPACE}}}Lap")]

        assert starts == [
            "2024-05-01T07:00:00.000Z",
            "2024-05-01T07:27:30.000Z",
            "2024-05-01T07:29:30.000Z",
            "2024-05-01T08:44:30.000Z",
            "2024-05-01T08:47:30.000Z",
        ]

    def test_lap_fields(self, laps):
        root = parse(create_tcx(START, laps))
        first = root.find("tcx:Activities/tcx:Activity/tcx:Lap", NS)

        assert first.findtext("tcx:TotalTimeSeconds", namespaces=NS) == "1650"
        assert first.findtext("tcx:DistanceMeters", namespaces=NS) == "1500"
        assert first.findtext("tcx:Intensity", namespaces=NS) == "Active"

    def test_fractional_values(self):
        laps = [Lap(discipline=Discipline.RUN, duration_seconds=90.5, distance_meters=250.25)]
        root = parse(create_tcx(START, laps))
        lap = root.find("tcx:Activities/tcx:Activity/tcx:Lap", NS)

        assert lap.findtext("tcx:TotalTimeSeconds", namespaces=NS) == "90.5"
        assert lap.findtext("tcx:DistanceMeters", namespaces=NS) == "250.25"

    def test_aware_start_is_converted_to_utc(self, laps):
        start = datetime(2024, 5, 1, 9, 0, tzinfo=timezone(timedelta(hours=2)))
        root = parse(create_tcx(start, laps))

        assert root.findtext("tcx:Activities/tcx:Activity/tcx:Id", namespaces=NS) == "2024-05-01T07:00:00.000Z"

    def test_empty_laps(self):
        with pytest.raises(ExportError):
            TCXEncoder().encode(START, [])

    def test_encode_to_file(self, laps, tmp_path):
        path = TCXEncoder().encode_to_file(START, laps, tmp_path / "race.tcx")

        assert path.exists()
        assert len(parse(path.read_bytes()).findall(".//tcx:Lap", NS)) == 5


def test_format_timestamp_milliseconds():
    moment = datetime(2024, 5, 1, 7, 0, 0, 123456, tzinfo=timezone.utc)
    assert format_timestamp(moment) == "2024-05-01T07:00:00.123Z"
