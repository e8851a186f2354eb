"""
TCX encoder for race-plan training logs.

Turns a computed pace plan into a lap-based Training Center XML file that
training platforms can import: one Activity with Sport="Other" and one Lap
per race segment (swim, T1, bike, T2, run).
"""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Sequence, Union

from lxml import etree

from ..exceptions import ExportError
from ..models.course import Discipline, course_distances
from ..models.pacing import PaceResult
from ..models.training import Lap


logger = logging.getLogger(__name__)


TCX_NAMESPACE = "http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2"
TCX_SPORT = "Other"
LAP_INTENSITY = "Active"


def _tag(name: str) -> str:
    return f"{{{TCX_NAMESPACE}}}{name}"


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO 8601 UTC timestamp with milliseconds, e.g. 2024-05-01T07:00:00.000Z."""
    moment = _as_utc(moment)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def build_race_laps(result: PaceResult, t1_minutes: int, t2_minutes: int) -> List[Lap]:
    """
    Build the lap sequence swim, T1, bike, T2, run for a pace result.

    Transitions carry their allowance as duration and zero distance.
    """
    distances = course_distances(result.course)
    return [
        Lap(discipline=Discipline.SWIM, duration_seconds=result.swim_time,
            distance_meters=round(distances.swim_m, 3)),
        Lap(discipline=Discipline.T1, duration_seconds=t1_minutes * 60, distance_meters=0),
        Lap(discipline=Discipline.BIKE, duration_seconds=result.bike_time,
            distance_meters=round(distances.bike_km * 1000, 3)),
        Lap(discipline=Discipline.T2, duration_seconds=t2_minutes * 60, distance_meters=0),
        Lap(discipline=Discipline.RUN, duration_seconds=result.run_time,
            distance_meters=round(distances.run_km * 1000, 3)),
    ]


class TCXEncoder:
    """
    Encodes lap sequences to TCX documents.

    Each lap's StartTime is the activity start plus the durations of all
    earlier laps.
    """

    def build_tree(self, start: datetime, laps: Sequence[Lap]) -> etree._Element:
        """Build the TrainingCenterDatabase element tree."""
        if not laps:
            raise ExportError("Cannot export a training log without laps")

        root = etree.Element(_tag("TrainingCenterDatabase"), nsmap={None: TCX_NAMESPACE})
        activities = etree.SubElement(root, _tag("Activities"))
        activity = etree.SubElement(activities, _tag("Activity"), Sport=TCX_SPORT)
        etree.SubElement(activity, _tag("Id")).text = format_timestamp(start)

        lap_start = _as_utc(start)
        for lap in laps:
            lap_elem = etree.SubElement(activity, _tag("Lap"), StartTime=format_timestamp(lap_start))
            etree.SubElement(lap_elem, _tag("TotalTimeSeconds")).text = _format_number(lap.duration_seconds)
            etree.SubElement(lap_elem, _tag("DistanceMeters")).text = _format_number(lap.distance_meters)
            etree.SubElement(lap_elem, _tag("Intensity")).text = LAP_INTENSITY
            lap_start += timedelta(seconds=lap.duration_seconds)

        return root

    def encode(self, start: datetime, laps: Sequence[Lap]) -> bytes:
        """
        Encode laps to TCX bytes.

        Args:
            start: Activity start time (naive values are taken as UTC)
            laps: Laps in order

        Returns:
            UTF-8 TCX document with XML declaration

        Raises:
            ExportError: If there are no laps
        """
        root = self.build_tree(start, laps)
        logger.debug(f"Encoded TCX with {len(laps)} laps starting {format_timestamp(start)}")
        return etree.tostring(root, xml_declaration=True, encoding="UTF-8", pretty_print=True)

    def encode_to_file(self, start: datetime, laps: Sequence[Lap], file_path: Union[str, Path]) -> Path:
        """Encode laps and write a .tcx file."""
        file_path = Path(file_path)
        file_path.write_bytes(self.encode(start, laps))
        return file_path


def create_tcx(start: datetime, laps: Sequence[Lap]) -> bytes:
    """
    Convenience function to encode laps to TCX bytes.

    Args:
        start: Activity start time
        laps: Laps in order

    Returns:
        TCX file contents as bytes
    """
    return TCXEncoder().encode(start, laps)
