"""Course distances and world-record reference times.

Both tables are fixed constant data. They are exposed through read-only
mappings so callers cannot mutate them after import.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Union

from ..exceptions import UnknownCourseError


class Course(str, Enum):
    """Supported triathlon course profiles."""
    OLYMPIC = "olympic"
    IRONMAN = "ironman"


class Discipline(str, Enum):
    """Race segments in start order."""
    SWIM = "swim"
    T1 = "t1"
    BIKE = "bike"
    T2 = "t2"
    RUN = "run"


@dataclass(frozen=True)
class CourseDistances:
    """Course distances in kilometers."""
    swim_km: float
    bike_km: float
    run_km: float

    @property
    def swim_m(self) -> float:
        return self.swim_km * 1000

    @property
    def swim_units_100m(self) -> float:
        """Number of 100 m units in the swim leg."""
        return self.swim_km * 10

    def to_dict(self) -> dict:
        return {
            "swim_km": self.swim_km,
            "bike_km": self.bike_km,
            "run_km": self.run_km,
        }


@dataclass(frozen=True)
class WorldRecord:
    """Best known finish times in seconds."""
    men: int
    women: int

    @property
    def fastest(self) -> int:
        return min(self.men, self.women)

    def to_dict(self) -> dict:
        return {"men": self.men, "women": self.women}


@dataclass(frozen=True)
class DisciplineSplit:
    """Share of race time (transitions excluded) allotted to each leg."""
    swim: float
    bike: float
    run: float


COURSE_DISTANCES: Mapping[Course, CourseDistances] = MappingProxyType({
    Course.OLYMPIC: CourseDistances(swim_km=1.5, bike_km=40, run_km=10),
    Course.IRONMAN: CourseDistances(swim_km=3.8, bike_km=180, run_km=42.195),
})

WORLD_RECORDS: Mapping[Course, WorldRecord] = MappingProxyType({
    Course.OLYMPIC: WorldRecord(men=6049, women=6808),      # 1:40:49 / 1:53:28
    Course.IRONMAN: WorldRecord(men=27339, women=29893),    # 7:35:39 / 8:18:13
})

# Typical race-time distribution used when no current paces are given
RACE_TIME_SPLITS: Mapping[Course, DisciplineSplit] = MappingProxyType({
    Course.OLYMPIC: DisciplineSplit(swim=0.20, bike=0.55, run=0.25),
    Course.IRONMAN: DisciplineSplit(swim=0.15, bike=0.60, run=0.25),
})


def resolve_course(course: Union[Course, str]) -> Course:
    """Resolve a course identifier, raising UnknownCourseError if unsupported."""
    if isinstance(course, Course):
        return course
    try:
        return Course(str(course).strip().lower())
    except ValueError:
        raise UnknownCourseError(str(course)) from None


def course_distances(course: Union[Course, str]) -> CourseDistances:
    """Look up swim/bike/run distances for a course."""
    return COURSE_DISTANCES[resolve_course(course)]


def world_record_seconds(course: Union[Course, str]) -> WorldRecord:
    """Look up the men's and women's record times for a course."""
    return WORLD_RECORDS[resolve_course(course)]


def race_time_split(course: Union[Course, str]) -> DisciplineSplit:
    return RACE_TIME_SPLITS[resolve_course(course)]
