"""Pace planning models.

This module defines Pydantic models for:
- Goal times and current-pace inputs
- Per-discipline paces and pace results
- Predicted-vs-goal comparisons
- Improvement suggestions
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .course import Course, CourseDistances


class PacingMode(str, Enum):
    """How a pace result was derived."""
    TIME_TO_PACE = "time_to_pace"   # goal time split by fixed percentages
    PACE_TO_TIME = "pace_to_time"   # current paces summed into a predicted time


class ComparisonStatus(str, Enum):
    """Predicted time relative to the goal."""
    SLOWER = "slower"
    FASTER = "faster"
    SAME = "same"

    @classmethod
    def from_difference(cls, difference_seconds: float) -> "ComparisonStatus":
        if difference_seconds > 0:
            return cls.SLOWER
        if difference_seconds < 0:
            return cls.FASTER
        return cls.SAME


class Pace(BaseModel):
    """A pace as a minutes/seconds display pair (per 100 m or per km)."""
    minutes: int = Field(..., ge=0)
    seconds: int = Field(..., ge=0, le=59)
    total_seconds: int = Field(..., ge=0, description="Pace in whole seconds per unit")

    class Config:
        frozen = True

    @classmethod
    def from_seconds(cls, total_seconds: float) -> "Pace":
        """Truncate to whole seconds and split into minutes and seconds."""
        whole = int(total_seconds)
        return cls(minutes=whole // 60, seconds=whole % 60, total_seconds=whole)

    @classmethod
    def from_parts(cls, minutes: int, seconds: int) -> "Pace":
        return cls.from_seconds(minutes * 60 + seconds)

    @property
    def formatted(self) -> str:
        return f"{self.minutes}:{self.seconds:02d}"


class GoalTime(BaseModel):
    """Target finish time (transitions included) and transition allowances."""
    hours: int = Field(0, ge=0, description="Goal hours (0-23 by convention)")
    minutes: int = Field(0, ge=0, description="Goal minutes (0-59 by convention)")
    seconds: int = Field(0, ge=0, description="Goal seconds (0-59 by convention)")
    t1_minutes: int = Field(0, ge=0, description="Swim-to-bike transition in minutes")
    t2_minutes: int = Field(0, ge=0, description="Bike-to-run transition in minutes")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {"hours": 2, "minutes": 30, "seconds": 0, "t1_minutes": 2, "t2_minutes": 3}
        }

    @property
    def total_seconds(self) -> int:
        return self.hours * 3600 + self.minutes * 60 + self.seconds

    @property
    def transition_seconds(self) -> int:
        return (self.t1_minutes + self.t2_minutes) * 60

    @property
    def race_time_seconds(self) -> int:
        """Goal time spent swimming, riding and running."""
        return self.total_seconds - self.transition_seconds


class CurrentPaceInput(BaseModel):
    """Current or expected per-discipline paces. All zero means "not provided"."""
    swim_minutes: int = Field(0, ge=0, description="Swim pace minutes per 100 m")
    swim_seconds: int = Field(0, ge=0, description="Swim pace seconds per 100 m")
    bike_kmh: float = Field(0, ge=0, description="Bike speed in km/h")
    run_minutes: int = Field(0, ge=0, description="Run pace minutes per km")
    run_seconds: int = Field(0, ge=0, description="Run pace seconds per km")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "swim_minutes": 1, "swim_seconds": 50,
                "bike_kmh": 32,
                "run_minutes": 5, "run_seconds": 0,
            }
        }

    @property
    def swim_pace_seconds(self) -> int:
        return self.swim_minutes * 60 + self.swim_seconds

    @property
    def run_pace_seconds(self) -> int:
        return self.run_minutes * 60 + self.run_seconds

    @property
    def is_empty(self) -> bool:
        return (
            self.swim_pace_seconds == 0
            and self.bike_kmh == 0
            and self.run_pace_seconds == 0
        )


class CurrentStats(BaseModel):
    """Current paces in raw units together with the course distances."""
    swim_per_100m_seconds: float = Field(..., ge=0, description="e.g. 2:10 = 130")
    bike_speed_kmh: float = Field(..., ge=0, description="e.g. 31")
    run_pace_seconds_per_km: float = Field(..., ge=0, description="e.g. 5:30 = 330")
    swim_distance_m: float = Field(..., gt=0)
    bike_distance_km: float = Field(..., gt=0)
    run_distance_km: float = Field(..., gt=0)

    class Config:
        frozen = True

    @property
    def has_all_rates(self) -> bool:
        return (
            self.swim_per_100m_seconds > 0
            and self.bike_speed_kmh > 0
            and self.run_pace_seconds_per_km > 0
        )

    @classmethod
    def from_paces(cls, distances: CourseDistances, paces: CurrentPaceInput) -> "CurrentStats":
        return cls(
            swim_per_100m_seconds=paces.swim_pace_seconds,
            bike_speed_kmh=paces.bike_kmh,
            run_pace_seconds_per_km=paces.run_pace_seconds,
            swim_distance_m=distances.swim_m,
            bike_distance_km=distances.bike_km,
            run_distance_km=distances.run_km,
        )


class PaceImprovement(BaseModel):
    """Time to shave from a pace-based leg (swim or run)."""
    reduce_seconds: float = Field(..., description="Seconds to take off the leg")
    reduce_formatted: str = Field(..., description="Amount as 'M분' or 'M분 S초'")
    new_pace_seconds: float = Field(..., description="New pace in seconds per unit")
    new_pace_formatted: str = Field(..., description="New pace as M:SS")
    pace_reduction_seconds: float = Field(..., description="Per-unit pace improvement in seconds")

    class Config:
        frozen = True


class SpeedImprovement(BaseModel):
    """Time to shave from the bike leg, expressed as a new speed."""
    reduce_seconds: float
    reduce_formatted: str
    new_speed_kmh: float = Field(..., description="New bike speed, 2 decimals")
    speed_increase_kmh: float = Field(..., description="Required km/h increase, 2 decimals")

    class Config:
        frozen = True


class ImprovementSuggestion(BaseModel):
    """Fixed-weight allocation of a positive gap across the three legs."""
    swim: PaceImprovement
    bike: SpeedImprovement
    run: PaceImprovement
    total_reduce_seconds: float = Field(..., description="Time allocated to swim, bike and run")
    transition_reduce_seconds: float = Field(..., description="Advisory share left to transitions")
    messages: List[str] = Field(default_factory=list)

    class Config:
        frozen = True


class Comparison(BaseModel):
    """Predicted time against the goal, with and without transitions."""
    total_difference_seconds: int = Field(..., description="Predicted minus goal; positive = slower")
    total_status: ComparisonStatus
    total_difference_formatted: str
    race_time_difference_seconds: int
    race_time_status: ComparisonStatus
    race_time_difference_formatted: str
    improvement: Optional[ImprovementSuggestion] = Field(
        None, description="Present only when the prediction is slower than the goal"
    )

    class Config:
        frozen = True


class PaceResult(BaseModel):
    """Per-discipline paces and times for a course and goal."""
    course: Course
    mode: PacingMode

    swim_pace: Pace = Field(..., description="Swim pace per 100 m")
    bike_speed_kmh: float = Field(..., ge=0)
    run_pace: Pace = Field(..., description="Run pace per km")

    swim_time: int = Field(..., description="Swim leg in seconds")
    bike_time: int = Field(..., description="Bike leg in seconds")
    run_time: int = Field(..., description="Run leg in seconds")

    is_world_record: bool

    total_goal_seconds: int
    total_goal_race_time_seconds: int
    total_predict_seconds: int
    total_predict_race_time_seconds: int

    comparison: Optional[Comparison] = None

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "course": "olympic",
                "mode": "pace_to_time",
                "swim_pace": {"minutes": 1, "seconds": 50, "total_seconds": 110},
                "bike_speed_kmh": 32,
                "run_pace": {"minutes": 5, "seconds": 0, "total_seconds": 300},
                "swim_time": 1650,
                "bike_time": 4500,
                "run_time": 3000,
                "is_world_record": False,
                "total_goal_seconds": 9000,
                "total_goal_race_time_seconds": 8700,
                "total_predict_seconds": 9150,
                "total_predict_race_time_seconds": 8850,
            }
        }

    @property
    def discipline_seconds(self) -> int:
        return self.swim_time + self.bike_time + self.run_time
