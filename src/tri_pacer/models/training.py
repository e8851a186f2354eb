"""Training analysis models.

Activity records, averaged per-discipline stats, goal comparisons, the
weekly rule-table plan and exported laps.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .course import Course, Discipline
from .pacing import ComparisonStatus, PaceResult


class ActivityType(str, Enum):
    """Activity types that count towards triathlon training."""
    SWIM = "Swim"
    RIDE = "Ride"
    RUN = "Run"

    @property
    def discipline(self) -> Discipline:
        return {
            ActivityType.SWIM: Discipline.SWIM,
            ActivityType.RIDE: Discipline.BIKE,
            ActivityType.RUN: Discipline.RUN,
        }[self]


class ActivityRecord(BaseModel):
    """A single recorded workout."""
    type: str = Field(..., description="Activity type, e.g. Swim, Ride, Run")
    distance: float = Field(0, ge=0, description="Distance in meters")
    moving_time: float = Field(0, ge=0, description="Moving time in seconds")
    start_date: Optional[datetime] = None
    name: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {"type": "Run", "distance": 10000, "moving_time": 3000}
        }

    @property
    def activity_type(self) -> Optional[ActivityType]:
        try:
            return ActivityType(self.type)
        except ValueError:
            return None


class PaceStats(BaseModel):
    """Totals and average pace for swim (per 100 m) or run (per km)."""
    total_distance: float = 0
    total_time: float = 0
    average_pace: float = Field(0, description="Seconds per 100 m (swim) or per km (run)")
    session_count: int = 0


class SpeedStats(BaseModel):
    """Totals and average speed for the bike."""
    total_distance: float = 0
    total_time: float = 0
    average_speed: float = Field(0, description="km/h")
    session_count: int = 0


class ActivityStats(BaseModel):
    """Per-discipline averages over a set of activities."""
    swim: PaceStats = Field(default_factory=PaceStats)
    bike: SpeedStats = Field(default_factory=SpeedStats)
    run: PaceStats = Field(default_factory=PaceStats)


class DisciplineComparison(BaseModel):
    """Current average against a target pace or speed for one discipline."""
    current: str = Field(..., description="Current pace/speed text or '데이터 없음'")
    target: str
    difference: str = Field(..., description="e.g. '12초 느림', '1.5km/h 빠름', '목표 달성'")
    status: ComparisonStatus
    status_text: str = Field(..., description="Korean status label")
    has_data: bool = True
    gap: float = Field(0, description="Absolute gap in seconds (bike km/h scaled by 10)")


class GoalComparison(BaseModel):
    """Per-discipline comparison and the discipline to work on first."""
    swim: DisciplineComparison
    bike: DisciplineComparison
    run: DisciplineComparison
    priority: Optional[Discipline] = Field(
        None, description="Discipline with the largest gap; None without any data"
    )

    def for_discipline(self, discipline: Discipline) -> DisciplineComparison:
        return getattr(self, discipline.value)


class TrainingRecommendation(BaseModel):
    """Fixed weekly sessions for a discipline that is behind target."""
    discipline: Discipline
    priority: int = Field(..., ge=1, le=3, description="1 is highest")
    improvement_needed: str
    weekly_plan: Dict[str, str] = Field(..., description="Weekday to session description")


class Lap(BaseModel):
    """One segment of an exported training log."""
    discipline: Discipline
    duration_seconds: float = Field(..., ge=0)
    distance_meters: float = Field(0, ge=0)


class PersonalizedPlan(BaseModel):
    """Target paces, current averages, comparison and plan for one athlete."""
    course: Course
    goal_time_seconds: int
    target_paces: PaceResult
    current_stats: ActivityStats
    comparison: GoalComparison
    training_plan: List[TrainingRecommendation] = Field(default_factory=list)
    prediction: Optional[PaceResult] = Field(
        None, description="Finish predicted from current averages, when all three exist"
    )
