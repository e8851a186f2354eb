"""Pace calculation API routes.

Endpoints for course reference data, goal-pace calculation and
improvement allocation.
"""

import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from ...exceptions import ValidationError
from ...metrics.improvement import suggest_improvement
from ...metrics.pacing import calculate_paces
from ...models.course import COURSE_DISTANCES, RACE_TIME_SPLITS, WORLD_RECORDS
from ...models.pacing import (
    CurrentPaceInput,
    CurrentStats,
    GoalTime,
    ImprovementSuggestion,
    PaceResult,
    PacingMode,
)


router = APIRouter()
logger = logging.getLogger(__name__)


class PaceCalculationRequest(BaseModel):
    """Request body for a pace calculation."""
    course: str = Field(..., description="olympic or ironman")
    goal: GoalTime
    paces: Optional[CurrentPaceInput] = Field(None, description="Current paces; omit for goal-derived paces")
    mode: Optional[PacingMode] = Field(None, description="Force a mode; chosen from paces by default")
    locale: Literal["en", "ko"] = "en"

    class Config:
        json_schema_extra = {
            "example": {
                "course": "olympic",
                "goal": {"hours": 2, "minutes": 30, "seconds": 0, "t1_minutes": 2, "t2_minutes": 3},
                "paces": {"swim_minutes": 1, "swim_seconds": 50, "bike_kmh": 32,
                          "run_minutes": 5, "run_seconds": 0},
            }
        }


class ImprovementRequest(BaseModel):
    """Request body for an improvement allocation."""
    current: CurrentStats
    gap_seconds: float = Field(..., gt=0, description="Predicted minus goal time in seconds")


class CourseInfo(BaseModel):
    course: str
    distances: Dict[str, float]
    world_record: Dict[str, int]
    race_time_split: Dict[str, float]


class CoursesResponse(BaseModel):
    courses: List[CourseInfo]


@router.get("/courses", response_model=CoursesResponse)
async def list_courses() -> Dict[str, Any]:
    """
    Get the supported courses with distances, world records and the
    race-time split used for goal-derived paces.
    """
    courses = []
    for course, distances in COURSE_DISTANCES.items():
        split = RACE_TIME_SPLITS[course]
        courses.append({
            "course": course.value,
            "distances": distances.to_dict(),
            "world_record": WORLD_RECORDS[course].to_dict(),
            "race_time_split": {"swim": split.swim, "bike": split.bike, "run": split.run},
        })
    return {"courses": courses}


@router.post("/calculate", response_model=PaceResult)
async def calculate(request: PaceCalculationRequest) -> PaceResult:
    """
    Calculate per-discipline paces for a goal time.

    Without current paces (or with a zero bike speed) the goal race time
    is split by fixed percentages. With current paces a finish time is
    predicted and compared with the goal, including an improvement
    allocation when the prediction is slower.
    """
    logger.info(
        f"[calculate] course={request.course}, goal={request.goal.total_seconds}s, "
        f"mode={request.mode.value if request.mode else 'auto'}"
    )

    try:
        return calculate_paces(
            request.course,
            request.goal,
            request.paces,
            mode=request.mode,
            locale=request.locale,
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


@router.post("/improvement", response_model=ImprovementSuggestion)
async def improvement(request: ImprovementRequest) -> ImprovementSuggestion:
    """Allocate a time gap across swim, bike and run."""
    logger.info(f"[improvement] gap={request.gap_seconds}s")

    try:
        return suggest_improvement(request.current, request.gap_seconds)
    except ValueError as e:
        raise ValidationError(str(e), field="gap_seconds") from e
