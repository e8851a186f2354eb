"""Training analysis API routes.

Endpoints that average recorded activities, compare them with goal paces
and return the weekly rule-table plan.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..deps import (
    StravaClientFactory,
    get_analysis_service,
    get_optional_strava_oauth_flow,
    get_strava_client_factory,
    get_tokens,
)
from .strava import load_recent_activities
from ...integrations.strava import StravaOAuthFlow
from ...models.pacing import GoalTime
from ...models.training import (
    ActivityRecord,
    ActivityStats,
    GoalComparison,
    PersonalizedPlan,
    TrainingRecommendation,
)
from ...services.activity_analysis import ActivityAnalysisService
from ...services.token_store import TokenStore


router = APIRouter()
logger = logging.getLogger(__name__)


class AnalysisRequest(BaseModel):
    """Activities to average."""
    activities: List[ActivityRecord] = Field(default_factory=list)
    lookback_days: Optional[int] = Field(None, ge=1, description="Only count activities in this window")


class PlanGoalRequest(BaseModel):
    """Course and goal for a personalized plan."""
    course: str = Field(..., description="olympic or ironman")
    goal: GoalTime
    lookback_days: Optional[int] = Field(None, ge=1)


class PlanRequest(PlanGoalRequest):
    """Course, goal and the activities to plan from."""
    activities: List[ActivityRecord] = Field(default_factory=list)


@router.post("/analysis", response_model=ActivityStats)
async def analyze(
    request: AnalysisRequest,
    service: ActivityAnalysisService = Depends(get_analysis_service),
) -> ActivityStats:
    """Average activities into per-discipline paces and totals."""
    logger.info(f"[analyze] {len(request.activities)} activities, lookback={request.lookback_days}")
    return service.analyze_activities(request.activities, lookback_days=request.lookback_days)


@router.post("/plan", response_model=PersonalizedPlan)
async def create_plan(
    request: PlanRequest,
    service: ActivityAnalysisService = Depends(get_analysis_service),
) -> PersonalizedPlan:
    """
    Create a personalized plan from posted activities.

    Returns the goal-derived target paces, the current averages, the
    per-discipline comparison, the weekly plan and, when swim, bike and run
    averages all exist, the predicted finish.
    """
    logger.info(f"[create_plan] course={request.course}, activities={len(request.activities)}")
    return service.create_personalized_plan(
        request.activities,
        request.course,
        request.goal,
        lookback_days=request.lookback_days,
    )


@router.post("/plan/{athlete_id}", response_model=PersonalizedPlan)
async def create_plan_from_strava(
    athlete_id: str,
    request: PlanGoalRequest,
    service: ActivityAnalysisService = Depends(get_analysis_service),
    tokens: TokenStore = Depends(get_tokens),
    oauth_flow: Optional[StravaOAuthFlow] = Depends(get_optional_strava_oauth_flow),
    client_factory: StravaClientFactory = Depends(get_strava_client_factory),
) -> PersonalizedPlan:
    """Create a personalized plan from the athlete's recent Strava activities."""
    logger.info(f"[create_plan_from_strava] athlete={athlete_id}, course={request.course}")

    activities = await load_recent_activities(athlete_id, tokens, oauth_flow, client_factory)
    return service.create_personalized_plan(
        [a.to_record() for a in activities],
        request.course,
        request.goal,
        lookback_days=request.lookback_days,
    )


@router.post("/recommendations", response_model=List[TrainingRecommendation])
async def recommendations(
    comparison: GoalComparison,
    service: ActivityAnalysisService = Depends(get_analysis_service),
) -> List[TrainingRecommendation]:
    """Weekly sessions for each discipline behind target, highest priority first."""
    return service.generate_training_plan(comparison)
