"""Activity analysis service.

This service handles:
- Averaging recent Swim/Ride/Run activities into current paces
- Comparing current averages with goal paces
- The fixed rule-table weekly plan for disciplines behind target
- Personalized plans combining all of the above
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Union

from ..metrics.formatting import format_pace_time
from ..metrics.pacing import calculate_paces, derive_paces_from_goal
from ..models.course import Course, Discipline, resolve_course
from ..models.pacing import (
    ComparisonStatus,
    CurrentPaceInput,
    GoalTime,
    PaceResult,
    PacingMode,
)
from ..models.training import (
    ActivityRecord,
    ActivityStats,
    ActivityType,
    DisciplineComparison,
    GoalComparison,
    PersonalizedPlan,
    TrainingRecommendation,
)


logger = logging.getLogger(__name__)


NO_DATA = "데이터 없음"
GOAL_REACHED = "목표 달성"

STATUS_TEXT = {
    ComparisonStatus.SLOWER: "목표보다 느림",
    ComparisonStatus.FASTER: "목표보다 빠름",
    ComparisonStatus.SAME: GOAL_REACHED,
}

# Bike gaps are in km/h; scale them to be comparable with seconds of pace
BIKE_GAP_SCALE = 10

IMPROVEMENT_LABELS = {
    Discipline.SWIM: "수영 페이스 개선 필요",
    Discipline.BIKE: "사이클 속도 개선 필요",
    Discipline.RUN: "달리기 페이스 개선 필요",
}

WEEKLY_PLANS: Dict[Discipline, Dict[str, str]] = {
    Discipline.SWIM: {
        "tuesday": "테크닉 중심 2000m (드릴 30분 + 메인 30분)",
        "thursday": "인터벌 훈련 100m × 10개 (휴식 20초)",
        "saturday": "장거리 수영 3000m (목표 페이스보다 5초 빠르게)",
    },
    Discipline.BIKE: {
        "wednesday": "템포 라이딩 60분 (목표 강도 85%)",
        "friday": "인터벌 훈련 5분 × 5세트 (휴식 2분)",
        "sunday": "장거리 라이딩 90분 (에어로 포지션 연습)",
    },
    Discipline.RUN: {
        "monday": "6km 템포런 (목표 페이스보다 10초 빠르게)",
        "wednesday": "인터벌 400m × 6개 (휴식 1분)",
        "saturday": "자전거 후 5km 러닝 브릭훈련",
    },
}


def _format_pace_seconds(seconds: float) -> str:
    return format_pace_time(int(seconds // 60), int(seconds % 60))


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class ActivityAnalysisService:
    """Service for turning recorded activities into pace comparisons and plans."""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    def analyze_activities(
        self,
        activities: Iterable[ActivityRecord],
        lookback_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> ActivityStats:
        """
        Sum and average activities per discipline.

        Averages:
        - swim pace = time / (distance / 100), seconds per 100 m
        - bike speed = (distance / 1000) / (time / 3600), km/h
        - run pace = time / (distance / 1000), seconds per km

        Args:
            activities: Activity records; types other than Swim/Ride/Run are ignored
            lookback_days: Only count activities started within this many days
            now: Reference time for the lookback window (defaults to UTC now)

        Returns:
            ActivityStats with zero averages where a discipline has no data
        """
        stats = ActivityStats()
        cutoff = None
        if lookback_days is not None:
            cutoff = _as_utc(now or datetime.now(timezone.utc)) - timedelta(days=lookback_days)

        for activity in activities:
            activity_type = activity.activity_type
            if activity_type is None:
                continue
            if cutoff is not None and activity.start_date is not None:
                if _as_utc(activity.start_date) < cutoff:
                    continue

            bucket = getattr(stats, activity_type.discipline.value)
            bucket.total_distance += activity.distance
            bucket.total_time += activity.moving_time
            bucket.session_count += 1

        if stats.swim.total_distance > 0:
            stats.swim.average_pace = stats.swim.total_time / (stats.swim.total_distance / 100)
        if stats.bike.total_time > 0:
            stats.bike.average_speed = (stats.bike.total_distance / 1000) / (stats.bike.total_time / 3600)
        if stats.run.total_distance > 0:
            stats.run.average_pace = stats.run.total_time / (stats.run.total_distance / 1000)

        self.logger.info(
            f"Analyzed activities: swim={stats.swim.session_count} "
            f"bike={stats.bike.session_count} run={stats.run.session_count}"
        )
        return stats

    def predict_from_stats(
        self,
        stats: ActivityStats,
        course: Union[Course, str],
        goal: GoalTime,
    ) -> PaceResult:
        """
        Feed averaged paces into the pace calculator.

        Predicts a finish time when all three averages exist, otherwise
        falls back to goal-derived paces.
        """
        has_all = (
            stats.swim.average_pace > 0
            and stats.bike.average_speed > 0
            and stats.run.average_pace > 0
        )
        if not has_all:
            return calculate_paces(course, goal, mode=PacingMode.TIME_TO_PACE)

        paces = CurrentPaceInput(
            swim_minutes=int(stats.swim.average_pace // 60),
            swim_seconds=int(stats.swim.average_pace % 60),
            bike_kmh=stats.bike.average_speed,
            run_minutes=int(stats.run.average_pace // 60),
            run_seconds=int(stats.run.average_pace % 60),
        )
        return calculate_paces(course, goal, paces, mode=PacingMode.PACE_TO_TIME, locale="ko")

    def _compare_pace(self, current: float, target_seconds: int) -> DisciplineComparison:
        """Pace comparison: a larger current pace is slower."""
        target_text = _format_pace_seconds(target_seconds)
        if current <= 0:
            return DisciplineComparison(
                current=NO_DATA,
                target=target_text,
                difference=NO_DATA,
                status=ComparisonStatus.SAME,
                status_text=NO_DATA,
                has_data=False,
            )

        diff = current - target_seconds
        status = ComparisonStatus.from_difference(diff)
        if status == ComparisonStatus.SAME:
            difference = GOAL_REACHED
        else:
            label = "느림" if status == ComparisonStatus.SLOWER else "빠름"
            difference = f"{math.floor(abs(diff))}초 {label}"

        return DisciplineComparison(
            current=_format_pace_seconds(current),
            target=target_text,
            difference=difference,
            status=status,
            status_text=STATUS_TEXT[status],
            gap=abs(diff),
        )

    def _compare_speed(self, current: float, target_kmh: float) -> DisciplineComparison:
        """Speed comparison: a smaller current speed is slower."""
        target_text = f"{target_kmh}km/h"
        if current <= 0:
            return DisciplineComparison(
                current=NO_DATA,
                target=target_text,
                difference=NO_DATA,
                status=ComparisonStatus.SAME,
                status_text=NO_DATA,
                has_data=False,
            )

        diff = current - target_kmh
        status = ComparisonStatus.from_difference(-diff)
        if status == ComparisonStatus.SAME:
            difference = GOAL_REACHED
        else:
            label = "느림" if status == ComparisonStatus.SLOWER else "빠름"
            difference = f"{abs(diff):.1f}km/h {label}"

        return DisciplineComparison(
            current=f"{current:.1f}km/h",
            target=target_text,
            difference=difference,
            status=status,
            status_text=STATUS_TEXT[status],
            gap=abs(diff) * BIKE_GAP_SCALE,
        )

    def compare_with_goal(self, stats: ActivityStats, target: PaceResult) -> GoalComparison:
        """
        Compare current averages with target paces.

        The priority discipline is the one with the largest gap among those
        with data; ties go to the earlier discipline in race order.
        """
        swim = self._compare_pace(stats.swim.average_pace, target.swim_pace.total_seconds)
        bike = self._compare_speed(stats.bike.average_speed, target.bike_speed_kmh)
        run = self._compare_pace(stats.run.average_pace, target.run_pace.total_seconds)

        priority = None
        best_gap = -1.0
        for discipline, comparison in (
            (Discipline.SWIM, swim),
            (Discipline.BIKE, bike),
            (Discipline.RUN, run),
        ):
            if comparison.has_data and comparison.gap > best_gap:
                priority = discipline
                best_gap = comparison.gap

        return GoalComparison(swim=swim, bike=bike, run=run, priority=priority)

    def generate_training_plan(self, comparison: GoalComparison) -> List[TrainingRecommendation]:
        """Fixed weekly sessions for each discipline slower than target, highest priority first."""
        recommendations = []
        for discipline in (Discipline.SWIM, Discipline.BIKE, Discipline.RUN):
            result = comparison.for_discipline(discipline)
            if result.status != ComparisonStatus.SLOWER:
                continue
            recommendations.append(
                TrainingRecommendation(
                    discipline=discipline,
                    priority=1 if comparison.priority == discipline else 2,
                    improvement_needed=f"{IMPROVEMENT_LABELS[discipline]}: {result.difference}",
                    weekly_plan=dict(WEEKLY_PLANS[discipline]),
                )
            )
        return sorted(recommendations, key=lambda r: r.priority)

    def create_personalized_plan(
        self,
        activities: Iterable[ActivityRecord],
        course: Union[Course, str],
        goal: GoalTime,
        lookback_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> PersonalizedPlan:
        """
        Build a personalized plan from recorded activities and a goal.

        Args:
            activities: Recent activity records
            course: Course identifier
            goal: Goal time and transitions
            lookback_days: Optional activity window
            now: Reference time for the window

        Returns:
            PersonalizedPlan
        """
        course = resolve_course(course)
        self.logger.info(f"Creating personalized plan for {course.value}, goal={goal.total_seconds}s")

        target_paces = derive_paces_from_goal(course, goal)
        current_stats = self.analyze_activities(activities, lookback_days=lookback_days, now=now)
        comparison = self.compare_with_goal(current_stats, target_paces)
        training_plan = self.generate_training_plan(comparison)

        prediction = self.predict_from_stats(current_stats, course, goal)
        if prediction.mode != PacingMode.PACE_TO_TIME:
            prediction = None

        return PersonalizedPlan(
            course=course,
            goal_time_seconds=goal.total_seconds,
            target_paces=target_paces,
            current_stats=current_stats,
            comparison=comparison,
            training_plan=training_plan,
            prediction=prediction,
        )


# Singleton instance
_activity_analysis_service: Optional[ActivityAnalysisService] = None


def get_activity_analysis_service() -> ActivityAnalysisService:
    """Get the activity analysis service singleton."""
    global _activity_analysis_service
    if _activity_analysis_service is None:
        _activity_analysis_service = ActivityAnalysisService()
    return _activity_analysis_service
