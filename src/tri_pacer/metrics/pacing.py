"""Goal-pace derivation and predicted-vs-goal comparison.

Two ways to produce a PaceResult:

- time to pace: split the goal race time by fixed per-course percentages
  and derive the pace each leg needs.
- pace to time: turn current paces into leg times, sum them into a
  predicted finish and compare it with the goal.

Everything here is pure and synchronous.
"""

import logging
import math
from typing import Optional, Union

from ..exceptions import ZeroRateError
from ..models.course import (
    Course,
    course_distances,
    race_time_split,
    resolve_course,
    world_record_seconds,
)
from ..models.pacing import (
    Comparison,
    ComparisonStatus,
    CurrentPaceInput,
    CurrentStats,
    GoalTime,
    Pace,
    PaceResult,
    PacingMode,
)
from .formatting import format_time_difference
from .improvement import can_allocate, suggest_improvement


logger = logging.getLogger(__name__)


def is_world_record(course: Union[Course, str], total_goal_seconds: int) -> bool:
    """True when the goal beats the faster of the men's and women's records."""
    return total_goal_seconds < world_record_seconds(course).fastest


def derive_paces_from_goal(course: Union[Course, str], goal: GoalTime) -> PaceResult:
    """
    Derive per-discipline paces from a goal time.

    The race time (goal minus transitions) is split olympic 20/55/25 and
    ironman 15/60/25 across swim/bike/run, each share floored to whole
    seconds. The predicted totals equal the goal totals.

    Args:
        course: Course identifier
        goal: Goal finish time and transition allowances

    Returns:
        PaceResult in TIME_TO_PACE mode, without a comparison
    """
    course = resolve_course(course)
    distances = course_distances(course)
    split = race_time_split(course)

    # A goal shorter than its transitions leaves no race time to split
    race_time = max(0, goal.race_time_seconds)
    swim_time = math.floor(race_time * split.swim)
    bike_time = math.floor(race_time * split.bike)
    run_time = math.floor(race_time * split.run)

    swim_pace = Pace.from_seconds(math.floor(swim_time / distances.swim_units_100m))
    run_pace = Pace.from_seconds(math.floor(run_time / distances.run_km))
    if bike_time > 0:
        bike_speed = round(distances.bike_km / (bike_time / 3600), 1)
    else:
        bike_speed = 0.0

    return PaceResult(
        course=course,
        mode=PacingMode.TIME_TO_PACE,
        swim_pace=swim_pace,
        bike_speed_kmh=bike_speed,
        run_pace=run_pace,
        swim_time=swim_time,
        bike_time=bike_time,
        run_time=run_time,
        is_world_record=is_world_record(course, goal.total_seconds),
        total_goal_seconds=goal.total_seconds,
        total_goal_race_time_seconds=race_time,
        total_predict_seconds=goal.total_seconds,
        total_predict_race_time_seconds=race_time,
        comparison=None,
    )


def compare_totals(
    total_predict_seconds: int,
    total_goal_seconds: int,
    race_predict_seconds: int,
    race_goal_seconds: int,
    current_stats: Optional[CurrentStats] = None,
    locale: str = "en",
) -> Comparison:
    """
    Compare predicted totals with goal totals.

    Both the full totals and the transition-free race times are compared.
    When the prediction is slower and current stats with all three rates
    are given, an improvement suggestion for the gap is attached, unless a
    share of the gap is larger than the leg it would come from.
    """
    total_diff = total_predict_seconds - total_goal_seconds
    race_diff = race_predict_seconds - race_goal_seconds

    improvement = None
    if current_stats is not None and can_allocate(current_stats, total_diff):
        improvement = suggest_improvement(current_stats, total_diff)
    elif total_diff > 0 and current_stats is not None:
        logger.debug(f"No improvement suggestion for a {total_diff}s gap")

    return Comparison(
        total_difference_seconds=total_diff,
        total_status=ComparisonStatus.from_difference(total_diff),
        total_difference_formatted=format_time_difference(total_diff, locale),
        race_time_difference_seconds=race_diff,
        race_time_status=ComparisonStatus.from_difference(race_diff),
        race_time_difference_formatted=format_time_difference(race_diff, locale),
        improvement=improvement,
    )


def predict_from_paces(
    course: Union[Course, str],
    goal: GoalTime,
    paces: CurrentPaceInput,
    locale: str = "en",
) -> PaceResult:
    """
    Predict a finish time from current paces and compare it with the goal.

    Each leg time is floored to whole seconds:
    swim = pace/100m * swim_m/100, bike = km / kmh * 3600, run = pace/km * km.

    Raises:
        ZeroRateError: If the bike speed is zero
    """
    course = resolve_course(course)
    distances = course_distances(course)

    if paces.bike_kmh <= 0:
        raise ZeroRateError("bike_kmh", "Bike speed must be greater than zero to predict a finish time")

    swim_time = math.floor(paces.swim_pace_seconds * distances.swim_m / 100)
    bike_time = math.floor(distances.bike_km / paces.bike_kmh * 3600)
    run_time = math.floor(paces.run_pace_seconds * distances.run_km)

    total_predict = swim_time + bike_time + run_time
    total_predict_race = total_predict - goal.transition_seconds

    comparison = compare_totals(
        total_predict,
        goal.total_seconds,
        total_predict_race,
        goal.race_time_seconds,
        current_stats=CurrentStats.from_paces(distances, paces),
        locale=locale,
    )

    return PaceResult(
        course=course,
        mode=PacingMode.PACE_TO_TIME,
        swim_pace=Pace.from_parts(paces.swim_minutes, paces.swim_seconds),
        bike_speed_kmh=paces.bike_kmh,
        run_pace=Pace.from_parts(paces.run_minutes, paces.run_seconds),
        swim_time=swim_time,
        bike_time=bike_time,
        run_time=run_time,
        is_world_record=is_world_record(course, goal.total_seconds),
        total_goal_seconds=goal.total_seconds,
        total_goal_race_time_seconds=goal.race_time_seconds,
        total_predict_seconds=total_predict,
        total_predict_race_time_seconds=total_predict_race,
        comparison=comparison,
    )


def select_mode(paces: Optional[CurrentPaceInput], mode: Optional[PacingMode] = None) -> PacingMode:
    """Pick the pacing mode. Empty paces or zero bike speed mean no prediction."""
    if mode is not None:
        return PacingMode(mode)
    if paces is None or paces.is_empty or paces.bike_kmh == 0:
        return PacingMode.TIME_TO_PACE
    return PacingMode.PACE_TO_TIME


def calculate_paces(
    course: Union[Course, str],
    goal: GoalTime,
    paces: Optional[CurrentPaceInput] = None,
    mode: Optional[PacingMode] = None,
    locale: str = "en",
) -> PaceResult:
    """Object-form entry point behind compute_goal_paces."""
    selected = select_mode(paces, mode)
    logger.debug(f"Calculating paces for {course} in {selected.value} mode")
    if selected == PacingMode.PACE_TO_TIME:
        return predict_from_paces(course, goal, paces or CurrentPaceInput(), locale=locale)
    return derive_paces_from_goal(course, goal)


def compute_goal_paces(
    course: Union[Course, str],
    goal_h: int,
    goal_m: int,
    goal_s: int,
    t1: int,
    t2: int,
    swim_min: int = 0,
    swim_sec: int = 0,
    bike_kmh: float = 0,
    run_min: int = 0,
    run_sec: int = 0,
    mode: Optional[PacingMode] = None,
    locale: str = "en",
) -> PaceResult:
    """
    Compute goal paces and, when current paces are given, a comparison.

    Args:
        course: "olympic" or "ironman"
        goal_h, goal_m, goal_s: Goal finish time including transitions
        t1, t2: Transition allowances in minutes
        swim_min, swim_sec: Current swim pace per 100 m
        bike_kmh: Current bike speed
        run_min, run_sec: Current run pace per km
        mode: Force a mode; by default chosen from the pace input
        locale: Language of the difference text ("en" or "ko")

    Returns:
        PaceResult

    Raises:
        UnknownCourseError: If the course is not supported
        ZeroRateError: If pace_to_time is forced with a zero bike speed
    """
    goal = GoalTime(hours=goal_h, minutes=goal_m, seconds=goal_s, t1_minutes=t1, t2_minutes=t2)
    paces = CurrentPaceInput(
        swim_minutes=swim_min,
        swim_seconds=swim_sec,
        bike_kmh=bike_kmh,
        run_minutes=run_min,
        run_seconds=run_sec,
    )
    return calculate_paces(course, goal, paces, mode=mode, locale=locale)
