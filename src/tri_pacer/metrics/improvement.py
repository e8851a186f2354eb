"""Improvement allocation across disciplines.

A positive gap between predicted and goal time is split with fixed weights:
15% swim, 40% bike, 15% run. The remaining 30% is left to transitions and is
reported as advice only.
"""

import logging

from ..exceptions import ZeroRateError
from ..models.pacing import (
    CurrentStats,
    ImprovementSuggestion,
    PaceImprovement,
    SpeedImprovement,
)
from .formatting import format_min_sec, format_pace


logger = logging.getLogger(__name__)


SWIM_SHARE = 0.15
BIKE_SHARE = 0.40
RUN_SHARE = 0.15
TRANSITION_SHARE = 0.30


def _reduced_leg_time(current_time: float, reduce_seconds: float, discipline: str) -> float:
    target_time = current_time - reduce_seconds
    if target_time <= 0:
        raise ValueError(
            f"Cannot take {reduce_seconds:.0f}s off a {current_time:.0f}s {discipline} leg"
        )
    return target_time


def can_allocate(current: CurrentStats, gap_seconds: float) -> bool:
    """
    True when every fixed share of the gap fits inside its current leg time.

    Aggressive goals can ask a leg to shed more time than it takes; there
    is no meaningful new pace for those, so no suggestion is made.
    """
    if gap_seconds <= 0 or not current.has_all_rates:
        return False
    swim_time = current.swim_per_100m_seconds * current.swim_distance_m / 100
    bike_time = current.bike_distance_km / current.bike_speed_kmh * 3600
    run_time = current.run_pace_seconds_per_km * current.run_distance_km
    return (
        gap_seconds * SWIM_SHARE < swim_time
        and gap_seconds * BIKE_SHARE < bike_time
        and gap_seconds * RUN_SHARE < run_time
    )


def suggest_improvement(current: CurrentStats, gap_seconds: float) -> ImprovementSuggestion:
    """
    Allocate a time gap across swim, bike and run.

    Args:
        current: Current paces and course distances
        gap_seconds: Predicted minus goal time, must be positive

    Returns:
        ImprovementSuggestion with the amount and the new pace or speed per leg

    Raises:
        ValueError: If the gap is not positive or a share exceeds a whole leg
        ZeroRateError: If the current bike speed is zero
    """
    if gap_seconds <= 0:
        raise ValueError(f"Gap must be positive, got {gap_seconds}")
    if current.bike_speed_kmh <= 0:
        raise ZeroRateError("bike_speed_kmh")

    swim_reduce = gap_seconds * SWIM_SHARE
    bike_reduce = gap_seconds * BIKE_SHARE
    run_reduce = gap_seconds * RUN_SHARE
    transition_reduce = gap_seconds * TRANSITION_SHARE

    # Swim: pace per 100 m over the swim distance
    swim_units = current.swim_distance_m / 100
    swim_time = current.swim_per_100m_seconds * swim_units
    new_swim_pace = _reduced_leg_time(swim_time, swim_reduce, "swim") / swim_units

    # Bike: distance over speed
    bike_time = current.bike_distance_km / current.bike_speed_kmh * 3600
    target_bike_time = _reduced_leg_time(bike_time, bike_reduce, "bike")
    new_bike_speed = current.bike_distance_km / (target_bike_time / 3600)

    # Run: pace per km over the run distance
    run_time = current.run_pace_seconds_per_km * current.run_distance_km
    new_run_pace = _reduced_leg_time(run_time, run_reduce, "run") / current.run_distance_km

    logger.debug(
        f"Allocated {gap_seconds}s gap: swim={swim_reduce:.1f} bike={bike_reduce:.1f} "
        f"run={run_reduce:.1f} transitions={transition_reduce:.1f}"
    )

    return ImprovementSuggestion(
        swim=PaceImprovement(
            reduce_seconds=swim_reduce,
            reduce_formatted=format_min_sec(swim_reduce),
            new_pace_seconds=new_swim_pace,
            new_pace_formatted=format_pace(new_swim_pace),
            pace_reduction_seconds=current.swim_per_100m_seconds - new_swim_pace,
        ),
        bike=SpeedImprovement(
            reduce_seconds=bike_reduce,
            reduce_formatted=format_min_sec(bike_reduce),
            new_speed_kmh=round(new_bike_speed, 2),
            speed_increase_kmh=round(new_bike_speed - current.bike_speed_kmh, 2),
        ),
        run=PaceImprovement(
            reduce_seconds=run_reduce,
            reduce_formatted=format_min_sec(run_reduce),
            new_pace_seconds=new_run_pace,
            new_pace_formatted=format_pace(new_run_pace),
            pace_reduction_seconds=current.run_pace_seconds_per_km - new_run_pace,
        ),
        total_reduce_seconds=swim_reduce + bike_reduce + run_reduce,
        transition_reduce_seconds=transition_reduce,
        messages=[
            f"나머지 약 {format_min_sec(transition_reduce)}는 전환 시간 등으로 단축 목표로 잡으세요.",
        ],
    )
