"""Pace calculations."""

from .formatting import (
    format_clock,
    format_clock_localized,
    format_hms,
    format_min_sec,
    format_pace,
    format_pace_time,
    format_time_difference,
    seconds_to_hms,
)
from .improvement import can_allocate, suggest_improvement
from .pacing import (
    calculate_paces,
    compare_totals,
    compute_goal_paces,
    derive_paces_from_goal,
    is_world_record,
    predict_from_paces,
    select_mode,
)

__all__ = [
    # Formatting
    "format_clock",
    "format_clock_localized",
    "format_hms",
    "format_min_sec",
    "format_pace",
    "format_pace_time",
    "format_time_difference",
    "seconds_to_hms",
    # Improvement
    "can_allocate",
    "suggest_improvement",
    # Goal paces
    "calculate_paces",
    "compare_totals",
    "compute_goal_paces",
    "derive_paces_from_goal",
    "is_world_record",
    "predict_from_paces",
    "select_mode",
]
