"""Clock, pace and difference formatting.

All clock helpers truncate to whole seconds; they never round up.
"""

from typing import Tuple

from ..models.pacing import ComparisonStatus


STATUS_LABELS = {
    "en": {
        ComparisonStatus.SLOWER: "slower",
        ComparisonStatus.FASTER: "faster",
        ComparisonStatus.SAME: "same",
    },
    "ko": {
        ComparisonStatus.SLOWER: "느림",
        ComparisonStatus.FASTER: "빠름",
        ComparisonStatus.SAME: "동일",
    },
}


def _check_non_negative(seconds: float) -> int:
    if seconds < 0:
        raise ValueError(f"Duration must be non-negative, got {seconds}")
    return int(seconds)


def seconds_to_hms(total_seconds: float) -> Tuple[int, int, int]:
    """Split a duration into (hours, minutes, seconds)."""
    whole = _check_non_negative(total_seconds)
    return whole // 3600, (whole % 3600) // 60, whole % 60


def format_clock(seconds: float) -> str:
    """
    Format a duration as a race clock.

    "H:MM:SS" from one hour up, "M:SS" from one minute up, otherwise "0:SS".

    Args:
        seconds: Non-negative duration in seconds

    Returns:
        Clock string, e.g. 3661 -> "1:01:01", 65 -> "1:05", 0 -> "0:00"
    """
    hours, minutes, secs = seconds_to_hms(seconds)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    if minutes > 0:
        return f"{minutes}:{secs:02d}"
    return f"0:{secs:02d}"


def format_clock_localized(seconds: float) -> str:
    """Format a duration as "H시간 M분 S초", "M분 S초" or "S초"."""
    hours, minutes, secs = seconds_to_hms(seconds)
    if hours > 0:
        return f"{hours}시간 {minutes}분 {secs}초"
    if minutes > 0:
        return f"{minutes}분 {secs}초"
    return f"{secs}초"


def format_hms(seconds: float) -> str:
    """Always-full "H:MM:SS" form."""
    hours, minutes, secs = seconds_to_hms(seconds)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def format_time_difference(difference_seconds: float, locale: str = "en") -> str:
    """
    Describe a predicted-minus-goal difference.

    Args:
        difference_seconds: Predicted minus goal. Positive means slower.
        locale: "en" or "ko"

    Returns:
        e.g. "0:01:00 slower", "0:02:30 빠름", "0:00:00 same"
    """
    labels = STATUS_LABELS.get(locale)
    if labels is None:
        raise ValueError(f"Unsupported locale: {locale}")
    status = ComparisonStatus.from_difference(difference_seconds)
    return f"{format_hms(abs(difference_seconds))} {labels[status]}"


def format_pace(seconds_per_unit: float) -> str:
    """Format a pace in seconds per unit as M:SS."""
    minutes = int(seconds_per_unit // 60)
    seconds = int(seconds_per_unit % 60)
    return f"{minutes}:{seconds:02d}"


def format_pace_time(minutes: int, seconds: int) -> str:
    """Format a pace pair as "M분 SS초"."""
    return f"{minutes}분 {seconds:02d}초"


def format_min_sec(seconds: float) -> str:
    """
    Format an amount of time to shave as "M분" or "M분 S초".

    The seconds part is rounded half-up; 60 rounds into the next minute.
    """
    if seconds < 0:
        raise ValueError(f"Duration must be non-negative, got {seconds}")
    minutes = int(seconds // 60)
    secs = int(seconds - minutes * 60 + 0.5)
    if secs == 60:
        minutes += 1
        secs = 0
    if secs == 0:
        return f"{minutes}분"
    return f"{minutes}분 {secs}초"
