"""Tests for improvement allocation across disciplines."""

import pytest

from tri_pacer.exceptions import ZeroRateError
from tri_pacer.metrics.improvement import (
    BIKE_SHARE,
    RUN_SHARE,
    SWIM_SHARE,
    TRANSITION_SHARE,
    can_allocate,
    suggest_improvement,
)
from tri_pacer.models.pacing import CurrentStats


@pytest.fixture
def olympic_stats():
    """1:50/100m swim, 32 km/h bike, 5:00/km run over olympic distances."""
    return CurrentStats(
        swim_per_100m_seconds=110,
        bike_speed_kmh=32,
        run_pace_seconds_per_km=300,
        swim_distance_m=1500,
        bike_distance_km=40,
        run_distance_km=10,
    )


class TestShares:
    """Tests for the fixed allocation weights."""

    def test_shares_sum_to_one(self):
        assert SWIM_SHARE + BIKE_SHARE + RUN_SHARE + TRANSITION_SHARE == pytest.approx(1.0)

    def test_thousand_second_gap(self, olympic_stats):
        """1000 s splits 150/400/150 with 300 left to transitions."""
        suggestion = suggest_improvement(olympic_stats, 1000)

        assert suggestion.swim.reduce_seconds == pytest.approx(150)
        assert suggestion.bike.reduce_seconds == pytest.approx(400)
        assert suggestion.run.reduce_seconds == pytest.approx(150)
        assert suggestion.transition_reduce_seconds == pytest.approx(300)
        assert suggestion.total_reduce_seconds == pytest.approx(700)

    def test_reduce_formatted(self, olympic_stats):
        suggestion = suggest_improvement(olympic_stats, 1000)

        assert suggestion.swim.reduce_formatted == "2분 30초"
        assert suggestion.bike.reduce_formatted == "6분 40초"
        assert suggestion.run.reduce_formatted == "2분 30초"


class TestNewTargets:
    """Tests for the new paces and speed after the reduction."""

    def test_swim_pace(self, olympic_stats):
        """1650 s swim minus 150 s over 15 units is 1:40/100m."""
        suggestion = suggest_improvement(olympic_stats, 1000)

        assert suggestion.swim.new_pace_seconds == pytest.approx(100)
        assert suggestion.swim.new_pace_formatted == "1:40"
        assert suggestion.swim.pace_reduction_seconds == pytest.approx(10)

    def test_bike_speed(self, olympic_stats):
        """4500 s ride minus 400 s is 40 km in 4100 s."""
        suggestion = suggest_improvement(olympic_stats, 1000)

        assert suggestion.bike.new_speed_kmh == pytest.approx(35.12)
        assert suggestion.bike.speed_increase_kmh == pytest.approx(3.12)

    def test_run_pace(self, olympic_stats):
        suggestion = suggest_improvement(olympic_stats, 1000)

        assert suggestion.run.new_pace_seconds == pytest.approx(285)
        assert suggestion.run.new_pace_formatted == "4:45"
        assert suggestion.run.pace_reduction_seconds == pytest.approx(15)

    def test_transition_message(self, olympic_stats):
        suggestion = suggest_improvement(olympic_stats, 1000)

        assert len(suggestion.messages) == 1
        assert "5분" in suggestion.messages[0]
        assert "전환" in suggestion.messages[0]


class TestInvalidInput:
    """Tests for gaps and rates that cannot be allocated."""

    @pytest.mark.parametrize("gap", [0, -10])
    def test_non_positive_gap(self, olympic_stats, gap):
        with pytest.raises(ValueError, match="Gap must be positive"):
            suggest_improvement(olympic_stats, gap)

    def test_zero_bike_speed(self, olympic_stats):
        stats = olympic_stats.model_copy(update={"bike_speed_kmh": 0})

        with pytest.raises(ZeroRateError):
            suggest_improvement(stats, 100)

    def test_gap_larger_than_leg(self, olympic_stats):
        """A share that would take a leg to zero or below is rejected."""
        with pytest.raises(ValueError, match="swim"):
            suggest_improvement(olympic_stats, 20000)


class TestCanAllocate:
    """Tests for whether a gap fits inside the current leg times."""

    def test_gap_within_every_leg(self, olympic_stats):
        assert can_allocate(olympic_stats, 10000) is True

    def test_swim_share_equal_to_swim_leg(self, olympic_stats):
        """15% of 11000 s is the whole 1650 s swim."""
        assert can_allocate(olympic_stats, 11000) is False

    def test_gap_larger_than_leg(self, olympic_stats):
        assert can_allocate(olympic_stats, 20000) is False

    @pytest.mark.parametrize("gap", [0, -10])
    def test_non_positive_gap(self, olympic_stats, gap):
        assert can_allocate(olympic_stats, gap) is False

    def test_missing_rate(self, olympic_stats):
        stats = olympic_stats.model_copy(update={"bike_speed_kmh": 0})
        assert can_allocate(stats, 100) is False

    def test_allocatable_gap_is_suggested(self, olympic_stats):
        assert can_allocate(olympic_stats, 10000)
        suggestion = suggest_improvement(olympic_stats, 10000)
        assert suggestion.swim.new_pace_seconds > 0
