"""Tests for habit strength scoring."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from streakwise.services.strength import (
    StrengthFactors,
    build_strength_report,
    calculate_consistency_rate,
    calculate_habit_strength,
    calculate_recovery_rate,
    calculate_trend,
    get_strength_label,
    is_stale,
    round_half_up,
    summarize_strengths,
)

EVERY_DAY = {0, 1, 2, 3, 4, 5, 6}
WEEKDAYS = {1, 2, 3, 4, 5}


def factors(**overrides) -> StrengthFactors:
    values = dict(
        current_streak=0,
        longest_streak=0,
        total_completions=0,
        consistency_last_30_days=0,
        recovery_rate=0,
        habit_age_days=0,
        recent_trend=0,
    )
    values.update(overrides)
    return StrengthFactors(**values)


class TestComposite:
    def test_maxed_factors_score_100(self):
        scores = calculate_habit_strength(
            factors(
                current_streak=30,
                total_completions=100,
                consistency_last_30_days=100,
                recovery_rate=100,
                recent_trend=1,
            )
        )
        assert scores.strength == 100
        assert scores.current_streak_score == 100
        assert scores.longevity_score == 100
        assert scores.trend_score == 100

    def test_streak_and_longevity_saturate(self):
        at_cap = calculate_habit_strength(factors(current_streak=30, total_completions=100))
        beyond = calculate_habit_strength(factors(current_streak=365, total_completions=5000))
        assert beyond.current_streak_score == at_cap.current_streak_score == 100
        assert beyond.longevity_score == at_cap.longevity_score == 100

    def test_strength_stays_in_bounds_for_wild_inputs(self):
        for streak in (0, 1, 10, 1000):
            for consistency in (-50, 0, 55, 150):
                for trend in (-5, -1, 0, 1, 5):
                    scores = calculate_habit_strength(
                        factors(
                            current_streak=streak,
                            total_completions=streak * 2,
                            consistency_last_30_days=consistency,
                            recovery_rate=consistency,
                            recent_trend=trend,
                        )
                    )
                    assert 0 <= scores.strength <= 100

    def test_trend_maps_to_score(self):
        assert calculate_habit_strength(factors(recent_trend=-1)).trend_score == 0
        assert calculate_habit_strength(factors(recent_trend=0)).trend_score == 50
        assert calculate_habit_strength(factors(recent_trend=1)).trend_score == 100

    def test_rounding_is_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1
        assert round_half_up(71.43) == 71


class TestLabels:
    @pytest.mark.parametrize(
        "strength, label, color",
        [
            (100, "Strong", "green"),
            (80, "Strong", "green"),
            (79, "Building", "emerald"),
            (40, "Developing", "yellow"),
            (20, "Fragile", "orange"),
            (19, "New", "gray"),
            (0, "New", "gray"),
        ],
    )
    def test_thresholds(self, strength, label, color):
        result = get_strength_label(strength)
        assert result.label == label
        assert result.color == color


class TestConsistency:
    def test_five_of_seven(self):
        completions = [date(2024, 1, d) for d in range(1, 6)]
        assert calculate_consistency_rate(completions, EVERY_DAY, 7, date(2024, 1, 7)) == 71

    def test_only_active_days_count(self):
        completions = [date(2024, 1, d) for d in range(1, 6)]
        assert calculate_consistency_rate(completions, WEEKDAYS, 7, date(2024, 1, 7)) == 100

    def test_bounds(self):
        completions = [date(2024, 1, 1) + timedelta(days=i) for i in range(0, 60, 3)]
        for window in (1, 7, 30, 90):
            rate = calculate_consistency_rate(completions, EVERY_DAY, window, date(2024, 2, 15))
            assert 0 <= rate <= 100

    def test_degenerate_inputs(self):
        assert calculate_consistency_rate([], set(), 30, date(2024, 1, 1)) == 0
        assert calculate_consistency_rate([date(2024, 1, 1)], EVERY_DAY, 0, date(2024, 1, 1)) == 0


class TestRecovery:
    def test_never_completed_scores_zero(self):
        result = calculate_recovery_rate([], EVERY_DAY, date(2024, 1, 1), date(2024, 1, 10))
        assert result.rate == 0

    def test_never_missed_scores_100(self):
        completions = [date(2024, 1, d) for d in range(1, 5)]
        result = calculate_recovery_rate(completions, EVERY_DAY, date(2024, 1, 1), date(2024, 1, 5))
        assert result.rate == 100
        assert result.missed_count == 0

    def test_half_the_misses_recovered(self):
        """Jan 2 is missed then recovered; Jan 4 is missed and today is still open."""
        completions = [date(2024, 1, 1), date(2024, 1, 3)]
        result = calculate_recovery_rate(completions, EVERY_DAY, date(2024, 1, 1), date(2024, 1, 5))
        assert (result.rate, result.missed_count, result.recovered_count) == (50, 2, 1)


class TestTrend:
    def test_improving(self):
        recent = [date(2024, 1, 15) - timedelta(days=i) for i in range(7)]
        assert calculate_trend(recent, EVERY_DAY, date(2024, 1, 15)) == 1

    def test_declining(self):
        older = [date(2024, 1, 15) - timedelta(days=i) for i in range(7, 14)]
        assert calculate_trend(older, EVERY_DAY, date(2024, 1, 15)) == -1

    def test_stable(self):
        both = [date(2024, 1, 15) - timedelta(days=i) for i in range(14)]
        assert calculate_trend(both, EVERY_DAY, date(2024, 1, 15)) == 0


class TestReportAndSummary:
    def test_report_carries_raw_counts(self):
        completions = [date(2024, 1, 1), date(2024, 1, 3)]
        report = build_strength_report(
            completions,
            EVERY_DAY,
            date(2024, 1, 1),
            date(2024, 1, 5),
            current_streak=0,
            longest_streak=1,
            total_completions=2,
        )
        assert report.missed_days_count == 2
        assert report.recovery_count == 1
        assert 0 <= report.scores.strength <= 100

    def test_is_stale(self):
        now = datetime(2024, 1, 1, 12, tzinfo=timezone.utc)
        hour = timedelta(hours=1)
        assert is_stale(None, now, hour)
        assert is_stale(datetime(2024, 1, 1, 10), now, hour)
        assert not is_stale(datetime(2024, 1, 1, 11, 30), now, hour)

    def test_summary_ignores_new_habits_for_weakest(self):
        summary = summarize_strengths([(1, 85), (2, 50), (3, 10)])
        assert summary.total_habits == 3
        assert summary.counts["Strong"] == 1
        assert summary.counts["Developing"] == 1
        assert summary.counts["New"] == 1
        assert summary.average_strength == 48
        assert summary.weakest_habit_id == 2

    def test_empty_summary(self):
        summary = summarize_strengths([])
        assert summary.total_habits == 0
        assert summary.weakest_habit_id is None
