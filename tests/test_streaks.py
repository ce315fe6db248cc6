"""Tests for streak calculations.

Covers the behaviours the rest of the system leans on:
- current streak counting with an open (not yet completed) today
- non-active days neither extending nor breaking a run
- longest streak, misses and comeback gaps over the full history
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from streakwise.services.streaks import (
    calculate_current_streak,
    calculate_longest_streak,
    compute_streak_snapshot,
    count_consecutive_misses,
    find_streak_start_date,
    is_new_milestone,
    is_streak_at_risk,
    longest_recovered_gap,
)

EVERY_DAY = {0, 1, 2, 3, 4, 5, 6}
WEEKDAYS = {1, 2, 3, 4, 5}


def days(*values: int, month: int = 1) -> list[date]:
    return [date(2024, month, v) for v in values]


class TestCurrentStreak:
    def test_three_consecutive_days(self):
        assert calculate_current_streak(days(1, 2, 3), EVERY_DAY, date(2024, 1, 3)) == 3

    def test_open_today_does_not_break_streak(self):
        """Today not yet done: the streak is counted up to yesterday."""
        assert calculate_current_streak(days(1, 2, 3), EVERY_DAY, date(2024, 1, 4)) == 3

    def test_missed_yesterday_resets(self):
        assert calculate_current_streak(days(1, 2, 3), EVERY_DAY, date(2024, 1, 5)) == 0

    def test_weekend_is_skipped_for_weekday_habit(self):
        """Friday + Monday on a Mon-Fri habit is a streak of 2."""
        completions = [date(2024, 1, 5), date(2024, 1, 8)]
        assert calculate_current_streak(completions, WEEKDAYS, date(2024, 1, 8)) == 2

    def test_datetimes_are_normalized(self):
        completions = [
            datetime(2024, 1, 1, 8, tzinfo=timezone.utc),
            datetime(2024, 1, 2, 22, tzinfo=timezone.utc),
        ]
        assert calculate_current_streak(completions, EVERY_DAY, date(2024, 1, 2)) == 2

    def test_empty_inputs_are_neutral(self):
        assert calculate_current_streak([], EVERY_DAY, date(2024, 1, 2)) == 0
        assert calculate_current_streak(days(1, 2), set(), date(2024, 1, 2)) == 0
        assert find_streak_start_date([], EVERY_DAY, date(2024, 1, 2)) is None

    def test_scan_limit_caps_the_walk(self):
        completions = [date(2024, 1, 1) + timedelta(days=i) for i in range(50)]
        as_of = completions[-1]
        assert calculate_current_streak(completions, EVERY_DAY, as_of, limit=10) == 10

    def test_streak_start_date(self):
        completions = days(1, 3, 4, 5)
        assert find_streak_start_date(completions, EVERY_DAY, date(2024, 1, 5)) == date(2024, 1, 3)


class TestStreakProperties:
    def test_completing_as_of_never_decreases_streak(self):
        history = set(days(1, 2, 4, 5, 6, 9, 10))
        for offset in range(15):
            as_of = date(2024, 1, 1) + timedelta(days=offset)
            before = calculate_current_streak(history, EVERY_DAY, as_of)
            after = calculate_current_streak(history | {as_of}, EVERY_DAY, as_of)
            assert after >= before

    def test_non_active_day_completion_changes_nothing(self):
        base = days(3, 4, 5)  # Wed-Fri
        with_saturday = base + [date(2024, 1, 6)]
        for as_of in (date(2024, 1, 6), date(2024, 1, 7), date(2024, 1, 8)):
            assert calculate_current_streak(base, WEEKDAYS, as_of) == calculate_current_streak(
                with_saturday, WEEKDAYS, as_of
            )
            assert calculate_current_streak(base, WEEKDAYS, as_of) == 3


class TestLongestStreak:
    def test_longest_run_in_history(self):
        completions = days(1, 2, 3, 5, 6, 7, 8, 9)
        assert calculate_longest_streak(completions, EVERY_DAY, date(2024, 1, 1), date(2024, 1, 10)) == 5

    def test_days_before_creation_are_ignored(self):
        completions = days(1, 2, 3)
        assert calculate_longest_streak(completions, EVERY_DAY, date(2024, 1, 2), date(2024, 1, 3)) == 2

    def test_no_completions(self):
        assert calculate_longest_streak([], EVERY_DAY, date(2024, 1, 1), date(2024, 1, 10)) == 0


class TestAtRisk:
    def test_live_streak_with_today_open_is_at_risk(self):
        assert is_streak_at_risk(days(1, 2, 3), EVERY_DAY, 3, date(2024, 1, 4))

    def test_completed_today_is_safe(self):
        assert not is_streak_at_risk(days(1, 2, 3, 4), EVERY_DAY, 4, date(2024, 1, 4))

    def test_rest_day_is_never_at_risk(self):
        assert not is_streak_at_risk(days(3, 4, 5), WEEKDAYS, 3, date(2024, 1, 6))

    def test_no_streak_no_risk(self):
        assert not is_streak_at_risk([], EVERY_DAY, 0, date(2024, 1, 4))


class TestMissesAndComebacks:
    def test_consecutive_misses_since_last_completion(self):
        assert count_consecutive_misses(days(1), EVERY_DAY, date(2024, 1, 1), date(2024, 1, 5)) == 3

    def test_misses_stop_at_creation_day(self):
        assert count_consecutive_misses([], EVERY_DAY, date(2024, 1, 3), date(2024, 1, 5)) == 2

    def test_longest_recovered_gap_ignores_trailing_gap(self):
        completions = days(1, 5, 7)
        assert longest_recovered_gap(completions, EVERY_DAY, date(2024, 1, 1), date(2024, 1, 12)) == 3


class TestMilestoneCrossing:
    @pytest.mark.parametrize(
        "current, previous, expected",
        [(7, 6, 7), (8, 7, None), (22, 5, 7), (30, 29, 30), (3, 0, None)],
    )
    def test_is_new_milestone(self, current, previous, expected):
        assert is_new_milestone(current, previous) == expected


class TestSnapshot:
    def test_snapshot_bundles_everything(self):
        snapshot = compute_streak_snapshot(days(1, 2, 3), EVERY_DAY, date(2024, 1, 1), date(2024, 1, 4))
        assert snapshot.current_streak == 3
        assert snapshot.longest_streak == 3
        assert snapshot.total_completions == 3
        assert snapshot.last_completed_at == date(2024, 1, 3)
        assert snapshot.streak_started_at == date(2024, 1, 1)
        assert snapshot.consecutive_misses == 0
        assert snapshot.at_risk is True

    def test_longest_never_drops_below_stored_value(self):
        snapshot = compute_streak_snapshot(
            days(1), EVERY_DAY, date(2024, 1, 1), date(2024, 1, 1), previous_longest=12
        )
        assert snapshot.longest_streak == 12
