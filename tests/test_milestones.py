"""Tests for achievement evaluation and streak celebrations."""

from __future__ import annotations

from datetime import date

from streakwise.constants import DEFAULT_ACHIEVEMENTS
from streakwise.services.milestones import (
    HabitHistory,
    MetricSelector,
    UserAggregates,
    achievement_progress,
    celebration_content,
    count_perfect_days,
    evaluate_achievements,
    evaluate_streak_milestone,
    total_xp,
)

EVERY_DAY = {0, 1, 2, 3, 4, 5, 6}


def by_key(key: str):
    return next(a for a in DEFAULT_ACHIEVEMENTS if a.key == key)


class TestCatalog:
    def test_keys_are_unique(self):
        keys = [a.key for a in DEFAULT_ACHIEVEMENTS]
        assert len(keys) == len(set(keys))

    def test_every_entry_names_its_metric(self):
        assert all(isinstance(a.metric, MetricSelector) for a in DEFAULT_ACHIEVEMENTS)


class TestEvaluate:
    def test_first_week_awards(self):
        aggregates = UserAggregates(max_streak=7, total_completions=10, habit_count=1)
        keys = [a.key for a in evaluate_achievements(aggregates, DEFAULT_ACHIEVEMENTS, set())]
        assert keys == ["streak_3", "streak_7", "completions_10", "first_habit", "first_completion"]

    def test_no_duplicates_on_repeat(self):
        aggregates = UserAggregates(max_streak=30, total_completions=120, habit_count=3, perfect_days=7)
        first = evaluate_achievements(aggregates, DEFAULT_ACHIEVEMENTS, set())
        earned = {a.key for a in first}
        assert evaluate_achievements(aggregates, DEFAULT_ACHIEVEMENTS, earned) == []

    def test_already_earned_skipped(self):
        aggregates = UserAggregates(habit_count=5)
        keys = [a.key for a in evaluate_achievements(aggregates, DEFAULT_ACHIEVEMENTS, {"first_habit"})]
        assert keys == ["habits_3", "habits_5"]

    def test_special_metrics(self):
        aggregates = UserAggregates(max_strength=85, comebacks=3)
        keys = {a.key for a in evaluate_achievements(aggregates, DEFAULT_ACHIEVEMENTS, set())}
        assert keys == {"strength_strong", "comeback_3"}

    def test_progress_and_xp(self):
        assert achievement_progress(by_key("streak_7"), UserAggregates(max_streak=3)) == (3, 42)
        assert achievement_progress(by_key("streak_7"), UserAggregates(max_streak=40)) == (7, 100)
        assert total_xp([by_key("streak_3"), by_key("streak_7")]) == 75


class TestStreakMilestone:
    def test_exact_equality_only(self):
        assert evaluate_streak_milestone(7) == "streak_7"
        assert evaluate_streak_milestone(365) == "streak_365"
        assert evaluate_streak_milestone(8) is None
        assert evaluate_streak_milestone(0) is None

    def test_celebration_content(self):
        content = celebration_content("streak_7", 7, "Run")
        assert content.title == "One Week Strong!"
        assert "Run" in content.message

    def test_unknown_kind_falls_back(self):
        content = celebration_content("streak_1000", 1000)
        assert content.title == "Milestone Reached!"
        assert "1000-day" in content.message


class TestPerfectDays:
    def test_all_scheduled_habits_done(self):
        histories = [
            HabitHistory(EVERY_DAY, date(2024, 1, 1), [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)]),
            HabitHistory(EVERY_DAY, date(2024, 1, 1), [date(2024, 1, 1), date(2024, 1, 3)]),
        ]
        assert count_perfect_days(histories, date(2024, 1, 3)) == 2

    def test_habit_not_yet_created_does_not_count(self):
        histories = [
            HabitHistory(EVERY_DAY, date(2024, 1, 1), [date(2024, 1, 1), date(2024, 1, 2)]),
            HabitHistory(EVERY_DAY, date(2024, 1, 2), []),
        ]
        assert count_perfect_days(histories, date(2024, 1, 2)) == 1

    def test_no_habits(self):
        assert count_perfect_days([], date(2024, 1, 2)) == 0
