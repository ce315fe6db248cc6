"""Weekly review generation.

A review summarizes one ISO week (Monday to Sunday) across all of a user's
habits: completion rates, comparison with the previous week, and a short set
of rule-based wins, warnings and a focus suggestion.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Collection, Iterable, Optional, Sequence

from .calendar import is_active_day, iter_days, to_canonical_day, week_end, week_start
from .strength import round_half_up
from .streaks import completion_days

REVIEW_STREAK_MILESTONES = (7, 14, 21, 30, 50, 66, 100)


@dataclass(slots=True)
class HabitWeek:
    """One habit's schedule and completions as input to a weekly review."""

    habit_id: int
    name: str
    active_days: Collection[int]
    created_at: date | datetime
    completions: Iterable[date | datetime]
    current_streak: int = 0
    emoji: Optional[str] = None


@dataclass(slots=True)
class HabitPerformance:
    habit_id: int
    habit_name: str
    emoji: Optional[str]
    completed: int
    possible: int
    rate: int
    streak: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HabitPerformance":
        return cls(**{name: data.get(name) for name in cls.__dataclass_fields__})


@dataclass(slots=True)
class StreakMilestoneNote:
    habit_name: str
    milestone: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StreakMilestoneNote":
        return cls(habit_name=data["habit_name"], milestone=int(data["milestone"]))


@dataclass(slots=True)
class WeeklyReviewData:
    week_start: date
    week_end: date
    completion_rate: int
    total_completed: int
    total_possible: int
    previous_week_rate: Optional[int]
    change_from_previous: Optional[int]
    best_habit_id: Optional[int]
    worst_habit_id: Optional[int]
    longest_streak_habit_id: Optional[int]
    wins: list[str] = field(default_factory=list)
    needs_attention: list[str] = field(default_factory=list)
    focus_suggestion: Optional[str] = None
    new_streak_milestones: list[StreakMilestoneNote] = field(default_factory=list)
    habit_performance: list[HabitPerformance] = field(default_factory=list)


def performance_to_json(rows: Sequence[HabitPerformance | StreakMilestoneNote]) -> list[dict]:
    """Serialize structured review rows for a JSON column."""

    return [asdict(row) for row in rows]


def should_auto_generate(as_of: date, review_week_start: date, *, min_weekday: int = 3) -> bool:
    """Whether enough of the week has elapsed to build its review automatically.

    ``min_weekday`` uses the Sunday=0 convention, so the default 3 means
    Wednesday or later. Weeks that are already over always qualify.
    """

    as_of = to_canonical_day(as_of)
    start = week_start(review_week_start)
    if as_of < start:
        return False
    if as_of > week_end(start):
        return True
    offset_needed = 6 if min_weekday == 0 else min_weekday - 1
    return (as_of - start).days >= offset_needed


def _habit_performance(habit: HabitWeek, start: date, end: date) -> HabitPerformance:
    # Every completion in the week counts; only the possible days follow the schedule.
    completed = sum(1 for day in completion_days(habit.completions) if start <= day <= end)
    created = to_canonical_day(habit.created_at)
    possible = sum(
        1 for day in iter_days(max(start, created), end) if is_active_day(habit.active_days, day)
    )
    return HabitPerformance(
        habit_id=habit.habit_id,
        habit_name=habit.name,
        emoji=habit.emoji,
        completed=completed,
        possible=possible,
        rate=round_half_up(completed / possible * 100) if possible else 0,
        streak=habit.current_streak,
    )


def _wins(
    rate: int, change: Optional[int], rows: Sequence[HabitPerformance]
) -> list[str]:
    wins: list[str] = []
    if rate >= 80:
        wins.append("Excellent week! You hit most of your habits.")
    if change is not None and change > 10:
        wins.append(f"You improved {abs(change)}% from last week!")
    perfect = [row.habit_name for row in rows if row.possible > 0 and row.rate == 100]
    if perfect:
        wins.append(f"Perfect week for {', '.join(perfect)}!")
    streaks = [f"{row.habit_name} ({row.streak} days)" for row in rows if row.streak >= 7]
    if streaks:
        wins.append(f"Strong streaks: {', '.join(streaks)}")
    return wins


def _focus_suggestion(rate: int, struggling: Sequence[HabitPerformance]) -> str:
    if struggling:
        weakest = min(struggling, key=lambda row: row.rate)
        target = math.ceil(weakest.possible / 2)
        return (
            f"Focus on {weakest.habit_name} this week. "
            f"Try to complete it at least {target} times."
        )
    if rate < 60:
        return "Try starting your day with your first habit. Morning momentum carries through!"
    if rate < 80:
        return "You're close to a great week! Stack your habits together for better consistency."
    return "Keep up the great work! Consider adding a new habit or increasing frequency."


def generate_weekly_review(
    habits: Iterable[HabitWeek],
    review_week_start: date,
    previous_week_rate: Optional[int] = None,
) -> WeeklyReviewData:
    """Build the review for the ISO week containing ``review_week_start``."""

    start = week_start(review_week_start)
    end = week_end(start)
    rows = [_habit_performance(habit, start, end) for habit in habits]

    total_possible = sum(row.possible for row in rows)
    total_completed = sum(row.completed for row in rows)
    rate = round_half_up(total_completed / total_possible * 100) if total_possible else 0
    change = rate - previous_week_rate if previous_week_rate is not None else None

    scheduled = [row for row in rows if row.possible > 0]
    # Compare exact fractions; rounded rates can tie where the real ones do not.
    best = max(scheduled, key=lambda row: row.completed / row.possible, default=None)
    worst = min(scheduled, key=lambda row: row.completed / row.possible, default=None)
    longest = max(rows, key=lambda row: row.streak, default=None)

    struggling = [row for row in scheduled if row.rate < 50]
    needs_attention: list[str] = []
    if struggling:
        names = ", ".join(row.habit_name for row in struggling)
        needs_attention.append(f"{names} need more focus")
    if change is not None and change < -10:
        needs_attention.append(f"Completion rate dropped {abs(change)}% from last week")

    return WeeklyReviewData(
        week_start=start,
        week_end=end,
        completion_rate=rate,
        total_completed=total_completed,
        total_possible=total_possible,
        previous_week_rate=previous_week_rate,
        change_from_previous=change,
        best_habit_id=best.habit_id if best else None,
        worst_habit_id=worst.habit_id if worst else None,
        longest_streak_habit_id=longest.habit_id if longest else None,
        wins=_wins(rate, change, rows),
        needs_attention=needs_attention,
        focus_suggestion=_focus_suggestion(rate, struggling),
        new_streak_milestones=[
            StreakMilestoneNote(habit_name=row.habit_name, milestone=row.streak)
            for row in rows
            if row.streak in REVIEW_STREAK_MILESTONES
        ],
        habit_performance=rows,
    )


__all__ = [
    "HabitPerformance",
    "HabitWeek",
    "REVIEW_STREAK_MILESTONES",
    "StreakMilestoneNote",
    "WeeklyReviewData",
    "generate_weekly_review",
    "performance_to_json",
    "should_auto_generate",
]
