"""Completion history analytics: weekday patterns, weekly trends and identity votes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from .calendar import (
    is_active_day,
    iter_days,
    sub_days,
    to_canonical_day,
    week_end,
    week_start,
    weekday_index,
)
from .milestones import HabitHistory
from .strength import round_half_up
from .streaks import completion_days

DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
PATTERN_WINDOW_WEEKS = 4
UNCATEGORIZED = "OTHER"


@dataclass(slots=True)
class DayCount:
    day: int
    day_name: str
    count: int


@dataclass(slots=True)
class CompletionPatterns:
    by_day_of_week: list[DayCount]
    best_day: Optional[DayCount]
    total_completions: int


@dataclass(slots=True)
class WeekRate:
    week_start: date
    completions: int
    possible: int
    rate: int


@dataclass(slots=True)
class WeeklyTrends:
    this_week: WeekRate
    last_week: WeekRate

    @property
    def change(self) -> int:
        return self.this_week.rate - self.last_week.rate


@dataclass(slots=True)
class CategoryVotes:
    category: str
    votes: int = 0
    habit_count: int = 0


@dataclass(slots=True)
class IdentityVotes:
    total_votes: int
    by_category: list[CategoryVotes] = field(default_factory=list)


def completion_patterns(
    completions: Iterable[date | datetime],
    as_of: date,
    *,
    weeks: int = PATTERN_WINDOW_WEEKS,
) -> CompletionPatterns:
    """Count completions per weekday over the last ``weeks`` weeks up to ``as_of``.

    ``completions`` holds one entry per completion row, so the same day
    completed for two habits counts twice. Days are ordered busiest first
    (Sunday=0 index breaks ties); ``best_day`` is None without completions.
    """

    as_of = to_canonical_day(as_of)
    since = sub_days(as_of, weeks * 7)
    counts = [0] * 7
    total = 0
    for value in completions:
        day = to_canonical_day(value)
        if since <= day <= as_of:
            counts[weekday_index(day)] += 1
            total += 1

    ordered = sorted(
        (DayCount(day=i, day_name=DAY_NAMES[i], count=c) for i, c in enumerate(counts)),
        key=lambda row: -row.count,
    )
    return CompletionPatterns(
        by_day_of_week=ordered,
        best_day=ordered[0] if total else None,
        total_completions=total,
    )


def week_rate(histories: Sequence[HabitHistory], start: date, end: date) -> WeekRate:
    """Completions against scheduled days for ``start``..``end`` across habits.

    Possible days are active days on or after each habit's creation; every
    completion inside the range counts.
    """

    completions = 0
    possible = 0
    for history in histories:
        days = completion_days(history.completions)
        completions += sum(1 for day in days if start <= day <= end)
        created = to_canonical_day(history.created_at)
        possible += sum(
            1
            for day in iter_days(max(start, created), end)
            if is_active_day(history.active_days, day)
        )
    return WeekRate(
        week_start=start,
        completions=completions,
        possible=possible,
        rate=round_half_up(completions / possible * 100) if possible else 0,
    )


def weekly_rates(histories: Sequence[HabitHistory], as_of: date, *, weeks: int) -> list[WeekRate]:
    """Rates for the last ``weeks`` weeks, oldest first; the current week stops at ``as_of``."""

    as_of = to_canonical_day(as_of)
    current = week_start(as_of)
    rates = []
    for offset in range(weeks - 1, -1, -1):
        start = sub_days(current, offset * 7)
        rates.append(week_rate(histories, start, min(week_end(start), as_of)))
    return rates


def weekly_trends(histories: Sequence[HabitHistory], as_of: date) -> WeeklyTrends:
    last_week, this_week = weekly_rates(histories, as_of, weeks=2)
    return WeeklyTrends(this_week=this_week, last_week=last_week)


def identity_votes(habits: Iterable[tuple[Optional[str], int]]) -> IdentityVotes:
    """Group ``(category, total_completions)`` pairs into votes per category.

    Every completion is a vote for the identity the habit's category stands
    for. Habits without a category are grouped under ``OTHER``.
    """

    groups: dict[str, CategoryVotes] = {}
    for category, completions in habits:
        key = category or UNCATEGORIZED
        group = groups.setdefault(key, CategoryVotes(category=key))
        group.votes += completions
        group.habit_count += 1
    ordered = sorted(groups.values(), key=lambda group: -group.votes)
    return IdentityVotes(total_votes=sum(g.votes for g in ordered), by_category=ordered)


__all__ = [
    "CategoryVotes",
    "CompletionPatterns",
    "DAY_NAMES",
    "DayCount",
    "IdentityVotes",
    "WeekRate",
    "WeeklyTrends",
    "completion_patterns",
    "identity_votes",
    "week_rate",
    "weekly_rates",
    "weekly_trends",
]
