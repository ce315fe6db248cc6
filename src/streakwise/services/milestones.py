"""Achievement and streak-celebration decisions.

Achievements are permanent and catalog driven: each catalog entry names the
user metric it is measured against and the threshold to reach. Celebrations
are one-shot notices fired when a habit's streak lands exactly on a
milestone length.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Collection, Iterable, Optional, Sequence

from .calendar import is_active_day, iter_days, to_canonical_day
from .streaks import completion_days

STREAK_MILESTONES = (7, 14, 21, 30, 50, 66, 100, 150, 200, 365)


class AchievementCategory(str, Enum):
    STREAK = "STREAK"
    COMPLETIONS = "COMPLETIONS"
    CONSISTENCY = "CONSISTENCY"
    SPECIAL = "SPECIAL"


class MetricSelector(str, Enum):
    """User aggregate an achievement threshold is compared against."""

    MAX_STREAK = "max_streak"
    TOTAL_COMPLETIONS = "total_completions"
    HABIT_COUNT = "habit_count"
    MAX_STRENGTH = "max_strength"
    COMEBACKS = "comebacks"
    PERFECT_DAYS = "perfect_days"


@dataclass(frozen=True, slots=True)
class AchievementDefinition:
    key: str
    name: str
    description: str
    emoji: str
    category: AchievementCategory
    metric: MetricSelector
    threshold: int
    xp_reward: int


@dataclass(slots=True)
class UserAggregates:
    """Snapshot of the user-level numbers achievements are measured against."""

    max_streak: int = 0
    total_completions: int = 0
    habit_count: int = 0
    max_strength: int = 0
    comebacks: int = 0
    perfect_days: int = 0

    def value_for(self, metric: MetricSelector) -> int:
        return int(getattr(self, metric.value))


def evaluate_achievements(
    aggregates: UserAggregates,
    catalog: Iterable[AchievementDefinition],
    already_earned_keys: Collection[str],
) -> list[AchievementDefinition]:
    """Catalog entries the user now qualifies for and has not earned yet.

    Catalog order is preserved. Feeding the result back into
    ``already_earned_keys`` makes a repeat call return nothing.
    """

    earned = set(already_earned_keys)
    newly: list[AchievementDefinition] = []
    for achievement in catalog:
        if achievement.key in earned:
            continue
        if aggregates.value_for(achievement.metric) >= achievement.threshold:
            newly.append(achievement)
            earned.add(achievement.key)
    return newly


def total_xp(achievements: Iterable[AchievementDefinition]) -> int:
    return sum(a.xp_reward for a in achievements)


def achievement_progress(achievement: AchievementDefinition, aggregates: UserAggregates) -> tuple[int, int]:
    """Return ``(progress, percent)`` toward an achievement, both capped at the threshold."""

    threshold = max(achievement.threshold, 1)
    progress = min(aggregates.value_for(achievement.metric), threshold)
    return progress, min(100, progress * 100 // threshold)


def evaluate_streak_milestone(new_streak: int) -> Optional[str]:
    """Celebration type for a streak that lands exactly on a milestone.

    Equality, not crossing: a streak that skips over a milestone in one
    recalculation does not fire it retroactively.
    """

    if new_streak in STREAK_MILESTONES:
        return f"streak_{new_streak}"
    return None


@dataclass(frozen=True, slots=True)
class CelebrationContent:
    title: str
    message: str


def celebration_content(kind: str, value: int, habit_name: Optional[str] = None) -> CelebrationContent:
    """Title and message for a celebration of ``kind``."""

    habit = habit_name or "your habit"
    this_habit = habit_name or "This habit"
    templates = {
        "streak_7": ("One Week Strong!", f"You've completed {habit} for 7 days straight. You're building a real habit!"),
        "streak_14": ("Two Weeks!", f"14 days of consistency with {habit}. You're proving this is who you are now."),
        "streak_21": ("Three Weeks!", f"21 days! {this_habit} is becoming automatic. Keep going!"),
        "streak_30": ("One Month!", f"30 days of {habit}! You've shown incredible dedication."),
        "streak_50": ("50 Days!", f"Half a hundred! {this_habit} is truly part of who you are now."),
        "streak_66": (
            "66 Days - Habit Formed!",
            f"Research says it takes 66 days to form a habit. {habit_name or 'This'} is now automatic!",
        ),
        "streak_100": ("100 Days!", f"Triple digits! Your commitment to {habit_name or 'this habit'} is extraordinary."),
        "streak_150": ("150 Days!", f"150 days of {habit}. This is simply part of your life now."),
        "streak_200": ("200 Days!", f"200 days! {this_habit} has become second nature."),
        "streak_365": ("One Year!", f"365 days of {habit}! You've transformed your life."),
        "perfect_week": ("Perfect Week!", "You completed every scheduled habit this week. That's dedication!"),
        "comeback": ("Great Comeback!", f"You recovered after missing {habit}. That's real resilience!"),
        "strength_strong": (
            "Habit Strength: Strong!",
            f"{habit_name or 'Your habit'} has reached strong status. It's becoming automatic!",
        ),
    }
    title, message = templates.get(
        kind, ("Milestone Reached!", f"You've hit a {value}-day milestone. Keep building!")
    )
    return CelebrationContent(title=title, message=message)


@dataclass(slots=True)
class HabitHistory:
    """Schedule and completions for one habit, used for cross-habit aggregates."""

    active_days: Collection[int]
    created_at: date | datetime
    completions: Iterable[date | datetime]


def count_perfect_days(histories: Sequence[HabitHistory], as_of: date) -> int:
    """Days on which every habit scheduled (and already created) was completed.

    Days with nothing scheduled are not perfect days.
    """

    if not histories:
        return 0
    prepared = [
        (h.active_days, to_canonical_day(h.created_at), completion_days(h.completions))
        for h in histories
    ]
    first_day = min(created for _, created, _ in prepared)
    perfect = 0
    for day in iter_days(first_day, to_canonical_day(as_of)):
        scheduled = [
            days for active, created, days in prepared
            if created <= day and is_active_day(active, day)
        ]
        if scheduled and all(day in days for days in scheduled):
            perfect += 1
    return perfect


__all__ = [
    "AchievementCategory",
    "AchievementDefinition",
    "CelebrationContent",
    "HabitHistory",
    "MetricSelector",
    "STREAK_MILESTONES",
    "UserAggregates",
    "achievement_progress",
    "celebration_content",
    "count_perfect_days",
    "evaluate_achievements",
    "evaluate_streak_milestone",
    "total_xp",
]
