"""Daily focus: which of today's habits to do first."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Collection, Iterable, Optional

from .calendar import is_active_day, to_canonical_day
from .strength import round_half_up

PRIORITY_STRENGTH_CEILING = 40
PROTECT_STREAK_FLOOR = 7


@dataclass(slots=True)
class HabitSnapshot:
    """A habit as the focus view sees it on one day."""

    habit_id: int
    name: str
    active_days: Collection[int]
    completed_today: bool
    current_streak: int = 0
    strength: int = 0
    emoji: Optional[str] = None


@dataclass(slots=True)
class FocusHabit:
    habit_id: int
    name: str
    emoji: Optional[str]
    current_streak: int
    strength: int
    reason: str


@dataclass(slots=True)
class DailyFocus:
    day: date
    priority: list[FocusHabit] = field(default_factory=list)
    protect: list[FocusHabit] = field(default_factory=list)
    momentum: list[FocusHabit] = field(default_factory=list)
    completed: list[FocusHabit] = field(default_factory=list)
    not_scheduled: int = 0


def _priority_reason(strength: int) -> str:
    if strength < 20:
        return "New habit - build the foundation"
    return "Fragile - needs consistency"


def _protect_reason(streak: int) -> str:
    if streak >= 30:
        return f"{streak} day streak - keep it going!"
    if streak >= 21:
        return f"{streak} days - almost a month!"
    return f"{streak} day streak to protect"


def _momentum_reason(streak: int) -> str:
    if streak > 0:
        return f"{streak} day streak building"
    return "Start a new streak today"


def categorize_daily_focus(habits: Iterable[HabitSnapshot], as_of: date) -> DailyFocus:
    """Partition today's scheduled habits into focus buckets.

    The first matching rule wins: completed, then priority (strength below
    40, weakest first), then protect (streak of 7 or more, longest first),
    then momentum (strongest first). Habits not scheduled on ``as_of`` only
    add to ``not_scheduled``.
    """

    as_of = to_canonical_day(as_of)
    focus = DailyFocus(day=as_of)

    for habit in habits:
        if not is_active_day(habit.active_days, as_of):
            focus.not_scheduled += 1
            continue

        def entry(reason: str) -> FocusHabit:
            return FocusHabit(
                habit_id=habit.habit_id,
                name=habit.name,
                emoji=habit.emoji,
                current_streak=habit.current_streak,
                strength=habit.strength,
                reason=reason,
            )

        if habit.completed_today:
            focus.completed.append(entry("Done!"))
        elif habit.strength < PRIORITY_STRENGTH_CEILING:
            focus.priority.append(entry(_priority_reason(habit.strength)))
        elif habit.current_streak >= PROTECT_STREAK_FLOOR:
            focus.protect.append(entry(_protect_reason(habit.current_streak)))
        else:
            focus.momentum.append(entry(_momentum_reason(habit.current_streak)))

    focus.priority.sort(key=lambda h: h.strength)
    focus.protect.sort(key=lambda h: h.current_streak, reverse=True)
    focus.momentum.sort(key=lambda h: h.strength, reverse=True)
    return focus


@dataclass(frozen=True, slots=True)
class FocusMessage:
    message: str
    kind: str


def daily_score(habits: Iterable[HabitSnapshot], as_of: date) -> int:
    """Percent of habits scheduled on ``as_of`` already completed; 100 on rest days."""

    scheduled = [h for h in habits if is_active_day(h.active_days, as_of)]
    if not scheduled:
        return 100
    done = sum(1 for h in scheduled if h.completed_today)
    return round_half_up(done / len(scheduled) * 100)


def daily_message(habits: Iterable[HabitSnapshot], as_of: date, hour: int) -> FocusMessage:
    """Pick a motivational line from today's progress and the local ``hour``."""

    scheduled = [h for h in habits if is_active_day(h.active_days, as_of)]
    total = len(scheduled)
    done = sum(1 for h in scheduled if h.completed_today)

    if total == 0:
        return FocusMessage("No habits scheduled for today. Enjoy your rest day!", "rest")
    if done == total:
        return FocusMessage(
            "Perfect day! All habits completed. You're building something great.", "success"
        )

    progress = done / total
    if progress >= 0.75:
        return FocusMessage(f"Almost there! Just {total - done} more to go.", "almost")
    if progress >= 0.5:
        return FocusMessage("Halfway done! Keep the momentum going.", "progress")
    if done > 0:
        return FocusMessage(
            "Good start! Every completion is a vote for who you want to become.", "started"
        )
    if hour < 12:
        return FocusMessage(
            "Fresh start! Your morning habits set the tone for the day.", "morning"
        )
    if hour < 17:
        return FocusMessage(
            "Time to check in. What's one habit you can complete right now?", "afternoon"
        )
    return FocusMessage("Day's not over yet. Start small - one habit at a time.", "evening")


__all__ = [
    "DailyFocus",
    "FocusHabit",
    "FocusMessage",
    "HabitSnapshot",
    "categorize_daily_focus",
    "daily_message",
    "daily_score",
]
