"""Streak calculations over a habit's completion history.

Every function takes the evaluation day (``as_of``) explicitly instead of
reading the clock. Non-active days are transparent: they neither extend nor
break a streak.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Collection, Iterable, Optional

from .calendar import is_active_day, iter_days, sub_days, to_canonical_day

MAX_SCAN_DAYS = 400


def completion_days(completions: Iterable[date | datetime]) -> set[date]:
    """Collapse raw completion dates into a set of canonical days."""

    return {to_canonical_day(c) for c in completions}


def _scan_start(days: set[date], active_days: Collection[int], as_of: date) -> date:
    # Today only counts once it is done; otherwise the day is still open.
    if is_active_day(active_days, as_of) and as_of in days:
        return as_of
    return sub_days(as_of, 1)


def _walk_current_run(
    days: set[date], active_days: Collection[int], as_of: date, limit: int
) -> tuple[int, Optional[date]]:
    streak = 0
    started: Optional[date] = None
    cursor = _scan_start(days, active_days, as_of)
    for _ in range(limit):
        if is_active_day(active_days, cursor):
            if cursor not in days:
                break
            streak += 1
            started = cursor
        cursor = sub_days(cursor, 1)
    return streak, started


def calculate_current_streak(
    completions: Iterable[date | datetime],
    active_days: Collection[int],
    as_of: date,
    *,
    limit: int = MAX_SCAN_DAYS,
) -> int:
    """Count consecutive completed active days ending at ``as_of`` (or the day before)."""

    days = completion_days(completions)
    if not days or not active_days:
        return 0
    streak, _ = _walk_current_run(days, active_days, to_canonical_day(as_of), limit)
    return streak


def find_streak_start_date(
    completions: Iterable[date | datetime],
    active_days: Collection[int],
    as_of: date,
    *,
    limit: int = MAX_SCAN_DAYS,
) -> Optional[date]:
    """Earliest day still inside the unbroken current run, or None without a streak."""

    days = completion_days(completions)
    if not days or not active_days:
        return None
    _, started = _walk_current_run(days, active_days, to_canonical_day(as_of), limit)
    return started


def calculate_longest_streak(
    completions: Iterable[date | datetime],
    active_days: Collection[int],
    created_at: date | datetime,
    as_of: date,
) -> int:
    """Longest run of completed active days between habit creation and ``as_of``.

    Scans every calendar day rather than only the completion dates so that
    stretches with no completions at all still reset the run.
    """

    days = completion_days(completions)
    if not days or not active_days:
        return 0

    longest = 0
    run = 0
    for day in iter_days(to_canonical_day(created_at), to_canonical_day(as_of)):
        if not is_active_day(active_days, day):
            continue
        if day in days:
            run += 1
            longest = max(longest, run)
        else:
            run = 0
    return longest


def is_streak_at_risk(
    completions: Iterable[date | datetime],
    active_days: Collection[int],
    current_streak: int,
    as_of: date,
) -> bool:
    """True when a live streak needs today's completion to survive."""

    if current_streak <= 0:
        return False
    as_of = to_canonical_day(as_of)
    if not is_active_day(active_days, as_of):
        return False
    return as_of not in completion_days(completions)


def count_consecutive_misses(
    completions: Iterable[date | datetime],
    active_days: Collection[int],
    created_at: date | datetime,
    as_of: date,
    *,
    limit: int = MAX_SCAN_DAYS,
) -> int:
    """Number of active days missed in a row before ``as_of``.

    Counting stops at the most recent completed active day or at the habit's
    creation day; an open (not yet completed) ``as_of`` is not a miss.
    """

    if not active_days:
        return 0
    days = completion_days(completions)
    as_of = to_canonical_day(as_of)
    first_day = to_canonical_day(created_at)
    misses = 0
    cursor = _scan_start(days, active_days, as_of)
    for _ in range(limit):
        if cursor < first_day:
            break
        if is_active_day(active_days, cursor):
            if cursor in days:
                break
            misses += 1
        cursor = sub_days(cursor, 1)
    return misses


def longest_recovered_gap(
    completions: Iterable[date | datetime],
    active_days: Collection[int],
    created_at: date | datetime,
    as_of: date,
) -> int:
    """Largest run of consecutive missed active days that ended in a completion."""

    days = completion_days(completions)
    if not days or not active_days:
        return 0

    best = 0
    gap = 0
    for day in iter_days(to_canonical_day(created_at), to_canonical_day(as_of)):
        if not is_active_day(active_days, day):
            continue
        if day in days:
            best = max(best, gap)
            gap = 0
        else:
            gap += 1
    return best


def is_new_milestone(current_streak: int, previous_streak: int) -> Optional[int]:
    """Return the first streak milestone crossed between two streak values."""

    for milestone in (7, 21, 30, 66, 100, 365):
        if current_streak >= milestone > previous_streak:
            return milestone
    return None


@dataclass(slots=True)
class StreakSnapshot:
    """Everything the streak record stores for one habit."""

    current_streak: int
    longest_streak: int
    total_completions: int
    last_completed_at: Optional[date]
    streak_started_at: Optional[date]
    consecutive_misses: int
    at_risk: bool


def compute_streak_snapshot(
    completions: Iterable[date | datetime],
    active_days: Collection[int],
    created_at: date | datetime,
    as_of: date,
    *,
    previous_longest: int = 0,
    limit: int = MAX_SCAN_DAYS,
) -> StreakSnapshot:
    """Recompute a habit's streak record from scratch.

    ``longest_streak`` is max'd against ``previous_longest`` so a stored
    historical best never decreases after a recalculation.
    """

    days = completion_days(completions)
    as_of = to_canonical_day(as_of)
    current = calculate_current_streak(days, active_days, as_of, limit=limit)
    longest = calculate_longest_streak(days, active_days, created_at, as_of)
    return StreakSnapshot(
        current_streak=current,
        longest_streak=max(longest, current, previous_longest),
        total_completions=len(days),
        last_completed_at=max(days) if days else None,
        streak_started_at=find_streak_start_date(days, active_days, as_of, limit=limit),
        consecutive_misses=count_consecutive_misses(
            days, active_days, created_at, as_of, limit=limit
        ),
        at_risk=is_streak_at_risk(days, active_days, current, as_of),
    )


__all__ = [
    "MAX_SCAN_DAYS",
    "StreakSnapshot",
    "calculate_current_streak",
    "calculate_longest_streak",
    "completion_days",
    "compute_streak_snapshot",
    "count_consecutive_misses",
    "find_streak_start_date",
    "is_new_milestone",
    "is_streak_at_risk",
    "longest_recovered_gap",
]
