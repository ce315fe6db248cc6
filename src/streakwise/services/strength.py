"""Habit strength scoring.

Strength estimates how automatic a habit has become. It blends five
independently normalized sub-scores:

- current streak (25%), logarithmic, saturating at 30 days
- 30-day consistency (25%)
- longevity (20%), logarithmic on lifetime completions, saturating at 100
- recovery (15%), how often a miss is followed by a completion next active day
- recent trend (15%), last 7 days against the 7 before them
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Collection, Iterable, Optional, Sequence

from .calendar import add_days, is_active_day, iter_days, sub_days, to_canonical_day
from .streaks import completion_days

WEIGHTS = {
    "current_streak_score": 0.25,
    "consistency_score": 0.25,
    "longevity_score": 0.20,
    "recovery_score": 0.15,
    "trend_score": 0.15,
}

TREND_THRESHOLD = 15


@dataclass(slots=True)
class StrengthFactors:
    """Precomputed inputs for :func:`calculate_habit_strength`."""

    current_streak: int
    longest_streak: int
    total_completions: int
    consistency_last_30_days: float  # 0-100
    recovery_rate: float  # 0-100
    habit_age_days: int
    recent_trend: int  # -1 declining, 0 stable, 1 improving


@dataclass(slots=True)
class StrengthScores:
    strength: int
    current_streak_score: int
    consistency_score: int
    longevity_score: int
    recovery_score: int
    trend_score: int


@dataclass(frozen=True, slots=True)
class StrengthLabel:
    label: str
    color: str
    description: str


@dataclass(slots=True)
class RecoveryResult:
    rate: int
    missed_count: int
    recovered_count: int


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up, as percentages are displayed."""

    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _log_saturation(value: int, saturation_point: int) -> float:
    return min(100.0, math.log(max(value, 0) + 1) / math.log(saturation_point + 1) * 100)


def calculate_habit_strength(factors: StrengthFactors) -> StrengthScores:
    """Combine strength factors into the weighted 0-100 composite."""

    streak_score = _log_saturation(factors.current_streak, 30)
    consistency_score = _clamp(factors.consistency_last_30_days)
    longevity_score = _log_saturation(factors.total_completions, 100)
    recovery_score = _clamp(factors.recovery_rate)
    trend = max(-1, min(1, factors.recent_trend))
    trend_score = (trend + 1) / 2 * 100

    strength = round_half_up(
        streak_score * WEIGHTS["current_streak_score"]
        + consistency_score * WEIGHTS["consistency_score"]
        + longevity_score * WEIGHTS["longevity_score"]
        + recovery_score * WEIGHTS["recovery_score"]
        + trend_score * WEIGHTS["trend_score"]
    )
    return StrengthScores(
        strength=strength,
        current_streak_score=round_half_up(streak_score),
        consistency_score=round_half_up(consistency_score),
        longevity_score=round_half_up(longevity_score),
        recovery_score=round_half_up(recovery_score),
        trend_score=round_half_up(trend_score),
    )


_LABELS = (
    (80, StrengthLabel("Strong", "green", "This habit is nearly automatic")),
    (60, StrengthLabel("Building", "emerald", "Good progress - keep going")),
    (40, StrengthLabel("Developing", "yellow", "Needs more consistency")),
    (20, StrengthLabel("Fragile", "orange", "At risk - prioritize this habit")),
)
_NEW_LABEL = StrengthLabel("New", "gray", "Just getting started")


def get_strength_label(strength: float) -> StrengthLabel:
    for floor, label in _LABELS:
        if strength >= floor:
            return label
    return _NEW_LABEL


def _rate_between(days: set[date], active_days: Collection[int], start: date, end: date) -> int:
    """Percent of active days in ``[start, end]`` that were completed."""

    active = 0
    done = 0
    for day in iter_days(start, end):
        if is_active_day(active_days, day):
            active += 1
            if day in days:
                done += 1
    if active == 0:
        return 0
    return round_half_up(done / active * 100)


def calculate_consistency_rate(
    completions: Iterable[date | datetime],
    active_days: Collection[int],
    window_days: int,
    as_of: date,
) -> int:
    """Percent of active days completed in the ``window_days`` ending at ``as_of``."""

    if window_days <= 0 or not active_days:
        return 0
    as_of = to_canonical_day(as_of)
    return _rate_between(
        completion_days(completions), active_days, sub_days(as_of, window_days - 1), as_of
    )


def _next_active_day(active_days: Collection[int], after: date, until: date) -> Optional[date]:
    cursor = add_days(after, 1)
    while cursor <= until:
        if is_active_day(active_days, cursor):
            return cursor
        cursor = add_days(cursor, 1)
    return None


def calculate_recovery_rate(
    completions: Iterable[date | datetime],
    active_days: Collection[int],
    created_at: date | datetime,
    as_of: date,
) -> RecoveryResult:
    """Share of missed active days followed by a completion on the next active day.

    Only closed days (before ``as_of``) can be missed. A habit that never
    missed scores 100; a habit that was never completed scores 0.
    """

    days = completion_days(completions)
    if not days or not active_days:
        return RecoveryResult(rate=0, missed_count=0, recovered_count=0)

    as_of = to_canonical_day(as_of)
    missed = 0
    recovered = 0
    for day in iter_days(to_canonical_day(created_at), sub_days(as_of, 1)):
        if not is_active_day(active_days, day) or day in days:
            continue
        missed += 1
        following = _next_active_day(active_days, day, as_of)
        if following is not None and following in days:
            recovered += 1

    if missed == 0:
        return RecoveryResult(rate=100, missed_count=0, recovered_count=0)
    return RecoveryResult(
        rate=round_half_up(recovered / missed * 100), missed_count=missed, recovered_count=recovered
    )


def calculate_trend(
    completions: Iterable[date | datetime],
    active_days: Collection[int],
    as_of: date,
) -> int:
    """Compare the last 7 days with days 8-14 ago: 1 improving, -1 declining, 0 stable."""

    days = completion_days(completions)
    as_of = to_canonical_day(as_of)
    recent = calculate_consistency_rate(days, active_days, 7, as_of)
    previous = _rate_between(days, active_days, sub_days(as_of, 14), sub_days(as_of, 8))
    difference = recent - previous
    if difference >= TREND_THRESHOLD:
        return 1
    if difference <= -TREND_THRESHOLD:
        return -1
    return 0


@dataclass(slots=True)
class StrengthReport:
    """Scores plus the raw counts the strength record keeps alongside them."""

    scores: StrengthScores
    factors: StrengthFactors
    missed_days_count: int
    recovery_count: int
    last_30_days_rate: int


def build_strength_report(
    completions: Iterable[date | datetime],
    active_days: Collection[int],
    created_at: date | datetime,
    as_of: date,
    *,
    current_streak: int,
    longest_streak: int,
    total_completions: int,
) -> StrengthReport:
    """Compute every strength factor for one habit and score it."""

    days = completion_days(completions)
    as_of = to_canonical_day(as_of)
    consistency = calculate_consistency_rate(days, active_days, 30, as_of)
    recovery = calculate_recovery_rate(days, active_days, created_at, as_of)
    factors = StrengthFactors(
        current_streak=current_streak,
        longest_streak=longest_streak,
        total_completions=total_completions,
        consistency_last_30_days=consistency,
        recovery_rate=recovery.rate,
        habit_age_days=max(0, (as_of - to_canonical_day(created_at)).days),
        recent_trend=calculate_trend(days, active_days, as_of),
    )
    return StrengthReport(
        scores=calculate_habit_strength(factors),
        factors=factors,
        missed_days_count=recovery.missed_count,
        recovery_count=recovery.recovered_count,
        last_30_days_rate=consistency,
    )


def is_stale(updated_at: Optional[datetime], now: datetime, max_age: timedelta) -> bool:
    """True when a stored strength record is missing or older than ``max_age``."""

    if updated_at is None:
        return True
    if updated_at.tzinfo is None:
        # SQLite hands back naive timestamps; they were written as UTC.
        updated_at = updated_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now - updated_at > max_age


@dataclass(slots=True)
class StrengthSummary:
    total_habits: int
    counts: dict[str, int]
    average_strength: int
    weakest_habit_id: Optional[int]


def summarize_strengths(strengths: Sequence[tuple[int, int]]) -> StrengthSummary:
    """Summarize ``(habit_id, strength)`` pairs for a dashboard.

    The weakest habit ignores brand-new habits (below 20) since there is
    nothing actionable to say about them yet.
    """

    counts = {label.label: 0 for _, label in _LABELS}
    counts[_NEW_LABEL.label] = 0
    if not strengths:
        return StrengthSummary(total_habits=0, counts=counts, average_strength=0, weakest_habit_id=None)

    for _, value in strengths:
        counts[get_strength_label(value).label] += 1
    established = [pair for pair in strengths if pair[1] >= 20]
    weakest = min(established, key=lambda pair: pair[1]) if established else None
    return StrengthSummary(
        total_habits=len(strengths),
        counts=counts,
        average_strength=round_half_up(sum(v for _, v in strengths) / len(strengths)),
        weakest_habit_id=weakest[0] if weakest else None,
    )


__all__ = [
    "RecoveryResult",
    "StrengthFactors",
    "StrengthLabel",
    "StrengthReport",
    "StrengthScores",
    "StrengthSummary",
    "WEIGHTS",
    "build_strength_report",
    "calculate_consistency_rate",
    "calculate_habit_strength",
    "calculate_recovery_rate",
    "calculate_trend",
    "get_strength_label",
    "is_stale",
    "round_half_up",
    "summarize_strengths",
]
