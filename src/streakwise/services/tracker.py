"""Tracker service: wires the repositories to the pure habit analytics.

Every operation takes the evaluation day (``as_of``) and, where timestamps
are written, ``now``; both default to the current UTC clock.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Optional

from ..errors import HabitNotFoundError
from ..logging_config import get_logger
from ..models.celebration import Celebration
from ..models.habit import Habit, HabitStreak, HabitStrength
from ..models.review import WeeklyReview
from . import analytics
from .calendar import days_until_next_active, sub_days, to_canonical_day, utc_today, week_end, week_start
from .focus import DailyFocus, HabitSnapshot, categorize_daily_focus
from .milestones import (
    AchievementDefinition,
    HabitHistory,
    UserAggregates,
    achievement_progress,
    celebration_content,
    count_perfect_days,
    evaluate_achievements,
    evaluate_streak_milestone,
)
from .review import HabitWeek, generate_weekly_review, should_auto_generate
from .streaks import StreakSnapshot, compute_streak_snapshot, is_new_milestone, longest_recovered_gap
from .strength import StrengthSummary, build_strength_report, is_stale, summarize_strengths

if TYPE_CHECKING:
    from ..context import AppContext

logger = get_logger("tracker")

STRONG_STRENGTH = 80


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class ToggleResult:
    """Outcome of flipping one habit's completion for one day."""

    habit_id: int
    day: date
    completed: bool
    current_streak: int
    longest_streak: int
    strength: int
    milestone: Optional[int] = None
    new_achievements: list[AchievementDefinition] = field(default_factory=list)
    celebrations: list[Celebration] = field(default_factory=list)
    xp_awarded: int = 0


@dataclass(slots=True)
class StreakStatus:
    habit_id: int
    name: str
    emoji: Optional[str]
    current_streak: int
    longest_streak: int
    at_risk: bool
    days_until_next_active: int


@dataclass(slots=True)
class AchievementStatus:
    definition: AchievementDefinition
    earned: bool
    progress: int
    percent: int


def _require_habit(ctx: AppContext, habit_id: int, user_id: int) -> Habit:
    habit = ctx.habit_repo.get_by_id(habit_id, user_id=user_id)
    if habit is None:
        raise HabitNotFoundError(habit_id, user_id)
    return habit


def _snapshot(ctx: AppContext, habit: Habit, days: set[date], as_of: date) -> StreakSnapshot:
    stored = ctx.habit_repo.get_streak(habit.id)
    return compute_streak_snapshot(
        days,
        habit.active_days,
        habit.created_at,
        as_of,
        previous_longest=stored.longest_streak if stored else 0,
        limit=ctx.config.STREAK_SCAN_LIMIT,
    )


def _save_streak(ctx: AppContext, habit: Habit, snapshot: StreakSnapshot, now: datetime) -> HabitStreak:
    return ctx.habit_repo.save_streak(
        HabitStreak(
            habit_id=habit.id,
            current_streak=snapshot.current_streak,
            longest_streak=snapshot.longest_streak,
            total_completions=snapshot.total_completions,
            last_completed_at=snapshot.last_completed_at,
            streak_started_at=snapshot.streak_started_at,
            consecutive_misses=snapshot.consecutive_misses,
            last_calculated_at=now,
        )
    )


def _save_strength(
    ctx: AppContext,
    habit: Habit,
    days: set[date],
    snapshot: StreakSnapshot,
    as_of: date,
    now: datetime,
) -> HabitStrength:
    report = build_strength_report(
        days,
        habit.active_days,
        habit.created_at,
        as_of,
        current_streak=snapshot.current_streak,
        longest_streak=snapshot.longest_streak,
        total_completions=snapshot.total_completions,
    )
    scores = report.scores
    return ctx.habit_repo.save_strength(
        HabitStrength(
            habit_id=habit.id,
            strength=scores.strength,
            current_streak_score=scores.current_streak_score,
            consistency_score=scores.consistency_score,
            longevity_score=scores.longevity_score,
            recovery_score=scores.recovery_score,
            trend_score=scores.trend_score,
            missed_days_count=report.missed_days_count,
            recovery_count=report.recovery_count,
            last_30_days_rate=report.last_30_days_rate,
            updated_at=now,
        )
    )


def recalculate_habit(
    ctx: AppContext, habit: Habit, *, as_of: date, now: datetime
) -> tuple[HabitStreak, HabitStrength]:
    """Recompute and store one habit's streak and strength records."""

    days = ctx.habit_repo.completion_days(habit.id)
    snapshot = _snapshot(ctx, habit, days, as_of)
    streak = _save_streak(ctx, habit, snapshot, now)
    strength = _save_strength(ctx, habit, days, snapshot, as_of, now)
    return streak, strength


def recalculate_user(
    ctx: AppContext,
    *,
    user_id: int,
    as_of: Optional[date] = None,
    now: Optional[datetime] = None,
) -> int:
    """Recompute derived records for all of a user's habits; returns the habit count."""

    as_of = to_canonical_day(as_of or utc_today())
    now = now or _utcnow()
    habits = ctx.habit_repo.list_all(user_id=user_id)
    for habit in habits:
        recalculate_habit(ctx, habit, as_of=as_of, now=now)
    logger.info(
        "Recalculated habit records",
        extra={"user_id": user_id, "habits": len(habits), "as_of": as_of.isoformat()},
    )
    return len(habits)


def user_aggregates(ctx: AppContext, *, user_id: int, as_of: date) -> UserAggregates:
    """Collect the user-level numbers achievements are measured against."""

    habits = ctx.habit_repo.list_all(user_id=user_id)
    aggregates = UserAggregates(habit_count=len(habits))
    histories: list[HabitHistory] = []
    for habit in habits:
        days = ctx.habit_repo.completion_days(habit.id)
        streak = ctx.habit_repo.get_streak(habit.id)
        strength = ctx.habit_repo.get_strength(habit.id)
        if streak is not None:
            aggregates.max_streak = max(
                aggregates.max_streak, streak.current_streak, streak.longest_streak
            )
        if strength is not None:
            aggregates.max_strength = max(aggregates.max_strength, strength.strength)
        aggregates.total_completions += len(days)
        aggregates.comebacks = max(
            aggregates.comebacks,
            longest_recovered_gap(days, habit.active_days, habit.created_at, as_of),
        )
        histories.append(HabitHistory(habit.active_days, habit.created_at, days))
    aggregates.perfect_days = count_perfect_days(histories, as_of)
    return aggregates


def _award_achievements(
    ctx: AppContext, *, user_id: int, as_of: date
) -> tuple[list[AchievementDefinition], int]:
    catalog = ctx.achievement_repo.list_catalog()
    ids_by_key = {row.key: row.id for row in catalog}
    newly = evaluate_achievements(
        user_aggregates(ctx, user_id=user_id, as_of=as_of),
        [row.to_definition() for row in catalog],
        ctx.achievement_repo.earned_keys(user_id=user_id),
    )
    if not newly:
        return [], 0

    inserted = set(ctx.achievement_repo.award([ids_by_key[a.key] for a in newly], user_id=user_id))
    awarded = [a for a in newly if ids_by_key[a.key] in inserted]
    xp = sum(a.xp_reward for a in awarded)
    if xp:
        ctx.user_repo.add_experience(xp, user_id=user_id)
    for achievement in awarded:
        logger.info(
            "Achievement awarded",
            extra={"user_id": user_id, "achievement": achievement.key, "xp": achievement.xp_reward},
        )
    return awarded, xp


def _celebrate(
    ctx: AppContext, habit: Habit, kind: str, value: int, now: datetime
) -> Optional[Celebration]:
    content = celebration_content(kind, value, habit.name)
    created = ctx.celebration_repo.create_once(
        Celebration(
            user_id=habit.user_id,
            habit_id=habit.id,
            type=kind,
            value=value,
            title=content.title,
            message=content.message,
            triggered_at=now,
        )
    )
    if created is not None:
        logger.info(
            "Celebration triggered",
            extra={"user_id": habit.user_id, "habit_id": habit.id, "type": kind, "value": value},
        )
    return created


def toggle_completion(
    ctx: AppContext,
    habit_id: int,
    day: date | datetime,
    *,
    user_id: int,
    as_of: Optional[date] = None,
    now: Optional[datetime] = None,
) -> ToggleResult:
    """Flip a habit's completion for ``day`` and refresh everything derived from it.

    Celebrations and achievements are only evaluated when the toggle leaves
    the day completed.

    Raises:
        HabitNotFoundError: the habit does not exist or belongs to someone else
    """

    habit = _require_habit(ctx, habit_id, user_id)
    day = to_canonical_day(day)
    as_of = to_canonical_day(as_of or utc_today())
    now = now or _utcnow()

    previous_streak = ctx.habit_repo.get_streak(habit.id)
    previous_strength = ctx.habit_repo.get_strength(habit.id)

    completed = ctx.habit_repo.toggle_completion(habit.id, day)
    streak, strength = recalculate_habit(ctx, habit, as_of=as_of, now=now)
    ctx.user_repo.record_toggle(completed, now, user_id=user_id)

    result = ToggleResult(
        habit_id=habit.id,
        day=day,
        completed=completed,
        current_streak=streak.current_streak,
        longest_streak=streak.longest_streak,
        strength=strength.strength,
    )
    logger.info(
        "Completion toggled",
        extra={
            "user_id": user_id,
            "habit_id": habit.id,
            "day": day.isoformat(),
            "completed": completed,
            "current_streak": streak.current_streak,
        },
    )
    if not completed:
        return result

    result.milestone = is_new_milestone(
        streak.current_streak, previous_streak.current_streak if previous_streak else 0
    )

    kind = evaluate_streak_milestone(streak.current_streak)
    if kind is not None:
        celebration = _celebrate(ctx, habit, kind, streak.current_streak, now)
        if celebration is not None:
            result.celebrations.append(celebration)

    was_strong = previous_strength is not None and previous_strength.strength >= STRONG_STRENGTH
    if strength.strength >= STRONG_STRENGTH and not was_strong:
        celebration = _celebrate(ctx, habit, "strength_strong", strength.strength, now)
        if celebration is not None:
            result.celebrations.append(celebration)

    result.new_achievements, result.xp_awarded = _award_achievements(
        ctx, user_id=user_id, as_of=as_of
    )
    return result


def get_strength(
    ctx: AppContext,
    habit_id: int,
    *,
    user_id: int,
    as_of: Optional[date] = None,
    now: Optional[datetime] = None,
    force: bool = False,
) -> HabitStrength:
    """Stored strength, recomputed first when missing, stale or ``force`` is set."""

    habit = _require_habit(ctx, habit_id, user_id)
    now = now or _utcnow()
    stored = ctx.habit_repo.get_strength(habit.id)
    if not force and stored is not None and not is_stale(
        stored.updated_at, now, ctx.config.STRENGTH_STALE_AFTER
    ):
        return stored
    _, strength = recalculate_habit(
        ctx, habit, as_of=to_canonical_day(as_of or utc_today()), now=now
    )
    return strength


def refresh_stale_strengths(
    ctx: AppContext,
    *,
    user_id: int,
    as_of: Optional[date] = None,
    now: Optional[datetime] = None,
) -> int:
    """Recompute every stale strength record for a user; returns how many were refreshed."""

    as_of = to_canonical_day(as_of or utc_today())
    now = now or _utcnow()
    refreshed = 0
    for habit in ctx.habit_repo.list_all(user_id=user_id):
        stored = ctx.habit_repo.get_strength(habit.id)
        if stored is None or is_stale(stored.updated_at, now, ctx.config.STRENGTH_STALE_AFTER):
            recalculate_habit(ctx, habit, as_of=as_of, now=now)
            refreshed += 1
    if refreshed:
        logger.info("Refreshed stale strength records", extra={"user_id": user_id, "count": refreshed})
    return refreshed


def list_streaks(ctx: AppContext, *, user_id: int, as_of: Optional[date] = None) -> list[StreakStatus]:
    """Live streak status for each habit as of ``as_of``."""

    as_of = to_canonical_day(as_of or utc_today())
    statuses = []
    for habit in ctx.habit_repo.list_all(user_id=user_id):
        days = ctx.habit_repo.completion_days(habit.id)
        snapshot = _snapshot(ctx, habit, days, as_of)
        statuses.append(
            StreakStatus(
                habit_id=habit.id,
                name=habit.name,
                emoji=habit.emoji,
                current_streak=snapshot.current_streak,
                longest_streak=snapshot.longest_streak,
                at_risk=snapshot.at_risk,
                days_until_next_active=days_until_next_active(habit.active_days, as_of),
            )
        )
    return statuses


def habit_snapshots(ctx: AppContext, *, user_id: int, as_of: Optional[date] = None) -> list[HabitSnapshot]:
    """Today's state of each habit in the shape the focus categorizer wants."""

    as_of = to_canonical_day(as_of or utc_today())
    snapshots = []
    for habit in ctx.habit_repo.list_all(user_id=user_id):
        days = ctx.habit_repo.completion_days(habit.id)
        streak = _snapshot(ctx, habit, days, as_of)
        strength = ctx.habit_repo.get_strength(habit.id)
        snapshots.append(
            HabitSnapshot(
                habit_id=habit.id,
                name=habit.name,
                emoji=habit.emoji,
                active_days=habit.active_days,
                completed_today=as_of in days,
                current_streak=streak.current_streak,
                strength=strength.strength if strength else 0,
            )
        )
    return snapshots


def daily_focus(ctx: AppContext, *, user_id: int, as_of: Optional[date] = None) -> DailyFocus:
    as_of = to_canonical_day(as_of or utc_today())
    return categorize_daily_focus(habit_snapshots(ctx, user_id=user_id, as_of=as_of), as_of)


def get_or_generate_weekly_review(
    ctx: AppContext,
    *,
    user_id: int,
    as_of: Optional[date] = None,
    week_of: Optional[date] = None,
    force: bool = False,
) -> Optional[WeeklyReview]:
    """Return the stored review for a week, generating it when allowed.

    ``week_of`` defaults to ``as_of``'s week. Without ``force`` an existing
    review is reused and a missing one is only built once
    ``should_auto_generate`` allows it; otherwise None is returned.
    ``force`` discards any stored review and rebuilds it.
    """

    as_of = to_canonical_day(as_of or utc_today())
    start = week_start(to_canonical_day(week_of or as_of))
    existing = ctx.review_repo.get(start, user_id=user_id)
    if existing is not None and not force:
        return existing
    if not force and not should_auto_generate(
        as_of, start, min_weekday=ctx.config.REVIEW_MIN_WEEKDAY
    ):
        return None
    if existing is not None:
        ctx.review_repo.delete(start, user_id=user_id)

    end = week_end(start)
    previous = ctx.review_repo.get(sub_days(start, 7), user_id=user_id)
    habits = []
    for habit in ctx.habit_repo.list_all(user_id=user_id):
        streak = ctx.habit_repo.get_streak(habit.id)
        habits.append(
            HabitWeek(
                habit_id=habit.id,
                name=habit.name,
                emoji=habit.emoji,
                active_days=habit.active_days,
                created_at=habit.created_at,
                completions=ctx.habit_repo.completion_days(habit.id, start, end),
                current_streak=streak.current_streak if streak else 0,
            )
        )
    data = generate_weekly_review(
        habits, start, previous.completion_rate if previous is not None else None
    )
    review = ctx.review_repo.save(WeeklyReview.from_data(user_id, data))
    logger.info(
        "Weekly review generated",
        extra={
            "user_id": user_id,
            "week_start": start.isoformat(),
            "completion_rate": review.completion_rate,
            "forced": force,
        },
    )
    return review


def achievement_statuses(
    ctx: AppContext, *, user_id: int, as_of: Optional[date] = None
) -> list[AchievementStatus]:
    """Every catalog entry with earned flag and progress, in catalog order."""

    as_of = to_canonical_day(as_of or utc_today())
    aggregates = user_aggregates(ctx, user_id=user_id, as_of=as_of)
    earned = ctx.achievement_repo.earned_keys(user_id=user_id)
    statuses = []
    for row in ctx.achievement_repo.list_catalog():
        definition = row.to_definition()
        progress, percent = achievement_progress(definition, aggregates)
        statuses.append(
            AchievementStatus(
                definition=definition,
                earned=definition.key in earned,
                progress=progress,
                percent=percent,
            )
        )
    return statuses


def _histories(ctx: AppContext, user_id: int) -> list[HabitHistory]:
    return [
        HabitHistory(habit.active_days, habit.created_at, ctx.habit_repo.completion_days(habit.id))
        for habit in ctx.habit_repo.list_all(user_id=user_id)
    ]


def completion_patterns(
    ctx: AppContext, *, user_id: int, as_of: Optional[date] = None
) -> analytics.CompletionPatterns:
    """Completions per weekday across all of a user's habits, last four weeks."""

    as_of = to_canonical_day(as_of or utc_today())
    since = sub_days(as_of, analytics.PATTERN_WINDOW_WEEKS * 7)
    completions: list[date] = []
    for habit in ctx.habit_repo.list_all(user_id=user_id):
        completions.extend(ctx.habit_repo.completion_days(habit.id, since, as_of))
    return analytics.completion_patterns(completions, as_of)


def weekly_trends(
    ctx: AppContext, *, user_id: int, as_of: Optional[date] = None
) -> analytics.WeeklyTrends:
    """This week so far against all of last week."""

    as_of = to_canonical_day(as_of or utc_today())
    return analytics.weekly_trends(_histories(ctx, user_id), as_of)


def identity_votes(ctx: AppContext, *, user_id: int) -> analytics.IdentityVotes:
    """Stored completion totals grouped by habit category."""

    pairs = []
    for habit in ctx.habit_repo.list_all(user_id=user_id):
        streak = ctx.habit_repo.get_streak(habit.id)
        pairs.append((habit.category, streak.total_completions if streak else 0))
    return analytics.identity_votes(pairs)


def strength_summary(ctx: AppContext, *, user_id: int) -> StrengthSummary:
    """Label counts, average and weakest habit over the stored strength records."""

    pairs = []
    for habit in ctx.habit_repo.list_all(user_id=user_id):
        strength = ctx.habit_repo.get_strength(habit.id)
        pairs.append((habit.id, strength.strength if strength else 0))
    return summarize_strengths(pairs)


__all__ = [
    "AchievementStatus",
    "StreakStatus",
    "ToggleResult",
    "achievement_statuses",
    "completion_patterns",
    "daily_focus",
    "get_or_generate_weekly_review",
    "get_strength",
    "habit_snapshots",
    "identity_votes",
    "list_streaks",
    "recalculate_habit",
    "recalculate_user",
    "refresh_stale_strengths",
    "strength_summary",
    "toggle_completion",
    "user_aggregates",
    "weekly_trends",
]
