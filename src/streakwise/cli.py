"""Command line interface for Streakwise."""

from __future__ import annotations

import time
from datetime import date, datetime
from typing import Optional

import click

from .config import BaseConfig
from .constants import DEFAULT_ACHIEVEMENTS
from .context import AppContext, create_app_context
from .errors import StreakwiseError
from .infra.database import bootstrap_database
from .logging_config import setup_logging
from .models.habit import Habit
from .scheduler import create_scheduler
from .services import tracker
from .services.calendar import utc_today
from .services.focus import daily_message, daily_score
from .services.strength import get_strength_label

DATE = click.DateTime(formats=["%Y-%m-%d"])


def _day(value: Optional[datetime]) -> date:
    return value.date() if value is not None else utc_today()


def _parse_days(raw: str) -> list[int]:
    try:
        return sorted({int(part) for part in raw.split(",") if part.strip()})
    except ValueError as exc:
        raise click.BadParameter("use comma separated weekday numbers, Sunday=0") from exc


def _app(click_ctx: click.Context) -> AppContext:
    obj = click_ctx.ensure_object(dict)
    if "app" not in obj:
        obj["app"] = create_app_context(obj["config"])
    return obj["app"]


def _user_id(app: AppContext, username: str) -> int:
    return app.user_repo.get_or_create(username).id


@click.group()
@click.option("--verbose", is_flag=True, default=False, help="Also write JSON logs to DATA_DIR/logs")
@click.pass_context
def cli(click_ctx: click.Context, verbose: bool) -> None:
    """Habit streaks, strength and weekly reviews."""

    obj = click_ctx.ensure_object(dict)
    config = obj.setdefault("config", BaseConfig())
    setup_logging(config, log_to_file=verbose)


@cli.command("init-db")
@click.pass_context
def init_db(click_ctx: click.Context) -> None:
    """Create the database schema."""

    engine, _ = bootstrap_database(click_ctx.obj["config"])
    click.echo(f"Database ready: {engine.url}")


@cli.command("seed-achievements")
@click.pass_context
def seed_achievements(click_ctx: click.Context) -> None:
    """Insert or update the achievement catalog."""

    app = create_app_context(click_ctx.obj["config"], seed_achievements=False)
    inserted = app.achievement_repo.seed(DEFAULT_ACHIEVEMENTS)
    click.echo(f"Seeded {inserted} new achievements ({len(DEFAULT_ACHIEVEMENTS)} in catalog).")


@cli.command("add-habit")
@click.argument("name")
@click.option("--user", "username", default="default", show_default=True)
@click.option("--days", default="0,1,2,3,4,5,6", show_default=True, help="Active weekdays, Sunday=0")
@click.option("--frequency", type=int, default=None, help="Target completions per week")
@click.option("--emoji", default=None)
@click.option("--category", default=None)
@click.pass_context
def add_habit(
    click_ctx: click.Context,
    name: str,
    username: str,
    days: str,
    frequency: Optional[int],
    emoji: Optional[str],
    category: Optional[str],
) -> None:
    """Create a habit."""

    app = _app(click_ctx)
    active_days = _parse_days(days)
    habit = Habit(
        name=name,
        emoji=emoji,
        category=category,
        active_days=active_days,
        frequency_per_week=frequency if frequency is not None else len(active_days),
        user_id=0,
    )
    try:
        created = app.habit_repo.create(habit, user_id=_user_id(app, username))
    except StreakwiseError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Created habit {created.id}: {created.name}")


@cli.command("toggle")
@click.argument("habit_id", type=int)
@click.option("--user", "username", default="default", show_default=True)
@click.option("--day", type=DATE, default=None, help="Day to toggle (default today, UTC)")
@click.option("--as-of", type=DATE, default=None, help="Evaluation day (default today, UTC)")
@click.pass_context
def toggle(
    click_ctx: click.Context,
    habit_id: int,
    username: str,
    day: Optional[datetime],
    as_of: Optional[datetime],
) -> None:
    """Mark a habit done for a day, or undo it."""

    app = _app(click_ctx)
    try:
        result = tracker.toggle_completion(
            app, habit_id, _day(day), user_id=_user_id(app, username), as_of=_day(as_of)
        )
    except StreakwiseError as exc:
        raise click.ClickException(str(exc)) from exc

    state = "completed" if result.completed else "not completed"
    click.echo(f"{result.day.isoformat()}: {state} (streak {result.current_streak}, best {result.longest_streak})")
    if result.milestone:
        click.echo(f"Milestone reached: {result.milestone} days")
    for celebration in result.celebrations:
        click.echo(f"* {celebration.title} {celebration.message}")
    for achievement in result.new_achievements:
        click.echo(f"+ {achievement.emoji} {achievement.name} (+{achievement.xp_reward} XP)")


@cli.command("recalculate")
@click.option("--user", "username", default="default", show_default=True)
@click.option("--as-of", type=DATE, default=None)
@click.pass_context
def recalculate(click_ctx: click.Context, username: str, as_of: Optional[datetime]) -> None:
    """Rebuild streak and strength records from completion history."""

    app = _app(click_ctx)
    count = tracker.recalculate_user(app, user_id=_user_id(app, username), as_of=_day(as_of))
    click.echo(f"Recalculated {count} habits.")


@cli.command("streaks")
@click.option("--user", "username", default="default", show_default=True)
@click.option("--as-of", type=DATE, default=None)
@click.pass_context
def streaks(click_ctx: click.Context, username: str, as_of: Optional[datetime]) -> None:
    """Show current streaks and which ones need attention today."""

    app = _app(click_ctx)
    user_id = _user_id(app, username)
    for status in tracker.list_streaks(app, user_id=user_id, as_of=_day(as_of)):
        flag = "  AT RISK" if status.at_risk else ""
        click.echo(f"{status.name}: {status.current_streak} (best {status.longest_streak}){flag}")

    summary = tracker.strength_summary(app, user_id=user_id)
    if summary.total_habits:
        counts = ", ".join(f"{count} {label}" for label, count in summary.counts.items() if count)
        click.echo(f"Average strength {summary.average_strength}: {counts}")


@cli.command("stats")
@click.option("--user", "username", default="default", show_default=True)
@click.option("--as-of", type=DATE, default=None)
@click.pass_context
def stats(click_ctx: click.Context, username: str, as_of: Optional[datetime]) -> None:
    """Show weekly trends, weekday patterns and identity votes."""

    app = _app(click_ctx)
    day = _day(as_of)
    user_id = _user_id(app, username)

    trends = tracker.weekly_trends(app, user_id=user_id, as_of=day)
    click.echo(
        f"This week {trends.this_week.rate}% ({trends.this_week.completions}/{trends.this_week.possible}), "
        f"last week {trends.last_week.rate}% ({trends.last_week.completions}/{trends.last_week.possible})"
    )

    patterns = tracker.completion_patterns(app, user_id=user_id, as_of=day)
    if patterns.best_day is not None:
        click.echo(f"Best day: {patterns.best_day.day_name} ({patterns.best_day.count} completions)")

    votes = tracker.identity_votes(app, user_id=user_id)
    click.echo(f"Identity votes: {votes.total_votes}")
    for group in votes.by_category:
        click.echo(f"  {group.category}: {group.votes} ({group.habit_count} habits)")


@cli.command("focus")
@click.option("--user", "username", default="default", show_default=True)
@click.option("--as-of", type=DATE, default=None)
@click.option("--hour", type=click.IntRange(0, 23), default=None, help="Local hour for the message")
@click.pass_context
def focus(click_ctx: click.Context, username: str, as_of: Optional[datetime], hour: Optional[int]) -> None:
    """Show today's focus list."""

    app = _app(click_ctx)
    day = _day(as_of)
    user_id = _user_id(app, username)
    snapshots = tracker.habit_snapshots(app, user_id=user_id, as_of=day)
    result = tracker.daily_focus(app, user_id=user_id, as_of=day)
    message = daily_message(snapshots, day, hour if hour is not None else datetime.now().hour)

    click.echo(f"{day.isoformat()}  score {daily_score(snapshots, day)}%")
    click.echo(message.message)
    for title, bucket in (
        ("Priority", result.priority),
        ("Protect", result.protect),
        ("Momentum", result.momentum),
        ("Completed", result.completed),
    ):
        if not bucket:
            continue
        click.echo(f"{title}:")
        for item in bucket:
            label = get_strength_label(item.strength).label
            click.echo(f"  - {item.name} [{label} {item.strength}] {item.reason}")
    if result.not_scheduled:
        click.echo(f"{result.not_scheduled} habit(s) not scheduled today.")


@cli.command("review")
@click.option("--user", "username", default="default", show_default=True)
@click.option("--as-of", type=DATE, default=None)
@click.option("--week-of", type=DATE, default=None, help="Any day inside the week to review")
@click.option("--force", is_flag=True, default=False, help="Rebuild even if already stored")
@click.pass_context
def review(
    click_ctx: click.Context,
    username: str,
    as_of: Optional[datetime],
    week_of: Optional[datetime],
    force: bool,
) -> None:
    """Show (and build when due) the weekly review."""

    app = _app(click_ctx)
    day = _day(as_of)
    stored = tracker.get_or_generate_weekly_review(
        app,
        user_id=_user_id(app, username),
        as_of=day,
        week_of=week_of.date() if week_of else None,
        force=force,
    )
    if stored is None:
        click.echo("This week's review is not ready yet; check back from mid-week.")
        return

    click.echo(
        f"Week {stored.week_start_date.isoformat()} - {stored.week_end_date.isoformat()}: "
        f"{stored.completion_rate}% ({stored.total_completed}/{stored.total_possible})"
    )
    if stored.change_from_previous is not None:
        click.echo(f"Change from previous week: {stored.change_from_previous:+d}%")
    for row in stored.performance():
        click.echo(f"  {row.habit_name}: {row.completed}/{row.possible} ({row.rate}%)")
    for win in stored.wins:
        click.echo(f"Win: {win}")
    for item in stored.needs_attention:
        click.echo(f"Needs attention: {item}")
    if stored.focus_suggestion:
        click.echo(f"Focus: {stored.focus_suggestion}")


@cli.command("run-scheduler")
@click.pass_context
def run_scheduler(click_ctx: click.Context) -> None:
    """Run the background jobs until interrupted."""

    scheduler = create_scheduler(_app(click_ctx), auto_start=True)
    click.echo("Scheduler running; press Ctrl+C to stop.")
    try:
        while True:
            time.sleep(60)
    except KeyboardInterrupt:
        scheduler.stop()


if __name__ == "__main__":  # pragma: no cover
    cli()
