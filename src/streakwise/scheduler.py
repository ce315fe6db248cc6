"""Background task scheduler for periodic recalculation."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler as APScheduler
from apscheduler.triggers.cron import CronTrigger

from .logging_config import get_logger
from .services import tracker
from .services.calendar import sub_days, utc_today, week_start

if TYPE_CHECKING:
    from .context import AppContext

logger = get_logger("scheduler")


class StreakScheduler:
    """Nightly strength refresh and weekly review generation for every user."""

    def __init__(self, ctx: AppContext, *, clock: Callable[[], date] = utc_today):
        """Initialize the scheduler with app context.

        Args:
            ctx: Application context with repositories and config
            clock: Returns the canonical day jobs evaluate against
        """
        self.ctx = ctx
        self.clock = clock
        self.scheduler: Optional[APScheduler] = None

    def start(self) -> None:
        """Start the background scheduler."""
        if self.scheduler is not None:
            logger.warning("Scheduler already running")
            return

        self.scheduler = APScheduler(timezone="UTC")

        self.scheduler.add_job(
            func=self.run_strength_refresh,
            trigger=CronTrigger(hour=3, minute=0, timezone="UTC"),
            id="strength_refresh",
            name="Nightly Strength Refresh",
            replace_existing=True,
        )
        logger.info("Scheduled strength refresh at 03:00 UTC")

        self.scheduler.add_job(
            func=self.run_weekly_reviews,
            trigger=CronTrigger(hour=4, minute=0, timezone="UTC"),
            id="weekly_reviews",
            name="Weekly Review Generation",
            replace_existing=True,
        )
        logger.info("Scheduled weekly review generation at 04:00 UTC")

        self.scheduler.start()
        logger.info("Background scheduler started")

    def stop(self) -> None:
        """Stop the background scheduler gracefully."""
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=True)
            self.scheduler = None
            logger.info("Background scheduler stopped")

    def run_strength_refresh(self) -> int:
        """Refresh stale strength records for every user; returns the total refreshed."""
        as_of = self.clock()
        total = 0
        for user_id in self.ctx.user_repo.list_ids():
            try:
                total += tracker.refresh_stale_strengths(self.ctx, user_id=user_id, as_of=as_of)
            except Exception as exc:
                logger.error(
                    f"Strength refresh failed for user {user_id}: {exc}", exc_info=True
                )
        logger.info("Strength refresh finished", extra={"refreshed": total})
        return total

    def run_weekly_reviews(self) -> int:
        """Ensure last week's review exists, and this week's once it is far enough along.

        Returns how many reviews are available after the run.
        """
        as_of = self.clock()
        current = week_start(as_of)
        available = 0
        for user_id in self.ctx.user_repo.list_ids():
            for week in (sub_days(current, 7), current):
                try:
                    review = tracker.get_or_generate_weekly_review(
                        self.ctx, user_id=user_id, as_of=as_of, week_of=week
                    )
                except Exception as exc:
                    logger.error(
                        f"Weekly review failed for user {user_id}: {exc}", exc_info=True
                    )
                    continue
                if review is not None:
                    available += 1
        return available


def create_scheduler(ctx: AppContext, *, auto_start: Optional[bool] = None) -> StreakScheduler:
    """Create and optionally start a background scheduler.

    Args:
        ctx: Application context
        auto_start: Whether to start immediately; defaults to SCHEDULER_ENABLED

    Returns:
        StreakScheduler instance
    """
    scheduler = StreakScheduler(ctx)
    if auto_start is None:
        auto_start = ctx.config.SCHEDULER_ENABLED
    if auto_start:
        scheduler.start()
    return scheduler
