"""SQLModel implementation of the weekly review repository."""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ...models.review import WeeklyReview


class SQLModelReviewRepository:
    """Weekly reviews keyed by (user, week start)."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get(self, week_start: date, *, user_id: int) -> Optional[WeeklyReview]:
        with self.session_factory() as session:
            obj = session.exec(
                select(WeeklyReview).where(
                    WeeklyReview.user_id == user_id,
                    WeeklyReview.week_start_date == week_start,
                )
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_recent(self, *, user_id: int, limit: int = 10) -> list[WeeklyReview]:
        with self.session_factory() as session:
            rows = list(
                session.exec(
                    select(WeeklyReview)
                    .where(WeeklyReview.user_id == user_id)
                    .order_by(WeeklyReview.week_start_date.desc())  # type: ignore
                    .limit(limit)
                ).all()
            )
            session.expunge_all()
            return rows

    def save(self, review: WeeklyReview) -> WeeklyReview:
        """Insert a review; if one for the week already exists, return that one."""
        with self.session_factory() as session:
            session.add(review)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                existing = self.get(review.week_start_date, user_id=review.user_id)
                if existing is None:
                    raise
                return existing
            session.refresh(review)
            session.expunge(review)
            return review

    def delete(self, week_start: date, *, user_id: int) -> None:
        with self.session_factory() as session:
            row = session.exec(
                select(WeeklyReview).where(
                    WeeklyReview.user_id == user_id,
                    WeeklyReview.week_start_date == week_start,
                )
            ).first()
            if row:
                session.delete(row)
                session.commit()

    def mark_viewed(self, week_start: date, now: datetime, *, user_id: int) -> bool:
        with self.session_factory() as session:
            row = session.exec(
                select(WeeklyReview).where(
                    WeeklyReview.user_id == user_id,
                    WeeklyReview.week_start_date == week_start,
                )
            ).first()
            if row is None:
                return False
            row.viewed_at = now
            session.add(row)
            session.commit()
            return True
