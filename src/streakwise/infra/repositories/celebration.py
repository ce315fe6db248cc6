"""SQLModel implementation of the celebration repository."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ...models.celebration import Celebration


class SQLModelCelebrationRepository:
    """Celebrations fire once per (habit, type) and are dismissed once."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def exists(self, habit_id: int, kind: str) -> bool:
        with self.session_factory() as session:
            row = session.exec(
                select(Celebration.id).where(
                    Celebration.habit_id == habit_id, Celebration.type == kind
                )
            ).first()
            return row is not None

    def create_once(self, celebration: Celebration) -> Optional[Celebration]:
        """Insert unless this habit already has a celebration of the same type.

        Returns the stored row, or None when it had already fired.
        """
        if celebration.habit_id is not None and self.exists(celebration.habit_id, celebration.type):
            return None
        with self.session_factory() as session:
            session.add(celebration)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                return None
            session.refresh(celebration)
            session.expunge(celebration)
            return celebration

    def list_unviewed(self, *, user_id: int) -> list[Celebration]:
        with self.session_factory() as session:
            rows = list(
                session.exec(
                    select(Celebration)
                    .where(Celebration.user_id == user_id)
                    .where(Celebration.viewed_at == None)  # noqa: E711
                    .order_by(Celebration.triggered_at)  # type: ignore
                ).all()
            )
            session.expunge_all()
            return rows

    def mark_viewed(self, celebration_id: int, now: datetime, *, user_id: int) -> bool:
        """Dismiss a celebration; False when it is not the user's."""
        with self.session_factory() as session:
            row = session.exec(
                select(Celebration).where(
                    Celebration.id == celebration_id, Celebration.user_id == user_id
                )
            ).first()
            if row is None:
                return False
            if row.viewed_at is None:
                row.viewed_at = now
                session.add(row)
                session.commit()
            return True
