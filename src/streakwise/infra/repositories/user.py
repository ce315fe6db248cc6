"""SQLModel implementation of the user and user-stats repository."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.user import User, UserStats


class SQLModelUserRepository:
    """Users plus their running completion and XP counters."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_username(self, username: str) -> Optional[User]:
        with self.session_factory() as session:
            obj = session.exec(select(User).where(User.username == username)).first()
            if obj:
                session.expunge(obj)
            return obj

    def get_or_create(self, username: str) -> User:
        """Return the named user, creating it on first use."""
        existing = self.get_by_username(username)
        if existing is not None:
            return existing
        with self.session_factory() as session:
            user = User(username=username)
            session.add(user)
            session.commit()
            session.refresh(user)
            session.expunge(user)
            return user

    def list_ids(self) -> list[int]:
        with self.session_factory() as session:
            return list(session.exec(select(User.id).order_by(User.id)).all())  # type: ignore

    def get_stats(self, *, user_id: int) -> UserStats:
        """Stored stats, or a zeroed unsaved record for a new user."""
        with self.session_factory() as session:
            obj = session.get(UserStats, user_id)
            if obj is None:
                return UserStats(user_id=user_id)
            session.expunge(obj)
            return obj

    def record_toggle(self, completed: bool, now: datetime, *, user_id: int) -> UserStats:
        """Count a completion (or its removal) as an identity vote.

        Counters never go below zero.
        """
        step = 1 if completed else -1
        with self.session_factory() as session:
            stats = session.get(UserStats, user_id) or UserStats(user_id=user_id)
            stats.total_completions = max(0, stats.total_completions + step)
            stats.identity_votes = max(0, stats.identity_votes + step)
            stats.last_active_at = now
            session.add(stats)
            session.commit()
            session.refresh(stats)
            session.expunge(stats)
            return stats

    def add_experience(self, points: int, *, user_id: int) -> UserStats:
        with self.session_factory() as session:
            stats = session.get(UserStats, user_id) or UserStats(user_id=user_id)
            stats.experience_points += points
            session.add(stats)
            session.commit()
            session.refresh(stats)
            session.expunge(stats)
            return stats
