"""SQLModel implementation of the achievement repository."""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ...models.achievement import Achievement, UserAchievement
from ...services.milestones import AchievementDefinition


class SQLModelAchievementRepository:
    """Catalog seeding plus duplicate-safe awarding."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def seed(self, definitions: Iterable[AchievementDefinition]) -> int:
        """Upsert catalog entries by key; returns how many rows were inserted."""
        inserted = 0
        with self.session_factory() as session:
            for definition in definitions:
                row = session.exec(
                    select(Achievement).where(Achievement.key == definition.key)
                ).first()
                if row is None:
                    row = Achievement(key=definition.key)
                    inserted += 1
                row.name = definition.name
                row.description = definition.description
                row.emoji = definition.emoji
                row.category = definition.category.value
                row.metric = definition.metric.value
                row.threshold = definition.threshold
                row.xp_reward = definition.xp_reward
                session.add(row)
            session.commit()
        return inserted

    def list_catalog(self) -> list[Achievement]:
        """All catalog entries in seed order."""
        with self.session_factory() as session:
            rows = list(session.exec(select(Achievement).order_by(Achievement.id)).all())  # type: ignore
            session.expunge_all()
            return rows

    def get_by_key(self, key: str) -> Optional[Achievement]:
        with self.session_factory() as session:
            obj = session.exec(select(Achievement).where(Achievement.key == key)).first()
            if obj:
                session.expunge(obj)
            return obj

    def earned_keys(self, *, user_id: int) -> set[str]:
        with self.session_factory() as session:
            statement = (
                select(Achievement.key)
                .join(UserAchievement, UserAchievement.achievement_id == Achievement.id)
                .where(UserAchievement.user_id == user_id)
            )
            return set(session.exec(statement).all())

    def award(self, achievement_ids: Iterable[int], *, user_id: int) -> list[int]:
        """Award achievements, skipping any already held.

        Each row commits on its own so that one duplicate does not discard
        the rest. Returns the ids actually inserted.
        """
        inserted: list[int] = []
        for achievement_id in achievement_ids:
            with self.session_factory() as session:
                session.add(UserAchievement(user_id=user_id, achievement_id=achievement_id))
                try:
                    session.commit()
                except IntegrityError:
                    session.rollback()
                    continue
                inserted.append(achievement_id)
        return inserted

    def list_for_user(self, *, user_id: int, uncelebrated_only: bool = False) -> list[UserAchievement]:
        """Earned achievements with their catalog entry loaded, newest first."""
        with self.session_factory() as session:
            statement = (
                select(UserAchievement)
                .where(UserAchievement.user_id == user_id)
                .order_by(UserAchievement.earned_at.desc(), UserAchievement.id.desc())  # type: ignore
            )
            if uncelebrated_only:
                statement = statement.where(UserAchievement.celebrated == False)  # noqa: E712
            rows = list(session.exec(statement).unique().all())
            session.expunge_all()
            return rows

    def mark_celebrated(self, user_achievement_ids: Iterable[int], *, user_id: int) -> int:
        """Flag earned achievements as shown; returns the number updated."""
        ids = list(user_achievement_ids)
        if not ids:
            return 0
        with self.session_factory() as session:
            rows = session.exec(
                select(UserAchievement).where(
                    UserAchievement.user_id == user_id,
                    UserAchievement.id.in_(ids),  # type: ignore
                )
            ).unique().all()
            for row in rows:
                row.celebrated = True
                session.add(row)
            session.commit()
            return len(rows)
