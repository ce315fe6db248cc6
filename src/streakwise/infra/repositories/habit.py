"""SQLModel implementation of the habit repository."""

from __future__ import annotations

from datetime import date
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ...logging_config import get_logger
from ...models.habit import Habit, HabitCompletion, HabitStreak, HabitStrength

logger = get_logger("repositories.habit")


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID, scoped to its owner."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int) -> list[Habit]:
        """List a user's habits in creation order."""
        with self.session_factory() as session:
            statement = (
                select(Habit)
                .where(Habit.user_id == user_id)
                .order_by(Habit.created_at, Habit.id)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit after checking its schedule."""
        habit.validate_schedule()
        with self.session_factory() as session:
            habit.user_id = user_id
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def update(self, habit: Habit, *, user_id: int) -> Habit:
        """Update an existing habit after checking its schedule."""
        habit.validate_schedule()
        with self.session_factory() as session:
            habit.user_id = user_id
            merged = session.merge(habit)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def delete(self, habit_id: int, *, user_id: int) -> None:
        """Delete a habit with its completions and derived records."""
        with self.session_factory() as session:
            habit = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
            ).first()
            if habit:
                session.delete(habit)
                session.commit()

    # Completion operations
    def completion_days(
        self,
        habit_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> set[date]:
        """Days the habit was completed, optionally limited to a range."""
        with self.session_factory() as session:
            statement = select(HabitCompletion.day).where(HabitCompletion.habit_id == habit_id)
            if start_date is not None:
                statement = statement.where(HabitCompletion.day >= start_date)
            if end_date is not None:
                statement = statement.where(HabitCompletion.day <= end_date)
            return set(session.exec(statement).all())

    def _find_completion(
        self, session: Session, habit_id: int, day: date
    ) -> Optional[HabitCompletion]:
        return session.get(HabitCompletion, (habit_id, day))

    def toggle_completion(self, habit_id: int, day: date) -> bool:
        """Flip the completion for ``day`` and return whether it is now completed.

        A concurrent toggle that inserts the same row first surfaces as an
        IntegrityError; the competing row is then removed so the pair of
        requests still behaves as two toggles.
        """
        with self.session_factory() as session:
            existing = self._find_completion(session, habit_id, day)
            if existing is not None:
                session.delete(existing)
                session.commit()
                return False

            session.add(HabitCompletion(habit_id=habit_id, day=day))
            try:
                session.commit()
                return True
            except IntegrityError:
                session.rollback()
                competing = self._find_completion(session, habit_id, day)
                if competing is None:
                    raise
                logger.info(
                    "Concurrent completion detected; flipping to uncompleted",
                    extra={"habit_id": habit_id, "day": day.isoformat()},
                )
                session.delete(competing)
                session.commit()
                return False

    # Derived records
    def get_streak(self, habit_id: int) -> Optional[HabitStreak]:
        with self.session_factory() as session:
            obj = session.get(HabitStreak, habit_id)
            if obj:
                session.expunge(obj)
            return obj

    def save_streak(self, streak: HabitStreak) -> HabitStreak:
        """Insert or replace the streak record for a habit."""
        with self.session_factory() as session:
            merged = session.merge(streak)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def get_strength(self, habit_id: int) -> Optional[HabitStrength]:
        with self.session_factory() as session:
            obj = session.get(HabitStrength, habit_id)
            if obj:
                session.expunge(obj)
            return obj

    def save_strength(self, strength: HabitStrength) -> HabitStrength:
        """Insert or replace the strength record for a habit."""
        with self.session_factory() as session:
            merged = session.merge(strength)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged
