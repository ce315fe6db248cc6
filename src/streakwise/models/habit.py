"""Habit tracking data structures."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy import JSON, Column
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ..errors import InvalidScheduleError

if TYPE_CHECKING:  # pragma: no cover
    from .celebration import Celebration
    from .user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Habit(SQLModel, table=True):
    """A recurring habit scheduled on a subset of weekdays (Sunday=0)."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    emoji: Optional[str] = Field(default=None, max_length=16)
    category: Optional[str] = Field(default=None, max_length=40)
    frequency_per_week: int = Field(default=7, nullable=False)
    active_days: list[int] = Field(
        default_factory=lambda: [0, 1, 2, 3, 4, 5, 6],
        sa_column=Column(JSON, nullable=False),
    )
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)

    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="habits"))
    completions: list["HabitCompletion"] = Relationship(
        back_populates="habit",
        sa_relationship=relationship(
            "HabitCompletion", back_populates="habit", cascade="all, delete-orphan"
        ),
    )
    streak: Optional["HabitStreak"] = Relationship(
        sa_relationship=relationship(
            "HabitStreak", uselist=False, cascade="all, delete-orphan"
        ),
    )
    strength: Optional["HabitStrength"] = Relationship(
        sa_relationship=relationship(
            "HabitStrength", uselist=False, cascade="all, delete-orphan"
        ),
    )
    celebrations: list["Celebration"] = Relationship(
        sa_relationship=relationship("Celebration", cascade="all, delete-orphan"),
    )

    @property
    def schedule(self) -> frozenset[int]:
        """Active weekdays as a set for membership checks."""
        return frozenset(self.active_days or ())

    def validate_schedule(self) -> None:
        """Raise InvalidScheduleError unless the weekly schedule is coherent."""

        days = self.active_days or []
        if not days:
            raise InvalidScheduleError("A habit needs at least one active day.")
        if any(not isinstance(d, int) or not 0 <= d <= 6 for d in days):
            raise InvalidScheduleError(f"Active days must be weekday indices 0-6, got {days!r}.")
        if len(set(days)) != len(days):
            raise InvalidScheduleError("Active days must not repeat.")
        if not 1 <= self.frequency_per_week <= 7:
            raise InvalidScheduleError("frequency_per_week must be between 1 and 7.")
        if self.frequency_per_week > len(days):
            raise InvalidScheduleError(
                f"frequency_per_week ({self.frequency_per_week}) exceeds the "
                f"{len(days)} active days scheduled."
            )


class HabitCompletion(SQLModel, table=True):
    """A habit marked done on one canonical (UTC) calendar day."""

    __tablename__: ClassVar[str] = "habit_completion"

    habit_id: int = Field(foreign_key="habit.id", primary_key=True)
    day: date = Field(primary_key=True, index=True)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)

    habit: "Habit" = Relationship(
        back_populates="completions",
        sa_relationship=relationship("Habit", back_populates="completions"),
    )


class HabitStreak(SQLModel, table=True):
    """Derived streak record, recomputed after every toggle."""

    __tablename__: ClassVar[str] = "habit_streak"

    habit_id: int = Field(foreign_key="habit.id", primary_key=True)
    current_streak: int = Field(default=0, nullable=False)
    longest_streak: int = Field(default=0, nullable=False)
    total_completions: int = Field(default=0, nullable=False)
    last_completed_at: Optional[date] = Field(default=None)
    streak_started_at: Optional[date] = Field(default=None)
    consecutive_misses: int = Field(default=0, nullable=False)
    last_calculated_at: datetime = Field(default_factory=_utcnow, nullable=False)


class HabitStrength(SQLModel, table=True):
    """Derived strength record; refreshed on toggle and lazily when stale."""

    __tablename__: ClassVar[str] = "habit_strength"

    habit_id: int = Field(foreign_key="habit.id", primary_key=True)
    strength: int = Field(default=0, nullable=False)
    current_streak_score: int = Field(default=0, nullable=False)
    consistency_score: int = Field(default=0, nullable=False)
    longevity_score: int = Field(default=0, nullable=False)
    recovery_score: int = Field(default=0, nullable=False)
    trend_score: int = Field(default=0, nullable=False)
    missed_days_count: int = Field(default=0, nullable=False)
    recovery_count: int = Field(default=0, nullable=False)
    last_30_days_rate: int = Field(default=0, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)
