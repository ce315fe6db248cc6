"""Persisted weekly review."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from ..services.review import (
    HabitPerformance,
    StreakMilestoneNote,
    WeeklyReviewData,
    performance_to_json,
)


class WeeklyReview(SQLModel, table=True):
    """One review per user per ISO week, keyed by the Monday it starts on.

    List columns are stored as JSON but read back through the typed
    accessors below rather than as raw dicts.
    """

    __tablename__: ClassVar[str] = "weekly_review"
    __table_args__ = (UniqueConstraint("user_id", "week_start_date", name="uq_review_user_week"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    week_start_date: date = Field(nullable=False, index=True)
    week_end_date: date = Field(nullable=False)
    completion_rate: int = Field(default=0, nullable=False)
    total_completed: int = Field(default=0, nullable=False)
    total_possible: int = Field(default=0, nullable=False)
    previous_week_rate: Optional[int] = Field(default=None)
    change_from_previous: Optional[int] = Field(default=None)
    best_habit_id: Optional[int] = Field(default=None)
    worst_habit_id: Optional[int] = Field(default=None)
    longest_streak_habit_id: Optional[int] = Field(default=None)
    wins: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    needs_attention: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    focus_suggestion: Optional[str] = Field(default=None, max_length=255)
    new_streak_milestones: list[dict] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    habit_performance: list[dict] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), nullable=False
    )
    viewed_at: Optional[datetime] = Field(default=None)

    @classmethod
    def from_data(cls, user_id: int, data: WeeklyReviewData) -> "WeeklyReview":
        return cls(
            user_id=user_id,
            week_start_date=data.week_start,
            week_end_date=data.week_end,
            completion_rate=data.completion_rate,
            total_completed=data.total_completed,
            total_possible=data.total_possible,
            previous_week_rate=data.previous_week_rate,
            change_from_previous=data.change_from_previous,
            best_habit_id=data.best_habit_id,
            worst_habit_id=data.worst_habit_id,
            longest_streak_habit_id=data.longest_streak_habit_id,
            wins=list(data.wins),
            needs_attention=list(data.needs_attention),
            focus_suggestion=data.focus_suggestion,
            new_streak_milestones=performance_to_json(data.new_streak_milestones),
            habit_performance=performance_to_json(data.habit_performance),
        )

    def performance(self) -> list[HabitPerformance]:
        return [HabitPerformance.from_dict(row) for row in self.habit_performance or []]

    def milestones(self) -> list[StreakMilestoneNote]:
        return [StreakMilestoneNote.from_dict(row) for row in self.new_streak_milestones or []]
