"""One-shot milestone notices shown to the user once."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class Celebration(SQLModel, table=True):
    """A fired milestone; ``viewed_at`` is set once the user dismisses it."""

    __tablename__: ClassVar[str] = "celebration"
    __table_args__ = (UniqueConstraint("habit_id", "type", name="uq_celebration_habit_type"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    habit_id: Optional[int] = Field(default=None, foreign_key="habit.id", index=True)
    type: str = Field(nullable=False, max_length=32)
    value: int = Field(default=0, nullable=False)
    title: str = Field(nullable=False, max_length=80)
    message: str = Field(nullable=False, max_length=255)
    triggered_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), nullable=False
    )
    viewed_at: Optional[datetime] = Field(default=None)
