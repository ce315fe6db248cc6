"""User model owning habits and earned achievements."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover
    from .habit import Habit


class User(SQLModel, table=True):
    """Application user. Authentication lives outside this package."""

    __tablename__: ClassVar[str] = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(nullable=False, unique=True, index=True, max_length=64)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    habits: list["Habit"] = Relationship(
        back_populates="user",
        sa_relationship=relationship("Habit", back_populates="user"),
    )


class UserStats(SQLModel, table=True):
    """Running per-user counters updated on every completion toggle."""

    __tablename__: ClassVar[str] = "user_stats"

    user_id: int = Field(foreign_key="user.id", primary_key=True)
    total_completions: int = Field(default=0, nullable=False)
    identity_votes: int = Field(default=0, nullable=False)
    experience_points: int = Field(default=0, nullable=False)
    last_active_at: Optional[datetime] = Field(default=None)
