"""Achievement catalog and earned-achievement records."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ..services.milestones import AchievementCategory, AchievementDefinition, MetricSelector


class Achievement(SQLModel, table=True):
    """Seeded catalog entry; never modified by user activity."""

    __tablename__: ClassVar[str] = "achievement"

    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(nullable=False, unique=True, index=True, max_length=64)
    name: str = Field(nullable=False, max_length=80)
    description: str = Field(default="", max_length=255)
    emoji: str = Field(default="", max_length=16)
    category: str = Field(nullable=False, max_length=16, index=True)
    metric: str = Field(nullable=False, max_length=32)
    threshold: int = Field(nullable=False)
    xp_reward: int = Field(default=0, nullable=False)

    def to_definition(self) -> AchievementDefinition:
        return AchievementDefinition(
            key=self.key,
            name=self.name,
            description=self.description,
            emoji=self.emoji,
            category=AchievementCategory(self.category),
            metric=MetricSelector(self.metric),
            threshold=self.threshold,
            xp_reward=self.xp_reward,
        )


class UserAchievement(SQLModel, table=True):
    """An achievement earned by a user; at most one row per (user, achievement)."""

    __tablename__: ClassVar[str] = "user_achievement"
    __table_args__ = (UniqueConstraint("user_id", "achievement_id", name="uq_user_achievement"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    achievement_id: int = Field(foreign_key="achievement.id", nullable=False)
    earned_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), nullable=False
    )
    celebrated: bool = Field(default=False, nullable=False)

    achievement: "Achievement" = Relationship(
        sa_relationship=relationship("Achievement", lazy="joined")
    )
