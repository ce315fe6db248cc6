"""Concrete repository implementations using SQLModel."""

from .achievement import SQLModelAchievementRepository
from .celebration import SQLModelCelebrationRepository
from .habit import SQLModelHabitRepository
from .review import SQLModelReviewRepository
from .user import SQLModelUserRepository

__all__ = [
    "SQLModelAchievementRepository",
    "SQLModelCelebrationRepository",
    "SQLModelHabitRepository",
    "SQLModelReviewRepository",
    "SQLModelUserRepository",
]
