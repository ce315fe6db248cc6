"""Repository protocol definitions for domain layer."""

from .achievement import AchievementRepository
from .engagement import CelebrationRepository, ReviewRepository, UserRepository
from .habit import HabitRepository

__all__ = [
    "AchievementRepository",
    "CelebrationRepository",
    "HabitRepository",
    "ReviewRepository",
    "UserRepository",
]
