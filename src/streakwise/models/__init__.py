"""SQLModel table exports."""

from .achievement import Achievement, UserAchievement
from .celebration import Celebration
from .habit import Habit, HabitCompletion, HabitStreak, HabitStrength
from .review import WeeklyReview
from .user import User, UserStats

__all__ = [
    "Achievement",
    "Celebration",
    "Habit",
    "HabitCompletion",
    "HabitStreak",
    "HabitStrength",
    "User",
    "UserAchievement",
    "UserStats",
    "WeeklyReview",
]
