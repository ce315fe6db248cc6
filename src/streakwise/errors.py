"""Exception hierarchy for the habit tracker."""

from __future__ import annotations


class StreakwiseError(Exception):
    """Base class for errors raised by the application layer."""


class HabitNotFoundError(StreakwiseError, LookupError):
    """Raised when a habit does not exist or is not owned by the requesting user."""

    def __init__(self, habit_id: int, user_id: int) -> None:
        super().__init__(f"Habit {habit_id} not found for user {user_id}")
        self.habit_id = habit_id
        self.user_id = user_id


class InvalidScheduleError(StreakwiseError, ValueError):
    """Raised when a habit's weekly schedule violates its invariants."""
