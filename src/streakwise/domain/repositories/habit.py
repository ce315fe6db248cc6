"""Habit repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.habit import Habit, HabitStreak, HabitStrength


class HabitRepository(Protocol):
    """Repository for habits, their completions and derived records."""

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def list_all(self, *, user_id: int) -> list[Habit]:
        """List a user's habits."""
        ...

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit."""
        ...

    def update(self, habit: Habit, *, user_id: int) -> Habit:
        """Update an existing habit."""
        ...

    def delete(self, habit_id: int, *, user_id: int) -> None:
        """Delete a habit by ID."""
        ...

    # Completion operations
    def completion_days(
        self,
        habit_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> set[date]:
        """Days the habit was completed."""
        ...

    def toggle_completion(self, habit_id: int, day: date) -> bool:
        """Flip a day's completion; returns the new state."""
        ...

    def get_streak(self, habit_id: int) -> Optional[HabitStreak]:
        ...

    def save_streak(self, streak: HabitStreak) -> HabitStreak:
        ...

    def get_strength(self, habit_id: int) -> Optional[HabitStrength]:
        ...

    def save_strength(self, strength: HabitStrength) -> HabitStrength:
        ...
