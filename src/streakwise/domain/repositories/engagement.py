"""Protocols for users, celebrations and weekly reviews."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol

from ...models.celebration import Celebration
from ...models.review import WeeklyReview
from ...models.user import User, UserStats


class UserRepository(Protocol):
    def get_by_username(self, username: str) -> Optional[User]:
        ...

    def get_or_create(self, username: str) -> User:
        ...

    def list_ids(self) -> list[int]:
        ...

    def get_stats(self, *, user_id: int) -> UserStats:
        ...

    def record_toggle(self, completed: bool, now: datetime, *, user_id: int) -> UserStats:
        """Apply one completion or un-completion to the user's counters."""
        ...

    def add_experience(self, points: int, *, user_id: int) -> UserStats:
        ...


class CelebrationRepository(Protocol):
    def exists(self, habit_id: int, kind: str) -> bool:
        ...

    def create_once(self, celebration: Celebration) -> Optional[Celebration]:
        """Insert unless already fired for this (habit, type)."""
        ...

    def list_unviewed(self, *, user_id: int) -> list[Celebration]:
        ...

    def mark_viewed(self, celebration_id: int, now: datetime, *, user_id: int) -> bool:
        ...


class ReviewRepository(Protocol):
    def get(self, week_start: date, *, user_id: int) -> Optional[WeeklyReview]:
        ...

    def list_recent(self, *, user_id: int, limit: int = 10) -> list[WeeklyReview]:
        ...

    def save(self, review: WeeklyReview) -> WeeklyReview:
        """Insert a review, yielding to an existing one for the same week."""
        ...

    def delete(self, week_start: date, *, user_id: int) -> None:
        ...

    def mark_viewed(self, week_start: date, now: datetime, *, user_id: int) -> bool:
        ...
