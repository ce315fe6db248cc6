"""Achievement repository protocol."""

from __future__ import annotations

from typing import Iterable, Optional, Protocol

from ...models.achievement import Achievement, UserAchievement
from ...services.milestones import AchievementDefinition


class AchievementRepository(Protocol):
    """Repository for the achievement catalog and earned achievements."""

    def seed(self, definitions: Iterable[AchievementDefinition]) -> int:
        """Upsert catalog entries by key."""
        ...

    def list_catalog(self) -> list[Achievement]:
        ...

    def get_by_key(self, key: str) -> Optional[Achievement]:
        ...

    def earned_keys(self, *, user_id: int) -> set[str]:
        ...

    def award(self, achievement_ids: Iterable[int], *, user_id: int) -> list[int]:
        """Award achievements, returning the ids actually inserted."""
        ...

    def list_for_user(self, *, user_id: int, uncelebrated_only: bool = False) -> list[UserAchievement]:
        ...

    def mark_celebrated(self, user_achievement_ids: Iterable[int], *, user_id: int) -> int:
        ...
