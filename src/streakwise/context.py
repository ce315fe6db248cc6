"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from sqlmodel import Session

from .config import BaseConfig
from .constants import DEFAULT_ACHIEVEMENTS
from .infra.database import bootstrap_database
from .infra.repositories import (
    SQLModelAchievementRepository,
    SQLModelCelebrationRepository,
    SQLModelHabitRepository,
    SQLModelReviewRepository,
    SQLModelUserRepository,
)


@dataclass
class AppContext:
    """Configuration plus the repositories every tracker operation needs."""

    config: BaseConfig
    session_factory: Callable[[], Session]

    habit_repo: SQLModelHabitRepository
    achievement_repo: SQLModelAchievementRepository
    user_repo: SQLModelUserRepository
    celebration_repo: SQLModelCelebrationRepository
    review_repo: SQLModelReviewRepository


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    session_factory: Optional[Callable[[], Session]] = None,
    seed_achievements: bool = True,
) -> AppContext:
    """Create and initialize the application context.

    Without an explicit ``session_factory`` the configured database is
    created (schema included). The achievement catalog is upserted unless
    ``seed_achievements`` is False.
    """

    if config is None:
        config = BaseConfig()
    if session_factory is None:
        _, session_factory = bootstrap_database(config)

    ctx = AppContext(
        config=config,
        session_factory=session_factory,
        habit_repo=SQLModelHabitRepository(session_factory),
        achievement_repo=SQLModelAchievementRepository(session_factory),
        user_repo=SQLModelUserRepository(session_factory),
        celebration_repo=SQLModelCelebrationRepository(session_factory),
        review_repo=SQLModelReviewRepository(session_factory),
    )
    if seed_achievements:
        ctx.achievement_repo.seed(DEFAULT_ACHIEVEMENTS)
    return ctx
