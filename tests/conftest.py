"""Pytest configuration and shared fixtures for Streakwise tests.

Pure analytics tests need none of these. Repository, tracker and CLI tests
get a throwaway SQLite file per test so nothing touches a real database.
"""

from __future__ import annotations

import tempfile
from datetime import date, datetime, timezone
from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

import streakwise.models  # noqa: F401  registers every table on SQLModel.metadata
from streakwise.config import TestConfig
from streakwise.context import create_app_context
from streakwise.infra.database import create_session_factory
from streakwise.models import Habit, User

EVERY_DAY = [0, 1, 2, 3, 4, 5, 6]
WEEKDAYS = [1, 2, 3, 4, 5]

# 2024-01-01 is a Monday.
JAN_1 = date(2024, 1, 1)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with every table created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(
        f"sqlite:///{db_path}", echo=False, connect_args={"check_same_thread": False}
    )
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Transactional session factory matching what the repositories expect."""
    return create_session_factory(db_engine)


@pytest.fixture
def config(tmp_path, monkeypatch) -> TestConfig:
    """Test configuration with its data directory under ``tmp_path``."""
    monkeypatch.setenv("STREAKWISE_DATA_DIR", str(tmp_path))
    return TestConfig()


@pytest.fixture
def app_ctx(config, session_factory):
    """Application context over the per-test database, catalog seeded."""
    return create_app_context(config, session_factory=session_factory)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def user(app_ctx) -> User:
    """Default user owning test data."""
    return app_ctx.user_repo.get_or_create("tester")


@pytest.fixture
def habit_factory(app_ctx, user):
    """Factory for creating persisted habits.

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(
        name: str = "Exercise",
        active_days: list[int] | None = None,
        created_at: datetime | None = None,
        frequency_per_week: int | None = None,
        emoji: str | None = None,
        owner: User | None = None,
        category: str | None = None,
    ) -> Habit:
        days = list(EVERY_DAY if active_days is None else active_days)
        habit = Habit(
            name=name,
            emoji=emoji,
            category=category,
            active_days=days,
            frequency_per_week=frequency_per_week if frequency_per_week is not None else len(days),
            created_at=created_at or datetime(2024, 1, 1, tzinfo=timezone.utc),
            user_id=0,
        )
        return app_ctx.habit_repo.create(habit, user_id=(owner or user).id)

    return _create_habit
