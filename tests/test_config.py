"""Tests for environment driven configuration."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy.pool import StaticPool

from streakwise import config as config_module
from streakwise.config import BaseConfig


@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("STREAKWISE_DATA_DIR", str(tmp_path))
    for name in (
        "STREAKWISE_DATABASE_URL",
        "STREAKWISE_DEV_MODE",
        "STREAKWISE_STRENGTH_STALE_MINUTES",
        "STREAKWISE_REVIEW_MIN_WEEKDAY",
        "STREAKWISE_SCHEDULER_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def test_defaults(data_dir):
    config = BaseConfig()

    assert config.DATA_DIR == data_dir.resolve()
    assert config.DATABASE_URL == f"sqlite:///{data_dir.resolve() / 'streakwise.db'}"
    assert config.STRENGTH_STALE_AFTER == timedelta(hours=1)
    assert config.REVIEW_MIN_WEEKDAY == 3
    assert config.SCHEDULER_ENABLED is False
    assert config.sqlalchemy_engine_options() == {"connect_args": {"check_same_thread": False}}


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("STREAKWISE_DEV_MODE", "no")
    monkeypatch.setenv("STREAKWISE_STRENGTH_STALE_MINUTES", "15")
    monkeypatch.setenv("STREAKWISE_SCHEDULER_ENABLED", "on")
    monkeypatch.setenv("STREAKWISE_DATABASE_URL", "postgresql://localhost/streakwise")

    config = BaseConfig()

    assert config.DEV_MODE is False
    assert config.STRENGTH_STALE_AFTER == timedelta(minutes=15)
    assert config.SCHEDULER_ENABLED is True
    assert config.sqlalchemy_engine_options() == {"pool_pre_ping": True}


def test_bad_integer_is_rejected(monkeypatch):
    monkeypatch.setenv("STREAKWISE_STRENGTH_STALE_MINUTES", "soon")
    with pytest.raises(ValueError, match="STREAKWISE_STRENGTH_STALE_MINUTES"):
        BaseConfig()


@pytest.mark.parametrize("weekday", ["-1", "7"])
def test_review_weekday_out_of_range(monkeypatch, weekday):
    monkeypatch.setenv("STREAKWISE_REVIEW_MIN_WEEKDAY", weekday)
    with pytest.raises(ValueError):
        BaseConfig()


def test_test_config_uses_shared_memory_database():
    config = config_module.TestConfig()

    assert config.DATABASE_URL == "sqlite://"
    assert config.sqlalchemy_engine_options()["poolclass"] is StaticPool
