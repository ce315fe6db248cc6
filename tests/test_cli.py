"""Tests for the click command line interface."""

from __future__ import annotations

from datetime import timedelta

import pytest
from click.testing import CliRunner

from streakwise.cli import cli
from streakwise.services.calendar import utc_today, week_start


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("STREAKWISE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("STREAKWISE_DEV_MODE", "false")
    monkeypatch.delenv("STREAKWISE_DATABASE_URL", raising=False)
    return CliRunner()


def invoke(runner, *args):
    result = runner.invoke(cli, list(args))
    assert result.exit_code == 0, result.output
    return result


def test_init_db_and_seed(runner):
    assert "Database ready" in invoke(runner, "init-db").output
    assert "Seeded 22 new achievements (22 in catalog)." in invoke(runner, "seed-achievements").output
    assert "Seeded 0 new achievements" in invoke(runner, "seed-achievements").output


def test_habit_lifecycle(runner):
    # Habits created here are stamped with the real clock.
    today = utc_today()
    tomorrow = (today + timedelta(days=1)).isoformat()

    assert "Created habit 1: Read" in invoke(runner, "add-habit", "Read", "--emoji", "📚").output

    output = invoke(runner, "toggle", "1", "--day", today.isoformat(), "--as-of", today.isoformat()).output
    assert "completed (streak 1, best 1)" in output

    streaks = invoke(runner, "streaks", "--as-of", tomorrow).output
    assert "Read: 1 (best 1)  AT RISK" in streaks
    assert "Average strength " in streaks

    stats = invoke(runner, "stats", "--as-of", tomorrow).output
    assert "This week " in stats
    assert "Best day: " in stats
    assert "Identity votes: 1" in stats
    assert "OTHER: 1 (1 habits)" in stats
    assert "Recalculated 1 habits." in invoke(runner, "recalculate", "--as-of", today.isoformat()).output

    focus = invoke(runner, "focus", "--as-of", tomorrow, "--hour", "8").output
    assert "score 0%" in focus
    assert "Fresh start!" in focus

    next_week = (today + timedelta(days=7)).isoformat()
    review = invoke(runner, "review", "--as-of", next_week, "--week-of", today.isoformat()).output
    assert f"Week {week_start(today).isoformat()} - " in review
    assert "(1/" in review


def test_review_not_ready_early_in_week(runner):
    invoke(runner, "add-habit", "Read")
    output = invoke(runner, "review", "--as-of", "2024-01-02").output
    assert "not ready yet" in output


def test_invalid_schedule_is_reported(runner):
    result = runner.invoke(cli, ["add-habit", "Gym", "--days", "1,2", "--frequency", "5"])
    assert result.exit_code == 1
    assert "frequency_per_week" in result.output


def test_unknown_habit_is_reported(runner):
    result = runner.invoke(cli, ["toggle", "99", "--day", "2024-01-01"])
    assert result.exit_code == 1
    assert "Habit 99 not found" in result.output
