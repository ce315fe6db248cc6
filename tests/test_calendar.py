"""Tests for canonical day and weekday helpers."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from streakwise.services.calendar import (
    add_days,
    days_until_next_active,
    is_active_day,
    iter_days,
    sub_days,
    to_canonical_day,
    week_end,
    week_start,
    weekday_index,
)


class TestCanonicalDay:
    def test_aware_datetime_converts_to_utc_first(self):
        """Late evening in New York is already the next UTC day."""
        eastern = timezone(timedelta(hours=-5))
        value = datetime(2024, 1, 1, 23, 30, tzinfo=eastern)
        assert to_canonical_day(value) == date(2024, 1, 2)

    def test_naive_datetime_is_taken_as_utc(self):
        assert to_canonical_day(datetime(2024, 1, 1, 23, 30)) == date(2024, 1, 1)

    def test_idempotent(self):
        day = to_canonical_day(datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc))
        assert to_canonical_day(day) == day
        assert to_canonical_day(to_canonical_day(day)) == day

    def test_day_arithmetic(self):
        assert add_days(date(2024, 2, 28), 2) == date(2024, 3, 1)
        assert sub_days(date(2024, 1, 1), 1) == date(2023, 12, 31)


class TestWeekdays:
    def test_sunday_is_zero(self):
        assert weekday_index(date(2024, 1, 7)) == 0
        assert weekday_index(date(2024, 1, 1)) == 1
        assert weekday_index(date(2024, 1, 6)) == 6

    def test_is_active_day(self):
        weekdays = {1, 2, 3, 4, 5}
        assert is_active_day(weekdays, date(2024, 1, 5))
        assert not is_active_day(weekdays, date(2024, 1, 6))
        assert not is_active_day(set(), date(2024, 1, 5))

    def test_week_bounds_are_monday_to_sunday(self):
        assert week_start(date(2024, 1, 7)) == date(2024, 1, 1)
        assert week_start(date(2024, 1, 1)) == date(2024, 1, 1)
        assert week_end(date(2024, 1, 3)) == date(2024, 1, 7)

    def test_iter_days_is_inclusive(self):
        days = list(iter_days(date(2024, 1, 30), date(2024, 2, 2)))
        assert days == [date(2024, 1, 30), date(2024, 1, 31), date(2024, 2, 1), date(2024, 2, 2)]
        assert list(iter_days(date(2024, 1, 2), date(2024, 1, 1))) == []

    def test_days_until_next_active(self):
        sunday = date(2024, 1, 7)
        assert days_until_next_active({0}, sunday) == 0
        assert days_until_next_active({1}, sunday) == 1
        assert days_until_next_active({6}, sunday) == 6
        assert days_until_next_active(set(), sunday) == -1
