"""Canonical calendar-day helpers shared by every analytics service.

A *canonical day* is a plain :class:`datetime.date` holding the UTC calendar
date of an instant. All storage and comparison uses this form so client and
server can never disagree about which day a completion belongs to.

Weekday indices follow the Sunday=0 convention used by habit schedules.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Collection, Iterator


def to_canonical_day(value: date | datetime) -> date:
    """Return the UTC calendar date for ``value``.

    Aware datetimes are converted to UTC first; naive datetimes are taken to
    already be in UTC. Plain dates pass through, so the function is idempotent.
    """

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return date(value.year, value.month, value.day)
    return value


def utc_today() -> date:
    """Canonical day for the current instant."""

    return datetime.now(timezone.utc).date()


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def sub_days(day: date, days: int) -> date:
    return day - timedelta(days=days)


def weekday_index(day: date) -> int:
    """Return the Sunday=0 weekday index for ``day``."""

    return day.isoweekday() % 7


def is_active_day(active_days: Collection[int], day: date) -> bool:
    """True iff ``day`` falls on one of the habit's scheduled weekdays."""

    return weekday_index(to_canonical_day(day)) in active_days


def week_start(day: date) -> date:
    """Monday of the ISO week containing ``day``."""

    day = to_canonical_day(day)
    return day - timedelta(days=day.weekday())


def week_end(day: date) -> date:
    """Sunday of the ISO week containing ``day``."""

    return week_start(day) + timedelta(days=6)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every canonical day from ``start`` to ``end`` inclusive."""

    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)


def days_until_next_active(active_days: Collection[int], as_of: date) -> int:
    """Days until the habit is next scheduled; 0 when ``as_of`` is active, -1 if never."""

    if not active_days:
        return -1
    today = weekday_index(as_of)
    for offset in range(7):
        if (today + offset) % 7 in active_days:
            return offset
    return -1


__all__ = [
    "add_days",
    "days_until_next_active",
    "is_active_day",
    "iter_days",
    "sub_days",
    "to_canonical_day",
    "utc_today",
    "week_end",
    "week_start",
    "weekday_index",
]
