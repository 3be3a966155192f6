"""Day-granularity date helpers.

Every comparison in the lifecycle engine happens on calendar dates, never on
datetimes, so a record checked late in the evening in one timezone does not
flip status a few hours early in another.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

# Follow-up and expiry warnings start this many days ahead (inclusive).
WARNING_WINDOW_DAYS = 28


def today(tz: str = "Europe/London") -> date:
    """Current calendar date in the given timezone."""
    return datetime.now(ZoneInfo(tz)).date()


def to_day(value: date | datetime | str | None) -> date | None:
    """Normalize a date-like value to a plain ``date``.

    Accepts ``date``, ``datetime`` (time-of-day dropped) and ISO strings
    (``"2025-01-31"`` or a full timestamp). Raises ``ValueError`` on a
    string that is not an ISO date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def warning_horizon(day: date) -> date:
    """Last day (inclusive) of the warning window starting at ``day``."""
    return day + timedelta(days=WARNING_WINDOW_DAYS)


def within_window(value: date | None, day: date) -> bool:
    """True when ``value`` falls in ``[day, day + 28 days]``."""
    return value is not None and day <= value <= warning_horizon(day)


def add_years(value: date, years: int) -> date:
    """Advance by whole calendar years.

    29 February lands on 28 February when the target year is not a leap year.
    """
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        return value.replace(year=value.year + years, day=28)


def days_until(value: date | datetime | str | None, day: date) -> int | None:
    """Signed number of days from ``day`` to ``value`` (negative when past)."""
    target = to_day(value)
    if target is None:
        return None
    return (target - day).days
