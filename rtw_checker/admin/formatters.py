"""UK locale date formatting for notification text and API payloads."""

from __future__ import annotations

from datetime import date, datetime

from rtw_checker.calculators.dates import to_day


def format_date_uk(value: date | datetime | str | None) -> str:
    """Long UK date: 2025-01-07 -> "07 January 2025"."""
    day = to_day(value)
    if day is None:
        return ""
    return day.strftime("%d %B %Y")


def format_date_short(value: date | datetime | str | None) -> str:
    """Short UK date: 2025-01-07 -> "07/01/2025"."""
    day = to_day(value)
    if day is None:
        return ""
    return day.strftime("%d/%m/%Y")


def format_days_remaining(days: int | None) -> str:
    """'1 day remaining' / 'N days remaining' / 'due today'."""
    if days is None:
        return ""
    if days == 0:
        return "due today"
    if days == 1:
        return "1 day remaining"
    return f"{days} days remaining"
