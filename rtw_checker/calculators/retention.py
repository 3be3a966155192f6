"""Retention period calculator.

UK guidance: keep right-to-work evidence for the duration of employment
plus two years, then delete it.
"""

from __future__ import annotations

from datetime import date

from rtw_checker.calculators.dates import add_years

RETENTION_YEARS = 2


def compute_deletion_due(employment_end_date: date | None) -> date | None:
    """Date the record becomes due for deletion, or None while still employed.

    Uses calendar years: an end date of 29 Feb 2024 gives 28 Feb 2026.
    """
    if employment_end_date is None:
        return None
    return add_years(employment_end_date, RETENTION_YEARS)


def retention_fields(employment_end_date: date | None) -> dict[str, date | None]:
    """Both retention columns, for writing together in one update."""
    return {
        "employment_end_date": employment_end_date,
        "deletion_due_date": compute_deletion_due(employment_end_date),
    }
