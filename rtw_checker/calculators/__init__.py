"""Lifecycle calculators: day arithmetic, status classification, retention dates."""

from rtw_checker.calculators.dates import WARNING_WINDOW_DAYS, add_years, days_until, to_day, today
from rtw_checker.calculators.retention import compute_deletion_due, retention_fields
from rtw_checker.calculators.status import STATUS_LABELS, classify

__all__ = [
    "WARNING_WINDOW_DAYS",
    "add_years",
    "days_until",
    "to_day",
    "today",
    "compute_deletion_due",
    "retention_fields",
    "STATUS_LABELS",
    "classify",
]
