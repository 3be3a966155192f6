"""Record status classifier.

Pure function of ``(record, today)``. First match wins:

  1. onboarding-linked, no check date yet   → PENDING_ONBOARDING
  2. deletion_due_date <= today             → PENDING_DELETION
  3. expiry_date < today                    → EXPIRED
  4. follow_up_date < today                 → FOLLOW_UP_OVERDUE
  5. follow_up_date within 28 days          → FOLLOW_UP_DUE
  6. expiry_date within 28 days             → FOLLOW_UP_DUE
  7. otherwise                              → VALID

The order matters: an overdue follow-up must never be hidden behind a
future expiry, and a record awaiting GDPR deletion is reported as such
whatever its other dates say.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Protocol

from rtw_checker.calculators.dates import to_day, within_window
from rtw_checker.models.enums import RecordStatus

logger = logging.getLogger(__name__)

STATUS_LABELS: dict[RecordStatus, str] = {
    RecordStatus.PENDING_ONBOARDING: "Pending onboarding",
    RecordStatus.PENDING_DELETION: "Pending deletion",
    RecordStatus.EXPIRED: "Expired",
    RecordStatus.FOLLOW_UP_OVERDUE: "Overdue",
    RecordStatus.FOLLOW_UP_DUE: "Follow-up due",
    RecordStatus.VALID: "Valid",
}


class LifecycleDates(Protocol):
    """The fields the classifier reads. ORM records satisfy this."""

    onboarding_id: Any
    check_date: Any
    expiry_date: Any
    follow_up_date: Any
    deletion_due_date: Any


def _day(record: LifecycleDates, field: str) -> date | None:
    """Read a date field, treating unparseable values as unset."""
    raw = getattr(record, field, None)
    try:
        return to_day(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed %s on record %s", field, getattr(record, "id", "?"))
        return None


def classify(record: LifecycleDates, today: date) -> RecordStatus:
    """Compute the compliance status of a record on ``today``."""
    if getattr(record, "onboarding_id", None) is not None and _day(record, "check_date") is None:
        return RecordStatus.PENDING_ONBOARDING

    deletion_due = _day(record, "deletion_due_date")
    if deletion_due is not None and deletion_due <= today:
        return RecordStatus.PENDING_DELETION

    expiry = _day(record, "expiry_date")
    if expiry is not None and expiry < today:
        return RecordStatus.EXPIRED

    follow_up = _day(record, "follow_up_date")
    if follow_up is not None and follow_up < today:
        return RecordStatus.FOLLOW_UP_OVERDUE

    if within_window(follow_up, today):
        return RecordStatus.FOLLOW_UP_DUE

    if within_window(expiry, today):
        return RecordStatus.FOLLOW_UP_DUE

    return RecordStatus.VALID
