"""Notification rules: date thresholds that turn into landing-page alerts.

Guards mirror the status classifier's precedence so one underlying
condition produces one alert:

  | rule                | trigger                                   | severity |
  |---------------------|-------------------------------------------|----------|
  | GDPR deletion due   | deletion_due <= today                     | urgent   |
  | expired             | expiry < today, not pending deletion      | urgent   |
  | follow-up overdue   | follow_up < today, not expired/deletion   | warning  |
  | follow-up due       | follow_up in 28-day window, not exp/del   | info     |
  | expiring soon       | expiry in window, no follow-up in window, | warning  |
  |                     | not pending deletion                      |          |

Deduplication matches on ``title_prefix``, so prefixes must not be
prefixes of one another.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from rtw_checker.admin.formatters import format_date_uk, format_days_remaining
from rtw_checker.calculators.dates import days_until, to_day, within_window
from rtw_checker.models.enums import Severity
from rtw_checker.models.record import RTWRecord


@dataclass(frozen=True)
class RecordDates:
    """Normalized lifecycle dates of one record on one day."""

    today: date
    deletion_due: date | None
    expiry: date | None
    follow_up: date | None

    @classmethod
    def of(cls, record: RTWRecord, today: date) -> RecordDates:
        return cls(
            today=today,
            deletion_due=to_day(record.deletion_due_date),
            expiry=to_day(record.expiry_date),
            follow_up=to_day(record.follow_up_date),
        )

    @property
    def pending_deletion(self) -> bool:
        return self.deletion_due is not None and self.deletion_due <= self.today

    @property
    def expired(self) -> bool:
        return self.expiry is not None and self.expiry < self.today

    @property
    def follow_up_overdue(self) -> bool:
        return self.follow_up is not None and self.follow_up < self.today

    @property
    def follow_up_soon(self) -> bool:
        return within_window(self.follow_up, self.today)

    @property
    def expiry_soon(self) -> bool:
        return within_window(self.expiry, self.today)

    def days_to(self, value: date | None) -> int | None:
        return days_until(value, self.today)


@dataclass(frozen=True)
class NotificationRule:
    """A single rule mapping record dates to a notification."""

    category: str
    title_prefix: str
    severity: Severity
    condition: Callable[[RecordDates], bool]
    message: Callable[[str, RecordDates], str]

    def title(self, person_name: str) -> str:
        return f"{self.title_prefix}: {person_name}"


NOTIFICATION_RULES: list[NotificationRule] = [
    NotificationRule(
        category="pending_deletion",
        title_prefix="GDPR deletion due",
        severity=Severity.URGENT,
        condition=lambda d: d.pending_deletion,
        message=lambda name, d: (
            f"The retention period for {name}'s right to work record ended on "
            f"{format_date_uk(d.deletion_due)}. The record must be deleted."
        ),
    ),
    NotificationRule(
        category="expired",
        title_prefix="Right to work expired",
        severity=Severity.URGENT,
        condition=lambda d: d.expired and not d.pending_deletion,
        message=lambda name, d: f"{name}'s permission to work expired on {format_date_uk(d.expiry)}.",
    ),
    NotificationRule(
        category="follow_up_overdue",
        title_prefix="Follow-up check overdue",
        severity=Severity.WARNING,
        condition=lambda d: d.follow_up_overdue and not d.expired and not d.pending_deletion,
        message=lambda name, d: (
            f"{name}'s follow-up right to work check was due on {format_date_uk(d.follow_up)}."
        ),
    ),
    NotificationRule(
        category="follow_up_due",
        title_prefix="Follow-up check due",
        severity=Severity.INFO,
        condition=lambda d: d.follow_up_soon and not d.expired and not d.pending_deletion,
        message=lambda name, d: (
            f"{name}'s follow-up right to work check is due on {format_date_uk(d.follow_up)} "
            f"({format_days_remaining(d.days_to(d.follow_up))})."
        ),
    ),
    NotificationRule(
        category="expiring_soon",
        title_prefix="Right to work expiring",
        severity=Severity.WARNING,
        condition=lambda d: d.expiry_soon and not d.follow_up_soon and not d.pending_deletion,
        message=lambda name, d: (
            f"{name}'s permission to work expires on {format_date_uk(d.expiry)} "
            f"({format_days_remaining(d.days_to(d.expiry))})."
        ),
    ),
]
