"""Notification generator: periodic batch job over every active record.

Runs after the retention sweep so records already purged are not
considered. For each (record, rule) pair that matches, a notification is
inserted unless an undismissed one with the rule's title prefix already
exists for that record.

The check-then-insert is best-effort: two concurrent runs can both pass the
check and insert a duplicate. Duplicates are cosmetic (dismissal is
idempotent), so no lock is taken.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from rtw_checker.admin.events import emit
from rtw_checker.calculators.dates import today as current_day
from rtw_checker.calculators.status import classify
from rtw_checker.config import settings
from rtw_checker.errors import StoreError
from rtw_checker.models.enums import RecordStatus
from rtw_checker.models.record import RTWRecord
from rtw_checker.notifications.rules import NOTIFICATION_RULES, NotificationRule, RecordDates
from rtw_checker.notifications.service import NotificationService
from rtw_checker.schemas.events import EventType, SystemEvent
from rtw_checker.stores.ports import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class GenerationSummary:
    """Outcome of one generator run."""

    evaluated: int = 0
    created: int = 0
    already_notified: int = 0
    errors: list[str] = field(default_factory=list)


class NotificationGenerator:
    """Evaluates NOTIFICATION_RULES against current records."""

    def __init__(
        self,
        records: RecordStore,
        notifications: NotificationService | None = None,
        *,
        base_url: str | None = None,
        timezone: str | None = None,
        rules: list[NotificationRule] | None = None,
    ) -> None:
        self._records = records
        self._notifications = notifications or NotificationService(records)
        self._base_url = (base_url if base_url is not None else settings.retention.app_base_url).rstrip("/")
        self._timezone = timezone or settings.retention.timezone
        self._rules = rules if rules is not None else NOTIFICATION_RULES

    def action_url(self, record: RTWRecord) -> str:
        return f"{self._base_url}/#/record/{record.id}"

    async def generate_notifications(self, *, today: date | None = None) -> GenerationSummary:
        """Create missing notifications for every record. Never raises."""
        summary = GenerationSummary()
        day = today or current_day(self._timezone)

        try:
            records = await self._records.list_active()
        except StoreError as exc:
            logger.error("Notification run aborted: %s", exc)
            summary.errors.append(str(exc))
            return summary

        for record in records:
            rules = self._rules
            if classify(record, day) is RecordStatus.PENDING_ONBOARDING:
                # No check yet: only the deletion alert applies.
                rules = [rule for rule in self._rules if rule.category == "pending_deletion"]
            try:
                dates = RecordDates.of(record, day)
            except ValueError as exc:
                summary.errors.append(f"{record.person_name}: {exc}")
                continue
            summary.evaluated += 1
            for rule in rules:
                try:
                    if not rule.condition(dates):
                        continue
                    created = await self._notify_once(record, rule, dates)
                except Exception as exc:
                    logger.exception("Notification rule %s failed for record %s", rule.category, record.id)
                    summary.errors.append(f"{record.person_name} ({rule.category}): {exc}")
                    continue
                if created:
                    summary.created += 1
                else:
                    summary.already_notified += 1

        await emit(SystemEvent(
            event_type=EventType.NOTIFICATIONS_GENERATED,
            data={
                "evaluated": summary.evaluated,
                "created": summary.created,
                "already_notified": summary.already_notified,
                "errors": len(summary.errors),
            },
            source_module="notifications.generator",
        ))

        logger.info(
            "Notification run complete: evaluated=%d created=%d existing=%d errors=%d",
            summary.evaluated,
            summary.created,
            summary.already_notified,
            len(summary.errors),
        )
        return summary

    async def _notify_once(self, record: RTWRecord, rule: NotificationRule, dates: RecordDates) -> bool:
        """Insert the rule's notification unless an open one exists. True if inserted."""
        if await self._records.has_undismissed_notification(record.id, rule.title_prefix):
            return False
        await self._notifications.create_notification(
            title=rule.title(record.person_name),
            message=rule.message(record.person_name, dates),
            severity=rule.severity,
            action_url=self.action_url(record),
            record_id=record.id,
        )
        return True
