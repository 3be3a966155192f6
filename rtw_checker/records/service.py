"""Record service: the write path for right-to-work records.

Every write:
- sets or clears ``employment_end_date`` and ``deletion_due_date`` together,
- recomputes the denormalized ``status``,
- emits ``record.created`` / ``record.updated`` after the store commits
  (the Drive sync subscriber picks these up).
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from types import SimpleNamespace
from typing import Any

from rtw_checker.admin.events import emit
from rtw_checker.calculators.dates import to_day
from rtw_checker.calculators.dates import today as current_day
from rtw_checker.calculators.retention import retention_fields
from rtw_checker.calculators.status import classify
from rtw_checker.config import settings
from rtw_checker.errors import ValidationError
from rtw_checker.models.record import RTWRecord
from rtw_checker.schemas.events import EventType, SystemEvent
from rtw_checker.stores.ports import Actor, RecordStore

logger = logging.getLogger(__name__)

DATE_FIELDS: frozenset[str] = frozenset({
    "date_of_birth",
    "check_date",
    "expiry_date",
    "follow_up_date",
    "employment_end_date",
})

# Derived columns; callers never write them directly.
_DERIVED_FIELDS: frozenset[str] = frozenset({"deletion_due_date", "status"})

_STATUS_INPUTS = ("onboarding_id", "check_date", "expiry_date", "follow_up_date", "deletion_due_date")


def _normalize(fields: dict[str, Any]) -> dict[str, Any]:
    """Reject derived columns, parse date fields, and attach retention dates."""
    derived = _DERIVED_FIELDS.intersection(fields)
    if derived:
        msg = f"Derived fields cannot be written directly: {sorted(derived)}"
        raise ValidationError(msg)

    clean = dict(fields)
    for key in DATE_FIELDS.intersection(clean):
        try:
            clean[key] = to_day(clean[key])
        except (TypeError, ValueError) as exc:
            msg = f"Invalid date for {key}: {clean[key]!r}"
            raise ValidationError(msg) from exc

    if "employment_end_date" in clean:
        clean.update(retention_fields(clean["employment_end_date"]))
    return clean


class RecordService:
    """Create and update records with derived fields kept consistent."""

    def __init__(self, records: RecordStore, timezone: str | None = None) -> None:
        self._records = records
        self._timezone = timezone or settings.retention.timezone

    def _today(self, today: date | None) -> date:
        return today or current_day(self._timezone)

    async def create_record(self, fields: dict[str, Any], actor: Actor, *, today: date | None = None) -> RTWRecord:
        if not str(fields.get("person_name") or "").strip():
            raise ValidationError("person_name is required")

        clean = _normalize(fields)
        status_view = SimpleNamespace(**{k: clean.get(k) for k in _STATUS_INPUTS})
        clean["status"] = classify(status_view, self._today(today)).value

        record = await self._records.insert(clean, actor)

        await emit(SystemEvent(
            event_type=EventType.RECORD_CREATED,
            record_id=record.id,
            actor_id=actor.email,
            actor_role=actor.role,
            data={"check_method": record.check_method},
            source_module="records.service",
        ))
        return record

    async def update_record(
        self,
        record_id: uuid.UUID,
        fields: dict[str, Any],
        actor: Actor,
        *,
        today: date | None = None,
    ) -> RTWRecord:
        clean = _normalize(fields)
        current = await self._records.get(record_id)

        merged = {k: clean.get(k, getattr(current, k, None)) for k in _STATUS_INPUTS}
        clean["status"] = classify(SimpleNamespace(**merged), self._today(today)).value

        record = await self._records.update(record_id, clean, actor)

        await emit(SystemEvent(
            event_type=EventType.RECORD_UPDATED,
            record_id=record.id,
            actor_id=actor.email,
            actor_role=actor.role,
            data={"fields": sorted(clean)},
            source_module="records.service",
        ))
        return record

    async def set_employment_end(
        self,
        record_id: uuid.UUID,
        employment_end_date: date | str | None,
        actor: Actor,
        *,
        today: date | None = None,
    ) -> RTWRecord:
        """Set (or clear, with None) the employment end date and its deletion date."""
        return await self.update_record(
            record_id, {"employment_end_date": employment_end_date}, actor, today=today
        )

    async def refresh_statuses(self, *, today: date | None = None) -> int:
        """Recompute ``status`` for every record; persist the ones that changed."""
        day = self._today(today)
        changes: dict[uuid.UUID, str] = {}
        for record in await self._records.list_active():
            status = classify(record, day).value
            if status != record.status:
                changes[record.id] = status
        await self._records.update_statuses(changes)
        if changes:
            logger.info("Refreshed status on %d record(s)", len(changes))
        return len(changes)
