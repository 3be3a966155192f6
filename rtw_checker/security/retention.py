"""GDPR retention sweep: permanently erases records past their retention date.

For every record whose ``deletion_due_date`` has been reached:

  1. write a DeletedRecord ledger entry (before anything is destroyed)
  2. delete the record's document scans
  3. delete the record row
  4. scrub personal data out of its audit history
  5. dismiss any open notifications for it (best-effort)

Each record is processed in isolation: a failure is reported as
``"{name}: {error}"`` and the sweep moves on. Steps already completed for
the failing record are not rolled back; a ledger entry for an attempted
deletion is kept rather than lost.

Safe to call on every schedule tick: deleted records no longer match the
candidate query, so a second run with no intervening changes is a no-op.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, date, datetime

from rtw_checker.admin.events import emit
from rtw_checker.calculators.dates import today as current_day
from rtw_checker.calculators.dates import to_day
from rtw_checker.config import settings
from rtw_checker.errors import IdentityResolutionError, RecordNotFoundError, StoreError
from rtw_checker.models.deletion import DeletedRecord
from rtw_checker.models.record import RTWRecord
from rtw_checker.schemas.events import EventType, SystemEvent
from rtw_checker.security.scrubber import AuditScrubber
from rtw_checker.stores.ports import Actor, PrincipalResolver, RecordStore, ScanStore

logger = logging.getLogger(__name__)

REASON_AUTO = "GDPR retention period expired (auto)"
REASON_RETENTION = "GDPR retention period expired"
REASON_MANUAL = "Manual deletion by manager"


@dataclass
class SweepReport:
    """Outcome of one sweep run.

    ``already_gone`` lists records a concurrent caller deleted between our
    candidate query and our delete; they are not errors.
    """

    deleted_names: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    already_gone: list[str] = field(default_factory=list)

    @property
    def nothing_to_do(self) -> bool:
        return not (self.deleted_names or self.errors or self.already_gone)


class RetentionSweep:
    """Runs the retention sweep and manual record deletions."""

    def __init__(
        self,
        records: RecordStore,
        scans: ScanStore,
        scrubber: AuditScrubber,
        principal: PrincipalResolver,
        timezone: str | None = None,
    ) -> None:
        self._records = records
        self._scans = scans
        self._scrubber = scrubber
        self._principal = principal
        self._timezone = timezone or settings.retention.timezone

    async def run_sweep(self, *, today: date | None = None) -> SweepReport:
        """Delete every record whose retention period has ended."""
        report = SweepReport()
        day = today or current_day(self._timezone)

        try:
            candidates = await self._records.list_due(day)
        except StoreError as exc:
            report.errors.append(str(exc))
            return report

        if not candidates:
            logger.debug("Retention sweep: nothing due on %s", day)
            return report

        try:
            actor = await self._principal.current_actor()
        except IdentityResolutionError as exc:
            logger.error("Retention sweep aborted: %s", exc)
            report.errors.append(f"Could not identify current user: {exc}")
            await emit(SystemEvent(
                event_type=EventType.SWEEP_ABORTED,
                data={"candidates": len(candidates), "error": "identity_resolution"},
                source_module="security.retention",
            ))
            return report

        reason = REASON_AUTO if actor.is_system else REASON_RETENTION

        for record in candidates:
            try:
                removed = await self._purge(record, actor, reason)
            except StoreError as exc:
                logger.error("Retention sweep failed for record %s: %s", record.id, exc)
                report.errors.append(f"{record.person_name}: {exc}")
                continue
            except Exception as exc:
                logger.exception("Retention sweep failed for record %s", record.id)
                report.errors.append(f"{record.person_name}: {exc}")
                continue
            if removed:
                report.deleted_names.append(record.person_name)
            else:
                report.already_gone.append(record.person_name)

        await emit(SystemEvent(
            event_type=EventType.SWEEP_COMPLETED,
            actor_id=actor.email,
            actor_role=actor.role,
            data={
                "candidates": len(candidates),
                "deleted": len(report.deleted_names),
                "already_gone": len(report.already_gone),
                "errors": len(report.errors),
            },
            source_module="security.retention",
        ))

        logger.info(
            "Retention sweep complete: candidates=%d deleted=%d already_gone=%d errors=%d",
            len(candidates),
            len(report.deleted_names),
            len(report.already_gone),
            len(report.errors),
        )
        return report

    async def delete_record(self, record_id: uuid.UUID, *, today: date | None = None) -> DeletedRecord:
        """Manager-initiated deletion of a single record.

        Goes through the same ledger → scans → delete → scrub pipeline as the
        sweep. Raises RecordNotFoundError if the record does not exist and
        IdentityResolutionError if the actor cannot be resolved.
        """
        record = await self._records.get(record_id)
        actor = await self._principal.current_actor()
        day = today or current_day(self._timezone)

        due = to_day(record.deletion_due_date)
        reason = REASON_RETENTION if due is not None and due <= day else REASON_MANUAL

        entry = self._ledger_entry(record, actor, reason)
        if not await self._purge(record, actor, reason, entry=entry):
            raise RecordNotFoundError(record_id)
        return entry

    async def _purge(
        self,
        record: RTWRecord,
        actor: Actor,
        reason: str,
        entry: DeletedRecord | None = None,
    ) -> bool:
        """Erase one record. Returns False if it had already been deleted."""
        await self._records.insert_deleted_entry(entry or self._ledger_entry(record, actor, reason))
        await self._scans.delete_all_for_record(record.id)
        removed = await self._records.delete(record.id, actor)
        await self._scrubber.scrub(record.id)
        try:
            await self._records.dismiss_notifications_for_record(record.id, actor.email)
        except StoreError as exc:
            # Best-effort once the record is gone.
            logger.warning("Could not dismiss notifications for deleted record %s: %s", record.id, exc)

        if not removed:
            logger.info("Record %s was already deleted by another caller", record.id)
            return False

        await emit(SystemEvent(
            event_type=EventType.RECORD_DELETED,
            record_id=record.id,
            actor_id=actor.email,
            actor_role=actor.role,
            data={"reason": reason},
            source_module="security.retention",
        ))
        return True

    @staticmethod
    def _ledger_entry(record: RTWRecord, actor: Actor, reason: str) -> DeletedRecord:
        return DeletedRecord(
            original_record_id=record.id,
            person_name=record.person_name,
            employment_start_date=to_day(record.check_date),
            employment_end_date=to_day(record.employment_end_date),
            deletion_due_date=to_day(record.deletion_due_date),
            deleted_at=datetime.now(UTC),
            deleted_by=actor.id,
            deleted_by_email=actor.email,
            reason=reason,
        )
