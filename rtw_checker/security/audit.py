"""Audit log subscriber: persists system events to the audit_log table.

Registered as a global subscriber. Record snapshots are written by the
record store itself; this covers everything else (sweep runs, notification
runs, Drive uploads, admin access).

Never raises: failures are logged but never propagate to the event bus.
"""

from __future__ import annotations

import logging

from rtw_checker.db.engine import async_session_factory
from rtw_checker.models.audit import AuditLog
from rtw_checker.schemas.events import EventType, SystemEvent

logger = logging.getLogger(__name__)

# Already audited with full snapshots by SqlRecordStore.
_SNAPSHOT_AUDITED: frozenset[EventType] = frozenset({
    EventType.RECORD_CREATED,
    EventType.RECORD_UPDATED,
})


async def audit_on_event(event: SystemEvent) -> None:
    """Write a SystemEvent to the audit_log table."""
    if event.event_type in _SNAPSHOT_AUDITED:
        return
    try:
        async with async_session_factory() as db:
            db.add(AuditLog(
                action=event.event_type.value,
                user_email=event.actor_id,
                record_id=event.record_id,
                new_values={**event.data, "source_module": event.source_module},
            ))
            await db.commit()
    except Exception:
        logger.exception(
            "Failed to persist audit event: %s (record=%s)",
            event.event_type.value,
            event.record_id,
        )
