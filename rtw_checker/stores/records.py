"""SQLAlchemy implementation of the RecordStore port.

Each method runs in its own short transaction, so a failure part-way through
a multi-step operation (the retention sweep, say) leaves the steps that
already succeeded committed. Every record insert/update/delete also writes
an ``audit_log`` row with JSON snapshots in the same transaction.
"""

from __future__ import annotations

import contextlib
import logging
import uuid
from collections.abc import AsyncGenerator
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

from sqlalchemy import exists, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rtw_checker.errors import RecordNotFoundError, StoreError, db_error_summary
from rtw_checker.models.audit import AuditLog
from rtw_checker.models.deletion import DeletedRecord
from rtw_checker.models.notification import Notification
from rtw_checker.models.record import RTWRecord
from rtw_checker.stores.ports import Actor

logger = logging.getLogger(__name__)

# Server-managed columns; not reliably loaded right after a flush.
_SNAPSHOT_SKIP: frozenset[str] = frozenset({"created_at", "updated_at"})


def _jsonable(value: Any) -> Any:
    if isinstance(value, date | datetime):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


def record_snapshot(record: RTWRecord) -> dict[str, Any]:
    """JSON-serializable copy of a record's columns, for audit entries.

    Reads the instance state directly so no lazy load is triggered.
    """
    state = record.__dict__
    return {
        col.key: _jsonable(state.get(col.key))
        for col in RTWRecord.__table__.columns
        if col.key not in _SNAPSHOT_SKIP
    }


def _audit(action: str, record_id: uuid.UUID, actor: Actor, old: dict | None, new: dict | None) -> AuditLog:
    return AuditLog(
        user_id=actor.id,
        user_email=actor.email,
        action=action,
        table_name=RTWRecord.__tablename__,
        record_id=record_id,
        old_values=old,
        new_values=new,
    )


class SqlRecordStore:
    """RecordStore backed by PostgreSQL."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @contextlib.asynccontextmanager
    async def _session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        """Open a session, commit on success, and wrap driver errors."""
        try:
            async with self._session_factory() as db:
                yield db
                await db.commit()
        except SQLAlchemyError as exc:
            detail = db_error_summary(exc)
            logger.error("Record store %s failed: %s", operation, detail)
            raise StoreError(f"Failed to {operation}: {detail}") from exc

    # ── Records ─────────────────────────────────────────────────────

    async def list_due(self, day: date) -> list[RTWRecord]:
        async with self._session("fetch records pending deletion") as db:
            result = await db.execute(
                select(RTWRecord)
                .where(
                    RTWRecord.deletion_due_date.isnot(None),
                    RTWRecord.deletion_due_date <= day,
                )
                .order_by(RTWRecord.deletion_due_date.asc())
            )
            return list(result.scalars().all())

    async def list_active(self) -> list[RTWRecord]:
        async with self._session("fetch records") as db:
            result = await db.execute(
                select(RTWRecord).order_by(RTWRecord.check_date.desc().nulls_last())
            )
            return list(result.scalars().all())

    async def get(self, record_id: uuid.UUID) -> RTWRecord:
        async with self._session("fetch record") as db:
            record = await db.get(RTWRecord, record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        return record

    async def insert(self, fields: dict[str, Any], actor: Actor) -> RTWRecord:
        async with self._session("create record") as db:
            record = RTWRecord(**fields, created_by=actor.id)
            db.add(record)
            await db.flush()
            db.add(_audit("create", record.id, actor, None, record_snapshot(record)))
            await db.commit()
            await db.refresh(record)
        logger.info("Record created: id=%s", record.id)
        return record

    async def update(self, record_id: uuid.UUID, fields: dict[str, Any], actor: Actor) -> RTWRecord:
        async with self._session("update record") as db:
            record = await db.get(RTWRecord, record_id)
            if record is None:
                raise RecordNotFoundError(record_id)
            old = record_snapshot(record)
            for key, value in fields.items():
                setattr(record, key, value)
            db.add(_audit("update", record.id, actor, old, record_snapshot(record)))
            await db.commit()
            await db.refresh(record)
        return record

    async def delete(self, record_id: uuid.UUID, actor: Actor) -> bool:
        async with self._session("delete record") as db:
            record = await db.get(RTWRecord, record_id)
            if record is None:
                return False
            db.add(_audit("delete", record.id, actor, record_snapshot(record), None))
            await db.delete(record)
        return True

    async def update_statuses(self, changes: dict[uuid.UUID, str]) -> None:
        """Persist recomputed statuses. Not audited: status is derived data."""
        if not changes:
            return
        async with self._session("update statuses") as db:
            for record_id, status in changes.items():
                await db.execute(update(RTWRecord).where(RTWRecord.id == record_id).values(status=status))

    # ── Deletion ledger ─────────────────────────────────────────────

    async def insert_deleted_entry(self, entry: DeletedRecord) -> None:
        async with self._session("log record deletion") as db:
            db.add(entry)

    async def list_deleted_entries(self, limit: int = 100) -> list[DeletedRecord]:
        async with self._session("fetch deleted records") as db:
            result = await db.execute(
                select(DeletedRecord).order_by(DeletedRecord.deleted_at.desc()).limit(limit)
            )
            return list(result.scalars().all())

    # ── Notifications ───────────────────────────────────────────────

    async def has_undismissed_notification(self, record_id: uuid.UUID, title_prefix: str) -> bool:
        async with self._session("check notifications") as db:
            result = await db.execute(
                select(
                    exists().where(
                        Notification.record_id == record_id,
                        Notification.dismissed_at.is_(None),
                        Notification.title.startswith(title_prefix, autoescape=True),
                    )
                )
            )
            return bool(result.scalar())

    async def insert_notification(self, notification: Notification) -> None:
        async with self._session("create notification") as db:
            db.add(notification)

    async def list_active_notifications(self) -> list[Notification]:
        async with self._session("fetch notifications") as db:
            result = await db.execute(
                select(Notification)
                .where(Notification.dismissed_at.is_(None))
                .order_by(Notification.created_at.desc())
            )
            return list(result.scalars().all())

    async def dismiss_notification(self, notification_id: uuid.UUID, dismissed_by: str) -> bool:
        async with self._session("dismiss notification") as db:
            result = await db.execute(
                update(Notification)
                .where(Notification.id == notification_id, Notification.dismissed_at.is_(None))
                .values(dismissed_at=datetime.now(UTC), dismissed_by=dismissed_by)
            )
            return result.rowcount > 0  # type: ignore[attr-defined]

    async def dismiss_notifications_for_record(self, record_id: uuid.UUID, dismissed_by: str) -> int:
        async with self._session("dismiss record notifications") as db:
            result = await db.execute(
                update(Notification)
                .where(Notification.record_id == record_id, Notification.dismissed_at.is_(None))
                .values(dismissed_at=datetime.now(UTC), dismissed_by=dismissed_by)
            )
            return result.rowcount  # type: ignore[attr-defined]
