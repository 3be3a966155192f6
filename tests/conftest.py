"""Shared fixtures: in-memory store fakes and a silenced event bus."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from rtw_checker.admin.events import event_bus
from rtw_checker.errors import RecordNotFoundError, StoreError
from rtw_checker.models.audit import AuditLog
from rtw_checker.models.deletion import DeletedRecord
from rtw_checker.models.notification import Notification
from rtw_checker.models.record import RTWRecord
from rtw_checker.stores.ports import Actor

TODAY = date(2025, 6, 15)

MANAGER = Actor(id=uuid.UUID("00000000-0000-0000-0000-0000000000aa"), email="manager@example.com")


def make_record(person_name: str = "Jane Smith", **fields: Any) -> RTWRecord:
    """Transient RTWRecord with every column explicitly set."""
    values: dict[str, Any] = {
        "id": uuid.uuid4(),
        "person_name": person_name,
        "date_of_birth": date(1990, 3, 1),
        "check_date": date(2024, 1, 10),
        "check_type": "initial",
        "check_method": "manual",
        "share_code": None,
        "idsp_provider": None,
        "documents": ["passport_uk"],
        "step2_answers": {"photo_matches": "Yes"},
        "declaration_confirmed": True,
        "checker_name": "Sam Checker",
        "notes": None,
        "scan_path": None,
        "scan_filename": None,
        "expiry_date": None,
        "follow_up_date": None,
        "employment_end_date": None,
        "deletion_due_date": None,
        "status": "valid",
        "onboarding_id": None,
        "created_by": None,
        "gdrive_file_id": None,
    }
    values.update(fields)
    return RTWRecord(**values)


def mock_session_factory(db: MagicMock) -> MagicMock:
    """async_sessionmaker stand-in whose sessions are all ``db``."""
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=db)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory


class FakeRecordStore:
    """Dict-backed RecordStore."""

    def __init__(self, records: list[RTWRecord] | None = None) -> None:
        self.records: dict[uuid.UUID, RTWRecord] = {r.id: r for r in records or []}
        self.ledger: list[DeletedRecord] = []
        self.notifications: list[Notification] = []
        self.audit: list[AuditLog] = []
        self.fail_delete: set[uuid.UUID] = set()
        self.vanish_on_delete: set[uuid.UUID] = set()
        self.fail_list = False
        self.fail_dismiss = False
        self.status_updates: list[dict[uuid.UUID, str]] = []

    async def list_due(self, day: date) -> list[RTWRecord]:
        if self.fail_list:
            raise StoreError("Failed to list records: connection refused")
        due = [r for r in self.records.values() if r.deletion_due_date is not None and r.deletion_due_date <= day]
        return sorted(due, key=lambda r: r.deletion_due_date)

    async def list_active(self) -> list[RTWRecord]:
        if self.fail_list:
            raise StoreError("Failed to list records: connection refused")
        return list(self.records.values())

    async def get(self, record_id: uuid.UUID) -> RTWRecord:
        try:
            return self.records[record_id]
        except KeyError:
            raise RecordNotFoundError(record_id) from None

    async def insert(self, fields: dict[str, Any], actor: Actor) -> RTWRecord:
        record = make_record(**fields)
        self.records[record.id] = record
        self.audit.append(AuditLog(
            id=uuid.uuid4(), action="INSERT", record_id=record.id, user_email=actor.email,
            new_values={"person_name": record.person_name, "status": record.status},
        ))
        return record

    async def update(self, record_id: uuid.UUID, fields: dict[str, Any], actor: Actor) -> RTWRecord:
        record = await self.get(record_id)
        for key, value in fields.items():
            setattr(record, key, value)
        return record

    async def delete(self, record_id: uuid.UUID, actor: Actor) -> bool:
        if record_id in self.fail_delete:
            raise StoreError("Failed to delete record: permission denied")
        if record_id in self.vanish_on_delete:
            self.records.pop(record_id, None)
            return False
        return self.records.pop(record_id, None) is not None

    async def update_statuses(self, changes: dict[uuid.UUID, str]) -> None:
        self.status_updates.append(dict(changes))
        for record_id, status in changes.items():
            self.records[record_id].status = status

    async def insert_deleted_entry(self, entry: DeletedRecord) -> None:
        self.ledger.append(entry)

    async def list_deleted_entries(self, limit: int = 100) -> list[DeletedRecord]:
        return list(reversed(self.ledger))[:limit]

    async def has_undismissed_notification(self, record_id: uuid.UUID, title_prefix: str) -> bool:
        return any(
            n.record_id == record_id and n.dismissed_at is None and n.title.startswith(title_prefix)
            for n in self.notifications
        )

    async def insert_notification(self, notification: Notification) -> None:
        notification.created_at = datetime.now(UTC)
        self.notifications.append(notification)

    async def list_active_notifications(self) -> list[Notification]:
        return [n for n in reversed(self.notifications) if n.dismissed_at is None]

    async def dismiss_notification(self, notification_id: uuid.UUID, dismissed_by: str) -> bool:
        for n in self.notifications:
            if n.id == notification_id and n.dismissed_at is None:
                n.dismissed_at = datetime.now(UTC)
                n.dismissed_by = dismissed_by
                return True
        return False

    async def dismiss_notifications_for_record(self, record_id: uuid.UUID, dismissed_by: str) -> int:
        if self.fail_dismiss:
            raise StoreError("Failed to dismiss record notifications: timeout")
        count = 0
        for n in self.notifications:
            if n.record_id == record_id and n.dismissed_at is None:
                n.dismissed_at = datetime.now(UTC)
                n.dismissed_by = dismissed_by
                count += 1
        return count


class FakeScanStore:
    """Counts scans per record; deleting removes them all."""

    def __init__(self, scans: dict[uuid.UUID, int] | None = None) -> None:
        self.scans: dict[uuid.UUID, int] = dict(scans or {})
        self.fail_for: set[uuid.UUID] = set()

    async def delete_all_for_record(self, record_id: uuid.UUID) -> int:
        if record_id in self.fail_for:
            raise StoreError("Failed to delete document scans: bucket unavailable")
        return self.scans.pop(record_id, 0)


class FakeAuditStore:
    """Audit entries keyed by id."""

    def __init__(self, entries: list[AuditLog] | None = None) -> None:
        self.entries: dict[uuid.UUID, AuditLog] = {e.id: e for e in entries or []}
        self.replaced: list[uuid.UUID] = []

    async def list_for_record(self, record_id: uuid.UUID) -> list[AuditLog]:
        return [e for e in self.entries.values() if e.record_id == record_id]

    async def replace_snapshots(
        self,
        entry_id: uuid.UUID,
        old_values: dict[str, Any] | None,
        new_values: dict[str, Any] | None,
    ) -> None:
        entry = self.entries[entry_id]
        entry.old_values = old_values
        entry.new_values = new_values
        self.replaced.append(entry_id)


class StaticPrincipal:
    """Returns a fixed actor, or raises the given error."""

    def __init__(self, actor: Actor | None = None, error: Exception | None = None) -> None:
        self.actor = actor
        self.error = error

    async def current_actor(self) -> Actor:
        if self.error is not None:
            raise self.error
        assert self.actor is not None
        return self.actor


@pytest.fixture(autouse=True)
def emitted():
    """Capture events instead of queueing them on the shared bus."""
    with patch.object(event_bus, "emit", new_callable=AsyncMock) as mock_emit:
        yield mock_emit


def emitted_types(mock_emit: AsyncMock) -> list[str]:
    return [c.args[0].event_type.value for c in mock_emit.call_args_list]
