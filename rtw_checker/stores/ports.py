"""Store ports: what the lifecycle engine needs from its collaborators.

The sweep, scrubber and notification generator depend only on these
protocols. ``stores.records`` / ``stores.scans`` / ``security.principal``
hold the concrete adapters; tests substitute in-memory fakes.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any, Protocol

from rtw_checker.models.audit import AuditLog
from rtw_checker.models.deletion import DeletedRecord
from rtw_checker.models.notification import Notification
from rtw_checker.models.record import RTWRecord


@dataclass(frozen=True)
class Actor:
    """Who is performing an operation: a signed-in manager or the system."""

    id: uuid.UUID | None
    email: str
    role: str = "manager"

    @property
    def is_system(self) -> bool:
        return self.role == "system"


SYSTEM_ACTOR = Actor(id=None, email="system", role="system")


class RecordStore(Protocol):
    """Authorized CRUD over records, the deletion ledger and notifications."""

    async def list_due(self, day: date) -> list[RTWRecord]:
        """Records whose deletion_due_date is set and <= ``day``, oldest first."""
        ...

    async def list_active(self) -> list[RTWRecord]: ...

    async def get(self, record_id: uuid.UUID) -> RTWRecord:
        """Raises RecordNotFoundError if absent."""
        ...

    async def insert(self, fields: dict[str, Any], actor: Actor) -> RTWRecord: ...

    async def update(self, record_id: uuid.UUID, fields: dict[str, Any], actor: Actor) -> RTWRecord: ...

    async def delete(self, record_id: uuid.UUID, actor: Actor) -> bool:
        """Delete one record. Returns False if it was already gone."""
        ...

    async def update_statuses(self, changes: dict[uuid.UUID, str]) -> None:
        """Persist recomputed ``status`` values keyed by record id."""
        ...

    async def insert_deleted_entry(self, entry: DeletedRecord) -> None: ...

    async def list_deleted_entries(self, limit: int = 100) -> list[DeletedRecord]: ...

    async def has_undismissed_notification(self, record_id: uuid.UUID, title_prefix: str) -> bool: ...

    async def insert_notification(self, notification: Notification) -> None: ...

    async def list_active_notifications(self) -> list[Notification]: ...

    async def dismiss_notification(self, notification_id: uuid.UUID, dismissed_by: str) -> bool: ...

    async def dismiss_notifications_for_record(self, record_id: uuid.UUID, dismissed_by: str) -> int: ...


class ScanStore(Protocol):
    """Binary storage for document scans, keyed ``{record_id}/{filename}``."""

    async def delete_all_for_record(self, record_id: uuid.UUID) -> int:
        """Remove every object for the record. Zero objects is not an error."""
        ...


class AuditLogStore(Protocol):
    """Read and rewrite the before/after snapshots of audit entries."""

    async def list_for_record(self, record_id: uuid.UUID) -> list[AuditLog]: ...

    async def replace_snapshots(
        self,
        entry_id: uuid.UUID,
        old_values: dict[str, Any] | None,
        new_values: dict[str, Any] | None,
    ) -> None: ...


class PrincipalResolver(Protocol):
    """Resolves the actor for ledger attribution."""

    async def current_actor(self) -> Actor:
        """Raises IdentityResolutionError when the actor cannot be determined."""
        ...
