"""SystemEvent schema: the event type that flows through the application.

Record writes and retention/notification runs emit SystemEvents after their
changes are committed. Subscribers (audit logger, Drive sync) consume them
asynchronously. Payloads carry ids and counts, never personal data.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """All event types emitted by the system."""

    # Record lifecycle
    RECORD_CREATED = "record.created"
    RECORD_UPDATED = "record.updated"
    RECORD_DELETED = "record.deleted"

    # Retention & notifications
    SWEEP_COMPLETED = "retention.sweep_completed"
    SWEEP_ABORTED = "retention.sweep_aborted"
    NOTIFICATIONS_GENERATED = "notifications.generated"

    # Google Drive sync
    DRIVE_UPLOAD_SUCCEEDED = "drive.upload_succeeded"
    DRIVE_UPLOAD_FAILED = "drive.upload_failed"

    # Admin
    ADMIN_ACCESS = "admin.access"

    # System
    SYSTEM_STARTUP = "system.startup"
    SYSTEM_SHUTDOWN = "system.shutdown"


class SystemEvent(BaseModel):
    """Core event that flows through the application.

    Immutable once created. Consumed by:
    - audit_on_event → writes to audit_log table
    - DriveSyncSubscriber → uploads the record PDF to Google Drive
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    event_type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Context (optional; not every event relates to a record)
    record_id: uuid.UUID | None = None
    actor_id: str | None = None
    actor_role: str | None = None

    # Flexible payload
    data: dict[str, Any] = Field(default_factory=dict)

    # Metadata
    source_module: str | None = Field(default=None, description="Module that emitted this event")

    model_config = {"frozen": True}
