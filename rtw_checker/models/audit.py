"""AuditLog model: change history for records and system actions.

Record mutations store full before/after snapshots in ``old_values`` /
``new_values``. Rows are never deleted; when a record is erased its
personal-data keys are stripped from these snapshots instead
(see ``security.scrubber``).
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, String, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from rtw_checker.models.base import Base, IdMixin


class AuditLog(IdMixin, Base):
    """Audit trail entry."""

    __tablename__ = "audit_log"

    user_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), index=True)
    user_email: Mapped[str | None] = mapped_column(String(255), comment="Email, or 'system'")
    action: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    table_name: Mapped[str | None] = mapped_column(String(50))
    record_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), index=True)

    old_values: Mapped[dict[str, Any] | None] = mapped_column(JSONB)
    new_values: Mapped[dict[str, Any] | None] = mapped_column(JSONB)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<AuditLog action={self.action} record={self.record_id}>"
