"""DeletedRecord model: GDPR deletion ledger.

Write-once: a row is inserted before the record it describes is destroyed,
and is never updated or deleted afterwards.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import Date, DateTime, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from rtw_checker.models.base import Base, IdMixin


class DeletedRecord(IdMixin, Base):
    """Proof that a record was deleted, by whom, and why."""

    __tablename__ = "deleted_records"

    original_record_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    person_name: Mapped[str] = mapped_column(String(200), nullable=False)
    employment_start_date: Mapped[date | None] = mapped_column(Date)
    employment_end_date: Mapped[date | None] = mapped_column(Date)
    deletion_due_date: Mapped[date | None] = mapped_column(Date)

    deleted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    deleted_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), comment="Null for the system actor")
    deleted_by_email: Mapped[str | None] = mapped_column(String(255), comment="Email, or 'system'")
    reason: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<DeletedRecord original={self.original_record_id} reason={self.reason!r}>"
