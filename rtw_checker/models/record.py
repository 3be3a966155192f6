"""RTWRecord model: one right-to-work check for one person.

``deletion_due_date`` is derived from ``employment_end_date`` (plus two
calendar years) and is only ever written through
``calculators.retention.retention_fields``.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any

from sqlalchemy import Boolean, Date, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from rtw_checker.models.base import Base, TimestampMixin
from rtw_checker.models.enums import CheckMethod, CheckType, RecordStatus


class RTWRecord(TimestampMixin, Base):
    """A right-to-work compliance check."""

    __tablename__ = "rtw_records"

    # Subject
    person_name: Mapped[str] = mapped_column(String(200), nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column(Date)

    # Check
    check_date: Mapped[date | None] = mapped_column(Date, comment="Null while onboarding is pending")
    check_type: Mapped[str] = mapped_column(String(20), default=CheckType.INITIAL.value, nullable=False)
    check_method: Mapped[str] = mapped_column(String(20), default=CheckMethod.MANUAL.value, nullable=False)
    share_code: Mapped[str | None] = mapped_column(String(20), comment="Online checks only")
    idsp_provider: Mapped[str | None] = mapped_column(String(200), comment="IDSP checks only")
    documents: Mapped[list[str] | None] = mapped_column(ARRAY(String(50)), comment="Document identifier tokens")
    step2_answers: Mapped[dict[str, Any] | None] = mapped_column(
        JSONB, comment="Verification question key -> Yes / No / N/A"
    )

    # Declaration
    declaration_confirmed: Mapped[bool] = mapped_column(Boolean, default=False)
    checker_name: Mapped[str | None] = mapped_column(String(200))
    notes: Mapped[str | None] = mapped_column(Text)

    # Document scan
    scan_path: Mapped[str | None] = mapped_column(String(500), comment="'{record_id}/{filename}'")
    scan_filename: Mapped[str | None] = mapped_column(String(255))

    # Lifecycle dates
    expiry_date: Mapped[date | None] = mapped_column(Date, index=True)
    follow_up_date: Mapped[date | None] = mapped_column(Date, index=True)
    employment_end_date: Mapped[date | None] = mapped_column(Date)
    deletion_due_date: Mapped[date | None] = mapped_column(Date, index=True)

    # Denormalized status (see calculators.status)
    status: Mapped[str] = mapped_column(String(30), default=RecordStatus.VALID.value, nullable=False)

    # Links
    onboarding_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), index=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True))
    gdrive_file_id: Mapped[str | None] = mapped_column(String(200))

    def __repr__(self) -> str:
        return f"<RTWRecord id={self.id} status={self.status}>"
