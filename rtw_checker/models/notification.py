"""Notification model: alerts shown on the staff landing page."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from rtw_checker.models.base import Base, IdMixin
from rtw_checker.models.enums import Severity


class Notification(IdMixin, Base):
    """A dismissible alert, optionally tied to one record."""

    __tablename__ = "notifications"

    source_app: Mapped[str] = mapped_column(String(50), default="rtw-checker", nullable=False)
    severity: Mapped[str] = mapped_column(String(10), default=Severity.INFO.value, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    action_url: Mapped[str | None] = mapped_column(String(500))
    record_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    dismissed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), index=True)
    dismissed_by: Mapped[str | None] = mapped_column(String(255))

    def __repr__(self) -> str:
        return f"<Notification severity={self.severity} record={self.record_id} dismissed={self.dismissed_at}>"
