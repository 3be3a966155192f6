"""SQLAlchemy implementation of the AuditLogStore port."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rtw_checker.errors import StoreError, db_error_summary
from rtw_checker.models.audit import AuditLog


class SqlAuditLogStore:
    """Reads and rewrites ``audit_log`` snapshots. Never deletes rows."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_for_record(self, record_id: uuid.UUID) -> list[AuditLog]:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(AuditLog).where(AuditLog.record_id == record_id).order_by(AuditLog.created_at.asc())
                )
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to fetch audit entries: {db_error_summary(exc)}") from exc

    async def replace_snapshots(
        self,
        entry_id: uuid.UUID,
        old_values: dict[str, Any] | None,
        new_values: dict[str, Any] | None,
    ) -> None:
        try:
            async with self._session_factory() as db:
                await db.execute(
                    update(AuditLog)
                    .where(AuditLog.id == entry_id)
                    .values(old_values=old_values, new_values=new_values)
                )
                await db.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to scrub audit entry {entry_id}: {db_error_summary(exc)}") from exc
