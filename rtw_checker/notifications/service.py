"""Notification service: create, list and dismiss landing-page alerts."""

from __future__ import annotations

import logging
import uuid

from rtw_checker.config import settings
from rtw_checker.models.enums import Severity
from rtw_checker.models.notification import Notification
from rtw_checker.stores.ports import RecordStore

logger = logging.getLogger(__name__)


class NotificationService:
    """Thin layer over the record store's notification operations."""

    def __init__(self, records: RecordStore, source_app: str | None = None) -> None:
        self._records = records
        self._source_app = source_app or settings.retention.notification_source_app

    async def create_notification(
        self,
        *,
        title: str,
        message: str,
        severity: Severity = Severity.INFO,
        action_url: str | None = None,
        record_id: uuid.UUID | None = None,
    ) -> Notification:
        notification = Notification(
            id=uuid.uuid4(),
            source_app=self._source_app,
            severity=severity.value,
            title=title,
            message=message,
            action_url=action_url,
            record_id=record_id,
        )
        await self._records.insert_notification(notification)
        return notification

    async def list_active(self) -> list[Notification]:
        """Undismissed notifications, newest first."""
        return await self._records.list_active_notifications()

    async def dismiss(self, notification_id: uuid.UUID, dismissed_by: str) -> bool:
        """Dismiss one notification. False if missing or already dismissed."""
        dismissed = await self._records.dismiss_notification(notification_id, dismissed_by)
        if dismissed:
            logger.info("Notification %s dismissed by %s", notification_id, dismissed_by)
        return dismissed

    async def dismiss_for_record(self, record_id: uuid.UUID, dismissed_by: str) -> int:
        return await self._records.dismiss_notifications_for_record(record_id, dismissed_by)
