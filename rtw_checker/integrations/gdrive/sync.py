"""Drive sync subscriber: uploads the record document after each write.

Consumes ``record.created`` / ``record.updated`` from the event bus. The
document itself comes from an injected DocumentRenderer; rendering PDFs is
outside this service.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

from rtw_checker.admin.events import emit
from rtw_checker.calculators.dates import to_day
from rtw_checker.errors import RecordNotFoundError
from rtw_checker.integrations.gdrive.client import DriveClient, DriveUploadError
from rtw_checker.integrations.gdrive.schemas import RenderedDocument
from rtw_checker.models.record import RTWRecord
from rtw_checker.schemas.events import EventType, SystemEvent
from rtw_checker.stores.ports import SYSTEM_ACTOR, RecordStore

logger = logging.getLogger(__name__)

WATCHED_EVENTS: list[EventType] = [EventType.RECORD_CREATED, EventType.RECORD_UPDATED]


class DocumentRenderer(Protocol):
    """Produces the audit document (PDF) for a record."""

    async def render(self, record: RTWRecord) -> bytes: ...


def document_file_name(record: RTWRecord) -> str:
    """``RTW_Record_Jane_Smith_20250107.pdf``."""
    safe_name = re.sub(r"[^A-Za-z0-9]+", "_", record.person_name).strip("_") or "record"
    check_date = to_day(record.check_date)
    stamp = check_date.strftime("%Y%m%d") if check_date else "pending"
    return f"RTW_Record_{safe_name}_{stamp}.pdf"


class DriveSyncSubscriber:
    """Event handler that mirrors record documents into Google Drive."""

    def __init__(self, records: RecordStore, renderer: DocumentRenderer, client: DriveClient) -> None:
        self._records = records
        self._renderer = renderer
        self._client = client

    async def on_event(self, event: SystemEvent) -> None:
        if event.event_type not in WATCHED_EVENTS or event.record_id is None:
            return
        # Our own file-id write-back goes through the store, not the service,
        # so it never re-enters here.
        try:
            record = await self._records.get(event.record_id)
        except RecordNotFoundError:
            logger.info("Drive sync skipped: record %s no longer exists", event.record_id)
            return

        document = RenderedDocument(
            file_name=document_file_name(record),
            content=await self._renderer.render(record),
        )

        try:
            result = await self._client.upload(
                record.person_name,
                document,
                old_file_id=record.gdrive_file_id,
            )
        except DriveUploadError as exc:
            logger.error("Drive upload failed for record %s: %s", record.id, exc)
            await emit(SystemEvent(
                event_type=EventType.DRIVE_UPLOAD_FAILED,
                record_id=record.id,
                data={"error": str(exc)},
                source_module="integrations.gdrive.sync",
            ))
            return

        if result.file_id != record.gdrive_file_id:
            await self._records.update(record.id, {"gdrive_file_id": result.file_id}, SYSTEM_ACTOR)

        await emit(SystemEvent(
            event_type=EventType.DRIVE_UPLOAD_SUCCEEDED,
            record_id=record.id,
            data={"file_id": result.file_id, "replaced": bool(record.gdrive_file_id)},
            source_module="integrations.gdrive.sync",
        ))
        logger.info("Drive upload complete for record %s (file=%s)", record.id, result.file_id)
