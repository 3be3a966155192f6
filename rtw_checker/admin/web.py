"""Manager API: retention, deletion ledger and notifications.

All routes require HTTP Basic Auth via verify_manager. Operations that
write attributable changes resolve the caller to a manager profile first.
"""
# ruff: noqa: B008

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status

from rtw_checker.admin.auth import verify_manager
from rtw_checker.admin.events import emit
from rtw_checker.calculators.dates import today as current_day
from rtw_checker.calculators.status import STATUS_LABELS, classify
from rtw_checker.config import settings
from rtw_checker.db.engine import async_session_factory
from rtw_checker.errors import IdentityResolutionError, RecordNotFoundError, ValidationError
from rtw_checker.notifications.generator import NotificationGenerator
from rtw_checker.notifications.service import NotificationService
from rtw_checker.records.service import RecordService
from rtw_checker.schemas.api import (
    DeletedRecordOut,
    EmploymentEndIn,
    GenerationSummaryOut,
    NotificationOut,
    RecordStatusOut,
    RecordSummary,
    SweepReportOut,
)
from rtw_checker.schemas.events import EventType, SystemEvent
from rtw_checker.security.principal import ManagerPrincipal
from rtw_checker.security.retention import RetentionSweep
from rtw_checker.security.scrubber import AuditScrubber
from rtw_checker.stores.audit import SqlAuditLogStore
from rtw_checker.stores.ports import PrincipalResolver, RecordStore
from rtw_checker.stores.records import SqlRecordStore
from rtw_checker.stores.scans import LocalScanStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/manager", tags=["manager"], dependencies=[Depends(verify_manager)])


# ── Dependencies ─────────────────────────────────────────────────────


def get_record_store() -> RecordStore:
    return SqlRecordStore(async_session_factory)


def get_principal(email: str = Depends(verify_manager)) -> PrincipalResolver:
    return ManagerPrincipal(async_session_factory, email)


def get_sweep(
    records: RecordStore = Depends(get_record_store),
    principal: PrincipalResolver = Depends(get_principal),
) -> RetentionSweep:
    return RetentionSweep(
        records=records,
        scans=LocalScanStore(settings.storage.scan_storage_root),
        scrubber=AuditScrubber(SqlAuditLogStore(async_session_factory)),
        principal=principal,
    )


def get_generator(records: RecordStore = Depends(get_record_store)) -> NotificationGenerator:
    return NotificationGenerator(records)


def get_record_service(records: RecordStore = Depends(get_record_store)) -> RecordService:
    return RecordService(records)


async def _emit_access(admin: str, action: str, record_id: uuid.UUID | None = None) -> None:
    """Emit ADMIN_ACCESS audit event for privileged actions."""
    await emit(SystemEvent(
        event_type=EventType.ADMIN_ACCESS,
        record_id=record_id,
        actor_id=admin,
        actor_role="manager",
        data={"action": action, "interface": "api"},
        source_module="admin.web",
    ))


def _today():
    return current_day(settings.retention.timezone)


# ── Retention ────────────────────────────────────────────────────────


@router.post("/retention/sweep", response_model=SweepReportOut)
async def run_retention_sweep(
    admin: str = Depends(verify_manager),
    sweep: RetentionSweep = Depends(get_sweep),
) -> SweepReportOut:
    """Delete every record past its retention date. Per-record errors are in ``errors``."""
    await _emit_access(admin, "retention_sweep")
    report = await sweep.run_sweep()
    return SweepReportOut.model_validate(report)


@router.get("/retention/pending", response_model=list[RecordSummary])
async def list_pending_deletion(records: RecordStore = Depends(get_record_store)) -> list[RecordSummary]:
    due = await records.list_due(_today())
    return [RecordSummary.model_validate(r) for r in due]


@router.get("/retention/deleted", response_model=list[DeletedRecordOut])
async def list_deleted_records(
    limit: int = 100,
    records: RecordStore = Depends(get_record_store),
) -> list[DeletedRecordOut]:
    entries = await records.list_deleted_entries(limit=limit)
    return [DeletedRecordOut.model_validate(e) for e in entries]


# ── Records ──────────────────────────────────────────────────────────


@router.delete("/records/{record_id}", response_model=DeletedRecordOut)
async def delete_record(
    record_id: uuid.UUID,
    admin: str = Depends(verify_manager),
    sweep: RetentionSweep = Depends(get_sweep),
) -> DeletedRecordOut:
    await _emit_access(admin, "delete_record", record_id)
    try:
        entry = await sweep.delete_record(record_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except IdentityResolutionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return DeletedRecordOut.model_validate(entry)


@router.put("/records/{record_id}/employment-end", response_model=RecordSummary)
async def set_employment_end(
    record_id: uuid.UUID,
    body: EmploymentEndIn,
    service: RecordService = Depends(get_record_service),
    principal: PrincipalResolver = Depends(get_principal),
) -> RecordSummary:
    """Set or clear the employment end date (and with it the deletion due date)."""
    try:
        actor = await principal.current_actor()
        record = await service.set_employment_end(record_id, body.employment_end_date, actor)
    except IdentityResolutionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return RecordSummary.model_validate(record)


@router.get("/records/{record_id}/status", response_model=RecordStatusOut)
async def get_record_status(
    record_id: uuid.UUID,
    records: RecordStore = Depends(get_record_store),
) -> RecordStatusOut:
    try:
        record = await records.get(record_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    current = classify(record, _today())
    return RecordStatusOut(record_id=record.id, status=current.value, label=STATUS_LABELS[current])


# ── Notifications ────────────────────────────────────────────────────


@router.post("/notifications/generate", response_model=GenerationSummaryOut)
async def generate_notifications(
    generator: NotificationGenerator = Depends(get_generator),
) -> GenerationSummaryOut:
    summary = await generator.generate_notifications()
    return GenerationSummaryOut.model_validate(summary)


@router.get("/notifications", response_model=list[NotificationOut])
async def list_notifications(records: RecordStore = Depends(get_record_store)) -> list[NotificationOut]:
    active = await NotificationService(records).list_active()
    return [NotificationOut.model_validate(n) for n in active]


@router.post("/notifications/{notification_id}/dismiss")
async def dismiss_notification(
    notification_id: uuid.UUID,
    admin: str = Depends(verify_manager),
    records: RecordStore = Depends(get_record_store),
) -> dict[str, bool]:
    dismissed = await NotificationService(records).dismiss(notification_id, admin)
    if not dismissed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found or already dismissed")
    return {"dismissed": True}
