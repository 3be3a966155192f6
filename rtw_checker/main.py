"""FastAPI application entry point.

Usage:
    python -m rtw_checker.main

Serves the manager API, runs the event bus and, when enabled, the
scheduled retention sweep and Drive sync subscriber.
"""

from __future__ import annotations

import importlib
import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI

from rtw_checker.admin.events import event_bus
from rtw_checker.admin.web import router as manager_router
from rtw_checker.config import settings
from rtw_checker.db.engine import async_session_factory, db_lifespan
from rtw_checker.integrations.gdrive.client import DriveClient
from rtw_checker.integrations.gdrive.sync import WATCHED_EVENTS, DocumentRenderer, DriveSyncSubscriber
from rtw_checker.notifications.generator import NotificationGenerator
from rtw_checker.records.service import RecordService
from rtw_checker.scheduling.runner import RetentionScheduler
from rtw_checker.schemas.events import EventType, SystemEvent
from rtw_checker.security.audit import audit_on_event
from rtw_checker.security.principal import SystemPrincipal
from rtw_checker.security.retention import RetentionSweep
from rtw_checker.security.scrubber import AuditScrubber
from rtw_checker.stores.audit import SqlAuditLogStore
from rtw_checker.stores.records import SqlRecordStore
from rtw_checker.stores.scans import LocalScanStore

# ── Logging setup ────────────────────────────────────────────────────

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    stream=sys.stdout,
)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = logging.getLogger(__name__)


def load_renderer(path: str) -> DocumentRenderer:
    """Build the renderer named by ``package.module:factory``."""
    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        msg = f"GDRIVE_RENDERER must look like 'package.module:factory', got {path!r}"
        raise ValueError(msg)
    factory = getattr(importlib.import_module(module_name), attr)
    return factory()


def build_scheduler() -> RetentionScheduler:
    records = SqlRecordStore(async_session_factory)
    sweep = RetentionSweep(
        records=records,
        scans=LocalScanStore(settings.storage.scan_storage_root),
        scrubber=AuditScrubber(SqlAuditLogStore(async_session_factory)),
        principal=SystemPrincipal(),
    )
    return RetentionScheduler(
        sweep=sweep,
        records=RecordService(records),
        generator=NotificationGenerator(records),
        interval_minutes=settings.retention.sweep_interval_minutes,
    )


# ── FastAPI lifespan ─────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application startup and shutdown lifecycle."""
    logger.info("Starting RTW checker (env=%s)", settings.environment)

    # 1. Database
    async with db_lifespan():
        logger.info("Database initialized")

        # 2. Audit logging, always active
        event_bus.subscribe(audit_on_event)

        # 3. Drive sync (only if the upload function and a renderer are configured)
        if settings.drive.gdrive_function_url and settings.drive.gdrive_renderer:
            drive_sync = DriveSyncSubscriber(
                records=SqlRecordStore(async_session_factory),
                renderer=load_renderer(settings.drive.gdrive_renderer),
                client=DriveClient(),
            )
            event_bus.subscribe(drive_sync.on_event, event_types=WATCHED_EVENTS)
            logger.info("Drive sync subscriber registered")
        else:
            logger.warning("GDRIVE_FUNCTION_URL or GDRIVE_RENDERER not set, Drive sync disabled")

        await event_bus.start()
        await event_bus.emit(SystemEvent(
            event_type=EventType.SYSTEM_STARTUP,
            data={"environment": settings.environment, "auto_sweep": settings.retention.auto_sweep_enabled},
            source_module="main",
        ))

        # 4. Scheduled sweep + notifications
        scheduler: RetentionScheduler | None = None
        if settings.retention.auto_sweep_enabled:
            scheduler = build_scheduler()
            scheduler.start()

        try:
            yield
        finally:
            logger.info("Shutting down RTW checker...")
            if scheduler is not None:
                await scheduler.stop()
            await event_bus.emit(SystemEvent(event_type=EventType.SYSTEM_SHUTDOWN, source_module="main"))
            await event_bus.stop()
            event_bus.unsubscribe(audit_on_event)

    logger.info("RTW checker shutdown complete")


# ── FastAPI app ──────────────────────────────────────────────────────

app = FastAPI(
    title="RTW Checker API",
    description="Right-to-work record lifecycle: retention, deletion ledger and notifications",
    version="0.1.0",
    lifespan=lifespan,
)
app.include_router(manager_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "status": "ok",
        "environment": settings.environment,
        "auto_sweep": "on" if settings.retention.auto_sweep_enabled else "off",
    }


# ── Entry point ──────────────────────────────────────────────────────

if __name__ == "__main__":
    uvicorn.run(
        "rtw_checker.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )
