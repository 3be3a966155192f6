"""Retention scheduler: periodic sweep + status refresh + notifications.

Started from the FastAPI lifespan when ``AUTO_SWEEP_ENABLED`` is set.
Each tick runs, in order:

  1. the retention sweep as the ``system`` actor
  2. a status refresh over the remaining records
  3. the notification generator

so purged records never receive fresh alerts. A failing tick is logged
and the loop carries on at the next interval.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from rtw_checker.notifications.generator import GenerationSummary, NotificationGenerator
from rtw_checker.records.service import RecordService
from rtw_checker.security.retention import RetentionSweep, SweepReport

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    sweep: SweepReport
    statuses_changed: int
    notifications: GenerationSummary


class RetentionScheduler:
    """Runs the lifecycle jobs on a fixed interval in a background task."""

    def __init__(
        self,
        sweep: RetentionSweep,
        records: RecordService,
        generator: NotificationGenerator,
        interval_minutes: int,
    ) -> None:
        self._sweep = sweep
        self._records = records
        self._generator = generator
        self._interval = interval_minutes * 60
        self._task: asyncio.Task[None] | None = None

    async def run_once(self) -> TickResult:
        sweep = await self._sweep.run_sweep()
        changed = await self._records.refresh_statuses()
        notifications = await self._generator.generate_notifications()
        return TickResult(sweep=sweep, statuses_changed=changed, notifications=notifications)

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Scheduled retention run failed")
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._loop())
            logger.info("Retention scheduler started (every %d min)", self._interval // 60)

    async def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("Retention scheduler stopped")
