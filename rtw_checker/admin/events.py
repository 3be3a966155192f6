"""In-process event bus: the post-commit outbox for SystemEvents.

Writers call ``emit()`` only after their transaction has committed. Events
are queued and delivered by a background worker, so a slow consumer (the
Drive upload, for instance) never holds up the request that caused it.

Usage:
    from rtw_checker.admin.events import emit

    await emit(SystemEvent(
        event_type=EventType.RECORD_UPDATED,
        record_id=record.id,
        data={"fields": ["expiry_date"]},
    ))

    # At startup:
    from rtw_checker.admin.events import event_bus

    event_bus.subscribe(drive_sync.on_event, [EventType.RECORD_CREATED])
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from rtw_checker.schemas.events import EventType, SystemEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[SystemEvent], Coroutine[Any, Any, None]]


class EventBus:
    """Queue-backed pub/sub with per-handler failure isolation."""

    def __init__(self) -> None:
        self._global: list[EventHandler] = []
        self._typed: dict[EventType, list[EventHandler]] = {}
        self._queue: asyncio.Queue[SystemEvent] | None = None
        self._worker: asyncio.Task[None] | None = None

    # ── Subscriptions ───────────────────────────────────────────────

    def subscribe(self, handler: EventHandler, event_types: list[EventType] | None = None) -> None:
        """Register ``handler`` for ``event_types``, or for every event if None."""
        if event_types is None:
            self._global.append(handler)
            logger.info("Registered global event subscriber: %s", handler.__name__)
            return
        for et in event_types:
            self._typed.setdefault(et, []).append(handler)
        logger.info("Registered %s for %s", handler.__name__, [t.value for t in event_types])

    def unsubscribe(self, handler: EventHandler) -> None:
        if handler in self._global:
            self._global.remove(handler)
        for handlers in self._typed.values():
            if handler in handlers:
                handlers.remove(handler)

    def handlers_for(self, event_type: EventType) -> list[EventHandler]:
        return [*self._global, *self._typed.get(event_type, [])]

    # ── Publishing ──────────────────────────────────────────────────

    async def emit(self, event: SystemEvent) -> None:
        """Queue an event for delivery. Starts the worker lazily."""
        if self._queue is None:
            self._queue = asyncio.Queue()
        self._ensure_worker()
        await self._queue.put(event)
        logger.debug("Event emitted: %s (record=%s)", event.event_type.value, event.record_id)

    async def dispatch(self, event: SystemEvent) -> None:
        """Deliver one event to its handlers now, bypassing the queue."""
        handlers = self.handlers_for(event.event_type)
        if not handlers:
            return
        await asyncio.gather(*(self._safe_call(h, event) for h in handlers))

    @staticmethod
    async def _safe_call(handler: EventHandler, event: SystemEvent) -> None:
        try:
            await handler(event)
        except Exception:
            logger.exception("Handler %s failed for event %s", handler.__name__, event.event_type.value)

    # ── Worker lifecycle ────────────────────────────────────────────

    def _ensure_worker(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run())
            logger.info("Event worker started")

    async def _run(self) -> None:
        assert self._queue is not None
        while True:
            event = await self._queue.get()
            try:
                await self.dispatch(event)
            finally:
                self._queue.task_done()

    async def start(self) -> None:
        self._queue = asyncio.Queue()
        self._ensure_worker()
        logger.info(
            "Event bus started with %d global + %d typed subscribers",
            len(self._global),
            sum(len(v) for v in self._typed.values()),
        )

    async def stop(self) -> None:
        """Deliver whatever is queued, then stop the worker."""
        if self._queue is not None and self._worker is not None and not self._worker.done():
            await self._queue.join()
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._worker = None
        self._queue = None
        logger.info("Event bus stopped")


# Module-level singleton
event_bus = EventBus()


async def emit(event: SystemEvent) -> None:
    """Shortcut for ``event_bus.emit``."""
    await event_bus.emit(event)
