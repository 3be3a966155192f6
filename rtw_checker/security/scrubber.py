"""Audit scrubber: strips personal data from a deleted record's history.

Audit rows themselves are kept (they prove what changed and when); only the
personal-data keys inside their before/after snapshots are removed.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from rtw_checker.stores.ports import AuditLogStore

logger = logging.getLogger(__name__)

# Keys removed from audit snapshots once a record is erased.
SENSITIVE_AUDIT_KEYS: frozenset[str] = frozenset({
    "person_name",
    "date_of_birth",
    "share_code",
    "step2_answers",
    "notes",
    "scan_path",
    "scan_filename",
})


def redact_snapshot(snapshot: dict[str, Any] | None) -> dict[str, Any] | None:
    """Copy of ``snapshot`` without the sensitive keys. None stays None."""
    if snapshot is None:
        return None
    return {k: v for k, v in snapshot.items() if k not in SENSITIVE_AUDIT_KEYS}


def _needs_scrub(snapshot: dict[str, Any] | None) -> bool:
    return snapshot is not None and not SENSITIVE_AUDIT_KEYS.isdisjoint(snapshot)


class AuditScrubber:
    """Removes sensitive keys from every audit entry for a record."""

    def __init__(self, audit_store: AuditLogStore) -> None:
        self._audit_store = audit_store

    async def scrub(self, record_id: uuid.UUID) -> int:
        """Scrub all entries for ``record_id``. Returns how many rows changed.

        Idempotent: a second call finds nothing left to remove.
        """
        changed = 0
        for entry in await self._audit_store.list_for_record(record_id):
            if not (_needs_scrub(entry.old_values) or _needs_scrub(entry.new_values)):
                continue
            await self._audit_store.replace_snapshots(
                entry.id,
                redact_snapshot(entry.old_values),
                redact_snapshot(entry.new_values),
            )
            changed += 1

        if changed:
            logger.info("Scrubbed %d audit entries for record %s", changed, record_id)
        return changed
