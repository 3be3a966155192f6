"""Local filesystem implementation of the ScanStore port.

Scans live at ``{root}/{record_id}/{filename}``, the same key layout the
storage bucket uses (``scan_path`` on the record is the relative key).
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import uuid
from pathlib import Path

from rtw_checker.errors import StoreError

logger = logging.getLogger(__name__)


class LocalScanStore:
    """Document scans on local disk."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    def _record_dir(self, record_id: uuid.UUID) -> Path:
        return self._root / str(record_id)

    async def save(self, record_id: uuid.UUID, filename: str, content: bytes) -> str:
        """Store a scan and return its relative key (``record_id/filename``)."""
        name = Path(filename).name
        target = self._record_dir(record_id) / name
        await asyncio.to_thread(target.parent.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(target.write_bytes, content)
        return f"{record_id}/{name}"

    async def delete_all_for_record(self, record_id: uuid.UUID) -> int:
        """Remove the record's scan folder. Returns the number of files removed."""
        folder = self._record_dir(record_id)
        if not folder.exists():
            return 0
        count = sum(1 for p in folder.iterdir() if p.is_file())
        try:
            await asyncio.to_thread(shutil.rmtree, folder)
        except OSError as exc:
            raise StoreError(f"Failed to delete document scans: {exc}") from exc
        logger.debug("Deleted %d scan(s) for record %s", count, record_id)
        return count
