"""Store ports and their adapters."""

from rtw_checker.stores.audit import SqlAuditLogStore
from rtw_checker.stores.ports import (
    SYSTEM_ACTOR,
    Actor,
    AuditLogStore,
    PrincipalResolver,
    RecordStore,
    ScanStore,
)
from rtw_checker.stores.records import SqlRecordStore, record_snapshot
from rtw_checker.stores.scans import LocalScanStore

__all__ = [
    "SYSTEM_ACTOR",
    "Actor",
    "AuditLogStore",
    "PrincipalResolver",
    "RecordStore",
    "ScanStore",
    "SqlAuditLogStore",
    "SqlRecordStore",
    "record_snapshot",
    "LocalScanStore",
]
