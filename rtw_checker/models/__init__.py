"""SQLAlchemy ORM models for the RTW checker.

Import all models here so Alembic and Base.metadata.create_all() discover them.
"""

from __future__ import annotations

from rtw_checker.models.audit import AuditLog
from rtw_checker.models.base import Base
from rtw_checker.models.deletion import DeletedRecord
from rtw_checker.models.enums import (
    Answer,
    CheckMethod,
    CheckType,
    ProfileRole,
    RecordStatus,
    Severity,
)
from rtw_checker.models.notification import Notification
from rtw_checker.models.profile import Profile
from rtw_checker.models.record import RTWRecord

__all__ = [
    # Base
    "Base",
    # Models
    "RTWRecord",
    "DeletedRecord",
    "Notification",
    "AuditLog",
    "Profile",
    # Enums
    "Answer",
    "CheckMethod",
    "CheckType",
    "ProfileRole",
    "RecordStatus",
    "Severity",
]
