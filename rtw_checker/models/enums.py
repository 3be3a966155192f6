"""Domain enums used across SQLAlchemy models and Pydantic schemas.

All enums use str mixin for JSON serialization; columns store the ``.value``.
"""

from __future__ import annotations

from enum import Enum


class CheckType(str, Enum):
    """Whether this is the first check or a repeat for time-limited permission."""

    INITIAL = "initial"
    FOLLOW_UP = "follow_up"


class CheckMethod(str, Enum):
    """How the right to work was verified."""

    MANUAL = "manual"
    IDSP = "idsp"
    ONLINE = "online"


class Answer(str, Enum):
    """Answer to a verification question."""

    YES = "Yes"
    NO = "No"
    NOT_APPLICABLE = "N/A"


class RecordStatus(str, Enum):
    """Compliance state of a record, computed by ``calculators.status.classify``."""

    PENDING_ONBOARDING = "pending_onboarding"
    PENDING_DELETION = "pending_deletion"
    EXPIRED = "expired"
    FOLLOW_UP_OVERDUE = "follow_up_overdue"
    FOLLOW_UP_DUE = "follow_up_due"
    VALID = "valid"


class Severity(str, Enum):
    """Notification severity."""

    INFO = "info"
    WARNING = "warning"
    URGENT = "urgent"


class ProfileRole(str, Enum):
    """Staff role; only managers may delete records or run the sweep."""

    MANAGER = "manager"
    STAFF = "staff"
