"""Security & GDPR module: principals, retention sweep, audit scrubbing."""

from rtw_checker.security.principal import ManagerPrincipal, SystemPrincipal
from rtw_checker.security.retention import RetentionSweep, SweepReport
from rtw_checker.security.scrubber import SENSITIVE_AUDIT_KEYS, AuditScrubber

__all__ = [
    "ManagerPrincipal",
    "SystemPrincipal",
    "RetentionSweep",
    "SweepReport",
    "SENSITIVE_AUDIT_KEYS",
    "AuditScrubber",
]
