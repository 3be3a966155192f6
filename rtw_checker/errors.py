"""Exception types shared by the store adapters and the lifecycle engine.

Partial sweep failures are not exceptions: they are reported through
``SweepReport.errors`` so one bad record never stops the others.
"""

from __future__ import annotations


class RTWError(Exception):
    """Base class for application errors."""


class ValidationError(RTWError):
    """A record carries malformed or missing required date fields."""


class StoreError(RTWError):
    """A backing store (database, scan storage) failed a read or write."""


class RecordNotFoundError(StoreError):
    """The record does not exist, or was deleted by a concurrent caller."""

    def __init__(self, record_id: object) -> None:
        super().__init__(f"Record not found: {record_id}")
        self.record_id = record_id


class IdentityResolutionError(RTWError):
    """The acting principal could not be determined."""


def db_error_summary(exc: Exception) -> str:
    """Class names of a database error and its driver cause.

    SQLAlchemy error text embeds the statement's bound values, which hold
    subject names, so only the class names go into messages and logs.
    """
    orig = getattr(exc, "orig", None)
    if orig is None:
        return type(exc).__name__
    return f"{type(exc).__name__} ({type(orig).__name__})"
