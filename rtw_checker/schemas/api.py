"""Response and request bodies for the manager API."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class RecordSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    person_name: str
    status: str
    check_date: date | None = None
    expiry_date: date | None = None
    follow_up_date: date | None = None
    employment_end_date: date | None = None
    deletion_due_date: date | None = None


class RecordStatusOut(BaseModel):
    record_id: uuid.UUID
    status: str
    label: str


class EmploymentEndIn(BaseModel):
    employment_end_date: date | None = Field(default=None, description="None clears the end date")


class DeletedRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    original_record_id: uuid.UUID
    person_name: str
    employment_start_date: date | None = None
    employment_end_date: date | None = None
    deletion_due_date: date | None = None
    deleted_at: datetime | None = None
    deleted_by_email: str | None = None
    reason: str


class SweepReportOut(BaseModel):
    """``nothing_to_do`` lets the UI tell '0 due' apart from 'some errors'."""

    model_config = ConfigDict(from_attributes=True)

    deleted_names: list[str]
    errors: list[str]
    already_gone: list[str]
    nothing_to_do: bool


class GenerationSummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    evaluated: int
    created: int
    already_notified: int
    errors: list[str]


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    source_app: str
    severity: str
    title: str
    message: str
    action_url: str | None = None
    record_id: uuid.UUID | None = None
    created_at: datetime | None = None
