"""Pydantic schemas for the gdrive-upload function."""

from __future__ import annotations

from pydantic import BaseModel, Field


class DriveUploadResult(BaseModel):
    """Response of a successful upload/replace."""

    success: bool = True
    file_id: str
    web_view_link: str | None = None
    employee_folder_id: str | None = None


class RenderedDocument(BaseModel):
    """A rendered record document ready for upload."""

    file_name: str
    content: bytes
    mime_type: str = Field(default="application/pdf")
