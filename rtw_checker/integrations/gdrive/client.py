"""Async httpx client for the gdrive-upload function.

Endpoint: POST {gdrive_function_url} with a JSON body
``{"action": "upload" | "replace", "employee_name", "file_name", "file_base64", ...}``.
Auth: ``Authorization: Bearer <token>``.

Timeouts, transport errors and 5xx responses are retried with exponential
backoff; 4xx responses fail immediately.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from typing import Any

import httpx

from rtw_checker.config import settings
from rtw_checker.integrations.gdrive.schemas import DriveUploadResult, RenderedDocument

logger = logging.getLogger(__name__)


class DriveUploadError(Exception):
    """Upload failed permanently (4xx, bad payload, or retries exhausted)."""


class _Retryable(Exception):
    pass


class DriveClient:
    """Thin async wrapper around the gdrive-upload function."""

    def __init__(
        self,
        url: str | None = None,
        token: str | None = None,
        *,
        max_attempts: int | None = None,
        backoff_seconds: float | None = None,
        timeout: float | None = None,
    ) -> None:
        cfg = settings.drive
        self._url = url if url is not None else cfg.gdrive_function_url
        self._token = token if token is not None else cfg.gdrive_function_token
        self._max_attempts = max_attempts or cfg.gdrive_max_attempts
        self._backoff = cfg.gdrive_backoff_seconds if backoff_seconds is None else backoff_seconds
        self._timeout = httpx.Timeout(timeout or cfg.gdrive_timeout, connect=5.0)

    @property
    def configured(self) -> bool:
        return bool(self._url)

    async def upload(
        self,
        employee_name: str,
        document: RenderedDocument,
        *,
        old_file_id: str | None = None,
        subfolder: str | None = None,
    ) -> DriveUploadResult:
        """Upload a document, replacing ``old_file_id`` when given."""
        payload: dict[str, Any] = {
            "action": "replace" if old_file_id else "upload",
            "employee_name": employee_name,
            "file_name": document.file_name,
            "file_base64": base64.b64encode(document.content).decode("ascii"),
            "mime_type": document.mime_type,
            "subfolder": subfolder or settings.drive.gdrive_subfolder,
            "source_app": settings.retention.notification_source_app,
        }
        if old_file_id:
            payload["old_file_id"] = old_file_id

        body = await self._post(payload)
        try:
            return DriveUploadResult.model_validate(body)
        except ValueError as exc:
            raise DriveUploadError(f"Unexpected upload response: {exc}") from exc

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        if not self.configured:
            raise DriveUploadError("gdrive function URL not configured")

        headers = {"Authorization": f"Bearer {self._token}"} if self._token else {}
        last_error = "no attempts made"

        for attempt in range(1, self._max_attempts + 1):
            try:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._url, json=payload, headers=headers)
                if response.status_code >= 500:
                    raise _Retryable(f"HTTP {response.status_code}")
                if response.status_code >= 400:
                    detail = _error_detail(response)
                    raise DriveUploadError(f"HTTP {response.status_code}: {detail}")
                return response.json()
            except httpx.TimeoutException:
                last_error = "timeout"
            except httpx.TransportError as exc:
                last_error = f"transport error: {exc}"
            except _Retryable as exc:
                last_error = str(exc)

            if attempt < self._max_attempts:
                delay = self._backoff * (2 ** (attempt - 1))
                logger.warning(
                    "Drive upload attempt %d/%d failed (%s); retrying in %.1fs",
                    attempt,
                    self._max_attempts,
                    last_error,
                    delay,
                )
                await asyncio.sleep(delay)

        raise DriveUploadError(f"Drive upload failed after {self._max_attempts} attempts: {last_error}")


def _error_detail(response: httpx.Response) -> str:
    try:
        return str(response.json().get("error", "Google Drive operation failed"))
    except (ValueError, AttributeError):
        return "Google Drive operation failed"
