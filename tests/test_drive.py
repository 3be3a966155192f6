"""Tests for the Google Drive upload client and the record sync subscriber.

Covers:
- Upload payload: action upload vs replace, base64 content, bearer token
- Retry with exponential backoff on 5xx / timeouts; no retry on 4xx
- Sync subscriber: renders, uploads, stores the file id, emits result events
"""

from __future__ import annotations

import base64
from datetime import date
from unittest.mock import AsyncMock, MagicMock, call, patch

import httpx
import pytest

from rtw_checker.integrations.gdrive.client import DriveClient, DriveUploadError
from rtw_checker.integrations.gdrive.schemas import RenderedDocument
from rtw_checker.integrations.gdrive.sync import DriveSyncSubscriber, document_file_name
from rtw_checker.schemas.events import EventType, SystemEvent
from tests.conftest import FakeRecordStore, emitted_types, make_record

URL = "https://functions.example.com/gdrive-upload"

# ── Helpers ──────────────────────────────────────────────────────────


def _make_response(payload: dict, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


def _patched_http(*responses):
    """Patch httpx.AsyncClient so successive posts return/raise ``responses``."""
    mock_http = AsyncMock()
    mock_http.post = AsyncMock(side_effect=list(responses))
    patcher = patch("httpx.AsyncClient")
    mock_client_cls = patcher.start()
    mock_client_cls.return_value.__aenter__ = AsyncMock(return_value=mock_http)
    mock_client_cls.return_value.__aexit__ = AsyncMock(return_value=False)
    return patcher, mock_http


def _client(**kwargs) -> DriveClient:
    return DriveClient(URL, "secret-token", max_attempts=3, backoff_seconds=2.0, timeout=10, **kwargs)


DOC = RenderedDocument(file_name="RTW_Record_Jane_Smith_20250107.pdf", content=b"%PDF-1.4 test")


# ── Client tests ─────────────────────────────────────────────────────


class TestDriveClientUpload:
    @pytest.mark.asyncio()
    async def test_first_upload(self):
        patcher, mock_http = _patched_http(_make_response({"success": True, "file_id": "f-1"}))
        try:
            result = await _client().upload("Jane Smith", DOC)
        finally:
            patcher.stop()

        assert result.file_id == "f-1"
        kwargs = mock_http.post.call_args.kwargs
        assert mock_http.post.call_args.args[0] == URL
        assert kwargs["headers"] == {"Authorization": "Bearer secret-token"}
        payload = kwargs["json"]
        assert payload["action"] == "upload"
        assert payload["employee_name"] == "Jane Smith"
        assert base64.b64decode(payload["file_base64"]) == b"%PDF-1.4 test"
        assert "old_file_id" not in payload

    @pytest.mark.asyncio()
    async def test_replace_existing(self):
        patcher, mock_http = _patched_http(_make_response({"success": True, "file_id": "f-2"}))
        try:
            await _client().upload("Jane Smith", DOC, old_file_id="f-1", subfolder="Archive")
        finally:
            patcher.stop()

        payload = mock_http.post.call_args.kwargs["json"]
        assert payload["action"] == "replace"
        assert payload["old_file_id"] == "f-1"
        assert payload["subfolder"] == "Archive"

    @pytest.mark.asyncio()
    async def test_not_configured(self):
        client = DriveClient("", "")
        assert client.configured is False
        with pytest.raises(DriveUploadError, match="not configured"):
            await client.upload("Jane Smith", DOC)


class TestDriveClientRetry:
    @pytest.mark.asyncio()
    async def test_retries_5xx_then_succeeds(self):
        patcher, mock_http = _patched_http(
            _make_response({}, 503),
            httpx.ConnectTimeout("slow"),
            _make_response({"success": True, "file_id": "f-9"}),
        )
        try:
            with patch("rtw_checker.integrations.gdrive.client.asyncio.sleep", new_callable=AsyncMock) as sleep:
                result = await _client().upload("Jane Smith", DOC)
        finally:
            patcher.stop()

        assert result.file_id == "f-9"
        assert mock_http.post.await_count == 3
        assert sleep.await_args_list == [call(2.0), call(4.0)]

    @pytest.mark.asyncio()
    async def test_gives_up_after_max_attempts(self):
        patcher, mock_http = _patched_http(*[_make_response({}, 502)] * 3)
        try:
            with patch("rtw_checker.integrations.gdrive.client.asyncio.sleep", new_callable=AsyncMock) as sleep:
                with pytest.raises(DriveUploadError, match="after 3 attempts: HTTP 502"):
                    await _client().upload("Jane Smith", DOC)
        finally:
            patcher.stop()

        assert mock_http.post.await_count == 3
        assert sleep.await_count == 2

    @pytest.mark.asyncio()
    async def test_client_error_not_retried(self):
        patcher, mock_http = _patched_http(_make_response({"error": "Folder not shared"}, 403))
        try:
            with patch("rtw_checker.integrations.gdrive.client.asyncio.sleep", new_callable=AsyncMock) as sleep:
                with pytest.raises(DriveUploadError, match="HTTP 403: Folder not shared"):
                    await _client().upload("Jane Smith", DOC)
        finally:
            patcher.stop()

        assert mock_http.post.await_count == 1
        sleep.assert_not_awaited()


# ── Sync subscriber tests ────────────────────────────────────────────


def _event(event_type: EventType, record_id) -> SystemEvent:
    return SystemEvent(event_type=event_type, record_id=record_id, actor_id="manager@example.com")


class TestDocumentFileName:
    def test_name_and_check_date(self):
        record = make_record("Jane O'Neil-Smith", check_date=date(2025, 1, 7))
        assert document_file_name(record) == "RTW_Record_Jane_O_Neil_Smith_20250107.pdf"

    def test_pending_check(self):
        assert document_file_name(make_record("Sam", check_date=None)) == "RTW_Record_Sam_pending.pdf"


class TestDriveSyncSubscriber:
    @pytest.mark.asyncio()
    async def test_upload_stores_file_id(self, emitted):
        record = make_record("Jane Smith")
        store = FakeRecordStore([record])
        renderer = MagicMock()
        renderer.render = AsyncMock(return_value=b"%PDF")
        client = MagicMock()
        client.upload = AsyncMock(return_value=MagicMock(file_id="f-1"))

        await DriveSyncSubscriber(store, renderer, client).on_event(_event(EventType.RECORD_CREATED, record.id))

        renderer.render.assert_awaited_once_with(record)
        assert client.upload.await_args.kwargs["old_file_id"] is None
        assert record.gdrive_file_id == "f-1"
        assert emitted_types(emitted) == ["drive.upload_succeeded"]

    @pytest.mark.asyncio()
    async def test_update_replaces_previous_file(self):
        record = make_record("Jane Smith", gdrive_file_id="f-1")
        renderer = MagicMock(render=AsyncMock(return_value=b"%PDF"))
        client = MagicMock(upload=AsyncMock(return_value=MagicMock(file_id="f-1")))

        await DriveSyncSubscriber(FakeRecordStore([record]), renderer, client).on_event(
            _event(EventType.RECORD_UPDATED, record.id)
        )

        assert client.upload.await_args.kwargs["old_file_id"] == "f-1"

    @pytest.mark.asyncio()
    async def test_upload_failure_emits_event(self, emitted):
        record = make_record("Jane Smith")
        renderer = MagicMock(render=AsyncMock(return_value=b"%PDF"))
        client = MagicMock(upload=AsyncMock(side_effect=DriveUploadError("HTTP 403: Folder not shared")))

        await DriveSyncSubscriber(FakeRecordStore([record]), renderer, client).on_event(
            _event(EventType.RECORD_CREATED, record.id)
        )

        assert record.gdrive_file_id is None
        event = emitted.call_args.args[0]
        assert event.event_type is EventType.DRIVE_UPLOAD_FAILED
        assert event.data == {"error": "HTTP 403: Folder not shared"}

    @pytest.mark.asyncio()
    async def test_record_deleted_before_sync(self, emitted):
        renderer = MagicMock(render=AsyncMock())
        client = MagicMock(upload=AsyncMock())
        record = make_record()

        await DriveSyncSubscriber(FakeRecordStore(), renderer, client).on_event(
            _event(EventType.RECORD_UPDATED, record.id)
        )

        client.upload.assert_not_awaited()
        emitted.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_ignores_other_events(self):
        client = MagicMock(upload=AsyncMock())
        record = make_record()

        await DriveSyncSubscriber(FakeRecordStore([record]), MagicMock(), client).on_event(
            _event(EventType.RECORD_DELETED, record.id)
        )

        client.upload.assert_not_awaited()
