"""Tests for the manager API.

Covers:
- HTTP Basic Auth (401 without creds, 401 wrong password, 503 unconfigured)
- Retention sweep, pending and deleted listings
- Single-record deletion (404 missing, 403 unresolved manager)
- Employment end date, record status, notifications
"""

from __future__ import annotations

import base64
import uuid
from datetime import timedelta
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from rtw_checker.admin.web import (
    get_principal,
    get_record_service,
    get_record_store,
    get_sweep,
    router,
)
from rtw_checker.calculators.dates import today as current_day
from rtw_checker.errors import IdentityResolutionError
from rtw_checker.records.service import RecordService
from rtw_checker.security.retention import RetentionSweep
from rtw_checker.security.scrubber import AuditScrubber
from tests.conftest import (
    MANAGER,
    FakeAuditStore,
    FakeRecordStore,
    FakeScanStore,
    StaticPrincipal,
    make_record,
)

# Endpoints compute "today" themselves, so fixtures are relative to the real date.
TODAY = current_day("Europe/London")


def _make_auth_header(username: str = MANAGER.email, password: str = "testpass123") -> dict[str, str]:
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def mock_settings():
    with patch("rtw_checker.admin.auth.settings") as mock:
        mock.security.admin_web_password = "testpass123"
        yield mock


@pytest.fixture
def store():
    return FakeRecordStore()


@pytest.fixture
def principal():
    return StaticPrincipal(MANAGER)


@pytest.fixture
def client(mock_settings, store, principal):
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_record_store] = lambda: store
    app.dependency_overrides[get_principal] = lambda: principal
    app.dependency_overrides[get_sweep] = lambda: RetentionSweep(
        records=store,
        scans=FakeScanStore(),
        scrubber=AuditScrubber(FakeAuditStore()),
        principal=principal,
    )
    app.dependency_overrides[get_record_service] = lambda: RecordService(store)
    return TestClient(app)


class TestAuth:
    def test_no_credentials(self, client):
        assert client.get("/manager/notifications").status_code == 401

    def test_wrong_password(self, client):
        resp = client.get("/manager/notifications", headers=_make_auth_header(password="nope"))
        assert resp.status_code == 401

    def test_password_not_configured(self, client, mock_settings):
        mock_settings.security.admin_web_password = ""
        resp = client.get("/manager/notifications", headers=_make_auth_header())
        assert resp.status_code == 503

    def test_correct_credentials(self, client):
        resp = client.get("/manager/notifications", headers=_make_auth_header())
        assert resp.status_code == 200
        assert resp.json() == []


class TestRetentionEndpoints:
    def test_sweep(self, client, store, emitted):
        due = make_record("Jane Smith", employment_end_date=TODAY, deletion_due_date=TODAY - timedelta(days=1))
        kept = make_record("Alex Doe")
        store.records = {due.id: due, kept.id: kept}

        resp = client.post("/manager/retention/sweep", headers=_make_auth_header())

        assert resp.status_code == 200
        body = resp.json()
        assert body == {
            "deleted_names": ["Jane Smith"],
            "errors": [],
            "already_gone": [],
            "nothing_to_do": False,
        }
        assert list(store.records) == [kept.id]
        assert store.ledger[0].reason == "GDPR retention period expired"
        assert store.ledger[0].deleted_by_email == MANAGER.email
        assert emitted.call_args_list[0].args[0].event_type.value == "admin.access"

    def test_empty_sweep(self, client):
        resp = client.post("/manager/retention/sweep", headers=_make_auth_header())
        assert resp.json()["nothing_to_do"] is True

    def test_pending_and_deleted(self, client, store):
        due = make_record("Jane Smith", employment_end_date=TODAY, deletion_due_date=TODAY)
        store.records = {due.id: due}

        pending = client.get("/manager/retention/pending", headers=_make_auth_header()).json()
        assert [r["person_name"] for r in pending] == ["Jane Smith"]

        client.post("/manager/retention/sweep", headers=_make_auth_header())
        deleted = client.get("/manager/retention/deleted", headers=_make_auth_header()).json()
        assert len(deleted) == 1
        assert deleted[0]["original_record_id"] == str(due.id)
        assert deleted[0]["reason"] == "GDPR retention period expired"


class TestRecordEndpoints:
    def test_delete_record(self, client, store):
        record = make_record("Alex Doe")
        store.records = {record.id: record}

        resp = client.delete(f"/manager/records/{record.id}", headers=_make_auth_header())

        assert resp.status_code == 200
        assert resp.json()["reason"] == "Manual deletion by manager"
        assert store.records == {}

    def test_delete_missing(self, client):
        resp = client.delete(f"/manager/records/{uuid.uuid4()}", headers=_make_auth_header())
        assert resp.status_code == 404

    def test_delete_unresolved_manager(self, client, store, principal):
        record = make_record()
        store.records = {record.id: record}
        principal.error = IdentityResolutionError("staff@example.com is not a manager")

        resp = client.delete(f"/manager/records/{record.id}", headers=_make_auth_header())

        assert resp.status_code == 403
        assert record.id in store.records

    def test_set_employment_end(self, client, store):
        record = make_record()
        store.records = {record.id: record}

        resp = client.put(
            f"/manager/records/{record.id}/employment-end",
            json={"employment_end_date": "2024-02-29"},
            headers=_make_auth_header(),
        )

        assert resp.status_code == 200
        assert resp.json()["deletion_due_date"] == "2026-02-28"

    def test_record_status(self, client, store):
        record = make_record(follow_up_date=TODAY + timedelta(days=10))
        store.records = {record.id: record}

        resp = client.get(f"/manager/records/{record.id}/status", headers=_make_auth_header())

        assert resp.json() == {"record_id": str(record.id), "status": "follow_up_due", "label": "Follow-up due"}

    def test_record_status_missing(self, client):
        resp = client.get(f"/manager/records/{uuid.uuid4()}/status", headers=_make_auth_header())
        assert resp.status_code == 404


class TestNotificationEndpoints:
    def test_generate_list_dismiss(self, client, store):
        record = make_record("Jane Smith", expiry_date=TODAY - timedelta(days=1))
        store.records = {record.id: record}

        summary = client.post("/manager/notifications/generate", headers=_make_auth_header()).json()
        assert summary["created"] == 1

        active = client.get("/manager/notifications", headers=_make_auth_header()).json()
        assert [n["title"] for n in active] == ["Right to work expired: Jane Smith"]
        assert active[0]["severity"] == "urgent"

        dismiss_url = f"/manager/notifications/{active[0]['id']}/dismiss"
        assert client.post(dismiss_url, headers=_make_auth_header()).status_code == 200
        assert client.post(dismiss_url, headers=_make_auth_header()).status_code == 404
        assert store.notifications[0].dismissed_by == MANAGER.email
