"""Tests for application wiring: health check and renderer loading."""

from __future__ import annotations

import uuid

import pytest
from fastapi.testclient import TestClient

from rtw_checker.main import app, load_renderer


class StubRenderer:
    async def render(self, record) -> bytes:
        return b"%PDF"


def make_renderer() -> StubRenderer:
    return StubRenderer()


def test_health():
    # No context manager: the lifespan (database, scheduler) is not started.
    resp = TestClient(app).get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_manager_routes_mounted():
    client = TestClient(app)
    # Mounted routes reach the auth check; unknown paths would 404.
    assert client.post("/manager/retention/sweep").status_code == 401
    assert client.post(f"/manager/notifications/{uuid.uuid4()}/dismiss").status_code == 401
    assert client.get("/manager/no-such-page").status_code == 404


def test_load_renderer():
    assert isinstance(load_renderer("tests.test_main:make_renderer"), StubRenderer)


@pytest.mark.parametrize("path", ["tests.test_main", ":make_renderer", ""])
def test_load_renderer_rejects_bad_path(path):
    with pytest.raises(ValueError, match="package.module:factory"):
        load_renderer(path)
