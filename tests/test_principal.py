"""Tests for rtw_checker/security/principal.py: system and manager actors."""

from __future__ import annotations

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from rtw_checker.errors import IdentityResolutionError
from rtw_checker.models.profile import Profile
from rtw_checker.security.principal import ManagerPrincipal, SystemPrincipal
from rtw_checker.stores.ports import SYSTEM_ACTOR
from tests.conftest import mock_session_factory


def _session_with(profile):
    result = MagicMock()
    result.scalar_one_or_none.return_value = profile
    db = MagicMock()
    db.execute = AsyncMock(return_value=result)
    return mock_session_factory(db), db


@pytest.mark.asyncio()
async def test_system_actor():
    actor = await SystemPrincipal().current_actor()
    assert actor is SYSTEM_ACTOR
    assert actor.is_system


@pytest.mark.asyncio()
async def test_manager_resolved_once():
    profile = Profile(id=uuid.uuid4(), email="manager@example.com", full_name="Morgan", role="manager")
    factory, db = _session_with(profile)
    principal = ManagerPrincipal(factory, " Manager@Example.com ")

    first = await principal.current_actor()
    second = await principal.current_actor()

    assert first is second
    assert first.id == profile.id
    assert first.email == "manager@example.com"
    assert db.execute.await_count == 1


@pytest.mark.asyncio()
async def test_staff_rejected():
    profile = Profile(id=uuid.uuid4(), email="staff@example.com", full_name="Sam", role="staff")
    factory, _ = _session_with(profile)
    with pytest.raises(IdentityResolutionError, match="not a manager"):
        await ManagerPrincipal(factory, "staff@example.com").current_actor()


@pytest.mark.asyncio()
async def test_unknown_profile():
    factory, _ = _session_with(None)
    with pytest.raises(IdentityResolutionError, match="No profile"):
        await ManagerPrincipal(factory, "ghost@example.com").current_actor()


@pytest.mark.asyncio()
async def test_blank_email():
    factory, db = _session_with(None)
    with pytest.raises(IdentityResolutionError):
        await ManagerPrincipal(factory, "").current_actor()
    db.execute.assert_not_awaited()
