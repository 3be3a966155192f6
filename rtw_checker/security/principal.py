"""Principal resolvers: who is acting, for deletion-ledger attribution.

Resolution happens per request or per scheduled run; nothing about the
current user is cached at module level.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rtw_checker.errors import IdentityResolutionError
from rtw_checker.models.profile import Profile
from rtw_checker.stores.ports import SYSTEM_ACTOR, Actor

logger = logging.getLogger(__name__)


class SystemPrincipal:
    """The autonomous actor used by scheduled sweeps."""

    async def current_actor(self) -> Actor:
        return SYSTEM_ACTOR


class ManagerPrincipal:
    """Resolves an authenticated email to a manager profile.

    The lookup runs on the first call and the result is kept for the
    lifetime of this object only (one request).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], email: str) -> None:
        self._session_factory = session_factory
        self._email = email.strip().lower()
        self._actor: Actor | None = None

    async def current_actor(self) -> Actor:
        if self._actor is not None:
            return self._actor
        if not self._email:
            raise IdentityResolutionError("No authenticated user")

        try:
            async with self._session_factory() as db:
                result = await db.execute(select(Profile).where(Profile.email == self._email))
                profile = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise IdentityResolutionError(f"Profile lookup failed: {exc}") from exc

        if profile is None:
            raise IdentityResolutionError(f"No profile for {self._email}")
        if not profile.is_manager:
            raise IdentityResolutionError(f"{self._email} is not a manager")

        self._actor = Actor(id=profile.id, email=profile.email, role=profile.role)
        logger.debug("Resolved principal %s", self._actor.email)
        return self._actor
