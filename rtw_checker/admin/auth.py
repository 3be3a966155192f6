"""HTTP Basic Auth for the manager API.

Single shared password from ADMIN_WEB_PASSWORD. The username must be the
manager's email; it is resolved to a profile when an operation needs an
attributable actor (see ``security.principal.ManagerPrincipal``).
"""

from __future__ import annotations

import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from rtw_checker.config import settings

security = HTTPBasic()


async def verify_manager(
    credentials: HTTPBasicCredentials = Depends(security),  # noqa: B008
) -> str:
    """FastAPI dependency: verify HTTP Basic credentials.

    Only the shared password is checked here. The username is returned
    untouched as the manager's email; ``admin.web.get_principal`` wraps it
    in a ManagerPrincipal, which looks it up in ``profiles`` (trimmed,
    lower-cased) the first time an operation needs an actor. An unknown or
    non-manager email therefore passes this check and fails later with
    IdentityResolutionError (403, or an aborted sweep report).
    """
    expected = settings.security.admin_web_password
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="ADMIN_WEB_PASSWORD not configured",
        )

    password_ok = secrets.compare_digest(
        credentials.password.encode("utf-8"),
        expected.encode("utf-8"),
    )
    if not password_ok:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username
