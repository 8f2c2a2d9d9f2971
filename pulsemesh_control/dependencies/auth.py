"""
Authentication Dependencies

Optional shared-token protection for privileged endpoints.

When PULSEMESH_API_TOKEN is set, callers must send
"Authorization: Bearer <token>". When it is unset the endpoint is open,
the same as the plugin's settings page.

Usage:
    @router.post("/restart")
    async def restart(_: None = Depends(require_api_token)):
        ...
"""

import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..config import Settings, get_settings

# Look for "Authorization: Bearer <token>" without failing on absence
security = HTTPBearer(auto_error=False)


async def require_api_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Enforce the configured API token, if any.

    Raises:
        HTTPException 401: Token configured but missing or wrong
    """
    expected = settings.api_token
    if not expected:
        return

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated. Please provide a valid access token.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not secrets.compare_digest(credentials.credentials.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid access token",
            headers={"WWW-Authenticate": "Bearer"},
        )
