"""
Authentication Dependencies

FastAPI dependencies for bearer-token authentication. Tokens are issued
elsewhere; this service only validates them.

Dependency Hierarchy:
=====================
    get_token_payload()        ← Decode JWT from header (None if absent)
           │
           ├──► get_current_user_id()    ← 401 when missing or invalid
           │
           └──► get_optional_user_id()   ← None when absent, 401 when invalid

A token that is present but invalid is rejected on every route, including
the ones that allow anonymous access.

Type Aliases:
=============
    CurrentUser   - Authenticated user id (UUID)
    OptionalUser  - User id, or None for anonymous requests

Usage:
======
    from src.api.dependencies.auth import CurrentUser, OptionalUser

    @router.get("/following")
    async def following(user_id: CurrentUser):
        ...

    @router.get("/discover")
    async def discover(user_id: OptionalUser):
        ...
"""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.config.settings import settings
from src.shared.core.exceptions import AuthenticationError
from src.shared.utils.security import SecurityUtils


# Security scheme for Bearer tokens; missing headers are handled below
security = HTTPBearer(auto_error=False)


async def get_token_payload(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)] = None,
) -> Optional[dict]:
    """
    Extract and validate the JWT from the Authorization header.

    Returns:
        Decoded token payload, or None when no token was sent

    Raises:
        AuthenticationError: If a token was sent but is invalid or expired
    """
    if not credentials:
        return None

    try:
        return SecurityUtils.decode_access_token(
            credentials.credentials, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM
        )
    except ValueError as e:
        raise AuthenticationError(str(e)) from e


def _user_id_from_payload(payload: dict) -> UUID:
    user_id = payload.get("user_id")
    if not user_id:
        raise AuthenticationError("Invalid token payload")
    try:
        return UUID(str(user_id))
    except ValueError as e:
        raise AuthenticationError("Invalid token payload") from e


async def get_current_user_id(
    payload: Annotated[Optional[dict], Depends(get_token_payload)],
) -> UUID:
    """
    Require an authenticated user.

    Raises:
        AuthenticationError: Missing or invalid token
    """
    if payload is None:
        raise AuthenticationError("Authorization header required")
    return _user_id_from_payload(payload)


async def get_optional_user_id(
    payload: Annotated[Optional[dict], Depends(get_token_payload)],
) -> Optional[UUID]:
    """Authenticated user id, or None for anonymous requests."""
    if payload is None:
        return None
    return _user_id_from_payload(payload)


# ═══════════════════════════════════════════════════════════════════════════════
# TYPE ALIASES
# ═══════════════════════════════════════════════════════════════════════════════

CurrentUser = Annotated[UUID, Depends(get_current_user_id)]
OptionalUser = Annotated[Optional[UUID], Depends(get_optional_user_id)]
