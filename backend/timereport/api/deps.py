"""Shared dependencies for API endpoints.

Authentication reads the access token from its httpOnly cookie, falling
back to an ``Authorization: Bearer`` header for non-browser clients. Data
endpoints get a session on the caller's own per-user store.
"""

import uuid
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from timereport.core.config import settings
from timereport.core.database import get_db
from timereport.core.errors import UnauthorizedError
from timereport.core.tokens import TokenClaims, verify_access_token
from timereport.core.user_store import UserStoreRegistry
from timereport.services.auth_service import AuthService

_BEARER_PREFIX = "bearer "


def _extract_access_token(request: Request) -> str | None:
    token = request.cookies.get(settings.access_cookie_name)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    if header.lower().startswith(_BEARER_PREFIX):
        return header[len(_BEARER_PREFIX) :].strip() or None
    return None


async def get_current_claims(request: Request) -> TokenClaims:
    """Verify the caller's access token.

    Security: every failure is the same generic 401. The response never
    says whether the token was missing, expired or forged.

    Args:
        request: HTTP request (injected by FastAPI).

    Returns:
        Claims of the verified access token.

    Raises:
        UnauthorizedError: No token, or token rejected.
    """
    token = _extract_access_token(request)
    if token is None:
        raise UnauthorizedError()

    claims = verify_access_token(token)
    if claims is None:
        raise UnauthorizedError()
    return claims


async def get_current_user_id(
    claims: Annotated[TokenClaims, Depends(get_current_claims)],
) -> uuid.UUID:
    """Get the authenticated user's id."""
    return claims.user_id


def get_user_stores(request: Request) -> UserStoreRegistry:
    """Per-user store registry created at application startup."""
    return request.app.state.user_stores


async def get_auth_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    stores: Annotated[UserStoreRegistry, Depends(get_user_stores)],
) -> AuthService:
    return AuthService(db, stores)


async def get_user_store_session(
    user_id: Annotated[uuid.UUID, Depends(get_current_user_id)],
    stores: Annotated[UserStoreRegistry, Depends(get_user_stores)],
) -> AsyncGenerator[AsyncSession, None]:
    """Session on the authenticated user's store.

    Commits when the endpoint returns normally, rolls back on error.

    Raises:
        UnauthorizedError: The token is valid but its user has no store,
            i.e. the identity was removed out of band.
    """
    if not stores.store_exists(user_id):
        raise UnauthorizedError()

    factory = await stores.get_store(user_id)
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


CurrentUserId = Annotated[uuid.UUID, Depends(get_current_user_id)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
UserStoreSession = Annotated[AsyncSession, Depends(get_user_store_session)]
