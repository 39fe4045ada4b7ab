"""Auth cookie management.

Access and refresh tokens travel as httpOnly cookies whose lifetimes mirror
the token validity. Security: httpOnly prevents XSS cookie theft, SameSite
strict blocks cross-site sends, Secure is on in production.
"""

from fastapi import Response

from timereport.core.config import settings
from timereport.core.tokens import ACCESS_TOKEN_TTL, REFRESH_TOKEN_TTL


def _set_cookie(response: Response, key: str, value: str, max_age: int) -> None:
    response.set_cookie(
        key=key,
        value=value,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.auth_cookie_samesite,
        path="/",
        max_age=max_age,
    )


def set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    """Set both auth cookies on a response.

    Args:
        response: FastAPI response object.
        access_token: Signed access token (15 minutes).
        refresh_token: Signed refresh token (7 days).
    """
    _set_cookie(
        response,
        settings.access_cookie_name,
        access_token,
        int(ACCESS_TOKEN_TTL.total_seconds()),
    )
    _set_cookie(
        response,
        settings.refresh_cookie_name,
        refresh_token,
        int(REFRESH_TOKEN_TTL.total_seconds()),
    )


def clear_auth_cookies(response: Response) -> None:
    """Delete both auth cookies.

    Cookie attributes must match ``set_auth_cookies`` for the browser to
    delete them.
    """
    for key in (settings.access_cookie_name, settings.refresh_cookie_name):
        response.delete_cookie(
            key=key,
            path="/",
            httponly=True,
            secure=settings.cookie_secure,
            samesite=settings.auth_cookie_samesite,
        )
