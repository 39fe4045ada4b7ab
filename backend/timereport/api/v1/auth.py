"""One-time code login and session endpoints.

Endpoints:
- POST /auth/request-otp: email a login code
- POST /auth/verify-otp: verify code, set access and refresh cookies
- POST /auth/refresh: rotate the session tokens
- POST /auth/logout: end the current session, clear cookies
- POST /auth/logout-all: end every session of the user
- GET /auth/me: current user info
- PATCH /auth/profile: update display name
"""

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from timereport.api.deps import AuthServiceDep, CurrentUserId
from timereport.core.auth import clear_auth_cookies, set_auth_cookies
from timereport.core.config import settings
from timereport.core.errors import NotFoundError, UnauthorizedError, ValidationError
from timereport.core.rate_limiting import limiter
from timereport.core.responses import DataResponse, ErrorDetail, ErrorResponse
from timereport.models.user import User

router = APIRouter()


# ===================================================================
# Request models
# ===================================================================


class RequestOtpRequest(BaseModel):
    """Request body for POST /auth/request-otp."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr


class VerifyOtpRequest(BaseModel):
    """Request body for POST /auth/verify-otp."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    code: str = Field(pattern=r"^\d{6}$")


class UpdateProfileRequest(BaseModel):
    """Request body for PATCH /auth/profile."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=100)


def _user_to_response(user: User) -> dict:
    """Build standard user response payload for /me and /profile."""
    return {
        "id": str(user.id),
        "email": user.email,
        "name": user.name,
        "created_at": user.created_at.isoformat(),
        "updated_at": user.updated_at.isoformat(),
    }


# ===================================================================
# POST /auth/request-otp
# ===================================================================


@router.post("/request-otp")
@limiter.limit(settings.rate_limit_request_otp)
async def request_otp(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: RequestOtpRequest,
    auth: AuthServiceDep,
) -> DataResponse[dict]:
    """Send a login code to an email address.

    Always returns success, whether or not an account exists for the
    address, so the endpoint cannot be used to probe for accounts.
    """
    await auth.request_otp(body.email)
    return DataResponse(data={"message": "A login code has been sent"})


# ===================================================================
# POST /auth/verify-otp
# ===================================================================


@router.post("/verify-otp")
@limiter.limit(settings.rate_limit_verify_otp)
async def verify_otp(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: VerifyOtpRequest,
    response: Response,
    auth: AuthServiceDep,
) -> DataResponse[dict]:
    """Verify a login code and start a session.

    First login for an address creates the account and its data store.
    Rejected codes return 401 with the specific reason as error code
    (e.g. "CODE_EXPIRED") so the client can tell the user what to do.
    """
    result = await auth.verify_otp(body.email, body.code)
    if not result.success:
        raise UnauthorizedError(message=result.error.value, code=result.error.code)

    set_auth_cookies(response, result.access_token, result.refresh_token)
    user = result.user
    return DataResponse(
        data={"user": {"id": str(user.id), "email": user.email, "name": user.name}}
    )


# ===================================================================
# POST /auth/refresh
# ===================================================================


@router.post("/refresh", response_model=None)
async def refresh(
    request: Request,
    response: Response,
    auth: AuthServiceDep,
) -> DataResponse[dict] | JSONResponse:
    """Exchange the refresh cookie for a new token pair.

    On rejection both cookies are cleared so the client drops the dead
    session.
    """
    token = request.cookies.get(settings.refresh_cookie_name)
    result = await auth.refresh_access_token(token) if token else None

    if result is None or not result.success:
        rejected = JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=ErrorResponse(
                error=ErrorDetail(code="UNAUTHORIZED", message="Session expired")
            ).model_dump(),
        )
        clear_auth_cookies(rejected)
        return rejected

    set_auth_cookies(response, result.access_token, result.refresh_token)
    return DataResponse(data={"message": "Session refreshed"})


# ===================================================================
# POST /auth/logout
# ===================================================================


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    auth: AuthServiceDep,
) -> DataResponse[dict]:
    """End the current session.

    No auth required: cookies are cleared regardless.
    """
    token = request.cookies.get(settings.refresh_cookie_name)
    if token:
        await auth.logout(token)
    clear_auth_cookies(response)
    return DataResponse(data={"message": "Signed out"})


# ===================================================================
# POST /auth/logout-all
# ===================================================================


@router.post("/logout-all")
async def logout_all(
    response: Response,
    user_id: CurrentUserId,
    auth: AuthServiceDep,
) -> DataResponse[dict]:
    """Sign out all devices by deleting every session of the user."""
    await auth.logout_all(user_id)
    clear_auth_cookies(response)
    return DataResponse(data={"message": "Signed out from all devices"})


# ===================================================================
# GET /auth/me
# ===================================================================


@router.get("/me")
async def get_me(
    user_id: CurrentUserId,
    auth: AuthServiceDep,
) -> DataResponse[dict]:
    """Return current user info."""
    user = await auth.get_user(user_id)
    if user is None:
        raise NotFoundError("User")
    return DataResponse(data=_user_to_response(user))


# ===================================================================
# PATCH /auth/profile
# ===================================================================


@router.patch("/profile")
async def update_profile(
    body: UpdateProfileRequest,
    user_id: CurrentUserId,
    auth: AuthServiceDep,
) -> DataResponse[dict]:
    """Update the display name."""
    trimmed_name = body.name.strip()
    if not trimmed_name:
        raise ValidationError("Name must not be empty")

    user = await auth.update_profile(user_id, name=trimmed_name)
    if user is None:
        raise UnauthorizedError()
    return DataResponse(data=_user_to_response(user))
