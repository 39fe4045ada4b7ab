"""Passwordless login: one-time codes, sessions, and refresh rotation.

Login flow:
1. request_otp: invalidate earlier codes, store a hashed new one, email it
2. verify_otp: check expiry, attempt budget and hash; consume the code;
   find or create the user (provisioning a per-user store for new users);
   issue an access/refresh token pair and persist a session
3. refresh_access_token: verify the refresh token, check the session row,
   rotate both tokens in place
4. logout / logout_all: delete sessions

Credential and token failures are expected outcomes and come back as result
objects carrying an ``AuthFailure``. Any state change made on the way to a
failure (attempt count, used flag, expired session removal) is committed
before returning, so the caller may raise an HTTP error freely afterwards.

Provisioning failures are not expected: the new user is deleted again and
``UserStoreProvisioningError`` propagates.
"""

import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timereport.core.email import send_login_code_email
from timereport.core.errors import UserStoreError, UserStoreProvisioningError
from timereport.core.otp import (
    generate_code,
    has_exceeded_max_attempts,
    hash_code,
    is_expired,
    otp_expiry,
    verify_code,
)
from timereport.core.tokens import (
    TokenClaims,
    create_access_token,
    create_refresh_token,
    refresh_token_expiry,
    verify_refresh_token,
)
from timereport.core.user_store import UserStoreRegistry
from timereport.models.user import User
from timereport.repositories.otp_code_repository import OtpCodeRepository
from timereport.repositories.session_repository import SessionRepository
from timereport.repositories.user_repository import UserRepository, normalize_email

logger = structlog.get_logger()

SendLoginCode = Callable[..., Awaitable[None]]


class AuthFailure(str, Enum):
    """Why a login or refresh attempt was rejected.

    Values are the user-facing messages; ``code`` is the machine-readable
    error code sent to clients.
    """

    NO_ACTIVE_CODE = "no active code"
    CODE_EXPIRED = "code expired"
    TOO_MANY_ATTEMPTS = "too many attempts"
    INCORRECT_CODE = "incorrect code"
    INVALID_REFRESH_TOKEN = "invalid refresh token"
    SESSION_NOT_FOUND = "session not found"
    SESSION_EXPIRED = "session expired"

    @property
    def code(self) -> str:
        """Machine-readable error code (e.g. "CODE_EXPIRED")."""
        return self.name


@dataclass(frozen=True)
class AuthUser:
    """Public fields of an authenticated user."""

    id: uuid.UUID
    email: str
    name: str | None

    @classmethod
    def from_model(cls, user: User) -> "AuthUser":
        return cls(id=user.id, email=user.email, name=user.name)


@dataclass(frozen=True)
class OtpVerificationResult:
    """Outcome of verify_otp.

    On success both tokens and ``user`` are set; on failure only ``error``.
    """

    success: bool
    access_token: str | None = None
    refresh_token: str | None = None
    user: AuthUser | None = None
    error: AuthFailure | None = None


@dataclass(frozen=True)
class TokenRefreshResult:
    """Outcome of refresh_access_token."""

    success: bool
    access_token: str | None = None
    refresh_token: str | None = None
    error: AuthFailure | None = None


class AuthService:
    """Login and session lifecycle over the central store.

    Args:
        db: Central store session. The service commits its own writes.
        stores: Registry used to provision stores for new users.
        send_code: Delivery callable, awaited as
            ``send_code(to_email=..., code=...)``.
    """

    def __init__(
        self,
        db: AsyncSession,
        stores: UserStoreRegistry,
        *,
        send_code: SendLoginCode = send_login_code_email,
    ) -> None:
        self._db = db
        self._stores = stores
        self._send_code = send_code

    # -----------------------------------------------------------------
    # One-time codes
    # -----------------------------------------------------------------

    async def request_otp(self, email: str) -> None:
        """Issue a fresh login code for an email and send it.

        Always succeeds, whether or not the email belongs to a user, so the
        endpoint cannot be used to enumerate accounts.

        Args:
            email: Address to send the code to (normalized here).
        """
        email = normalize_email(email)

        await OtpCodeRepository.invalidate_active(self._db, email=email)

        code = generate_code()
        await OtpCodeRepository.create(
            self._db,
            email=email,
            code_hash=hash_code(code),
            expires_at=otp_expiry(),
        )
        await self._db.commit()

        logger.info("otp_requested", email=email)
        await self._send_code(to_email=email, code=code)

    async def verify_otp(self, email: str, code: str) -> OtpVerificationResult:
        """Verify a submitted code and open a session.

        Args:
            email: Address the code was sent to (normalized here).
            code: Six-digit code as typed by the user.

        Returns:
            Success with tokens and user, or a failure with the reason.

        Raises:
            UserStoreProvisioningError: A new user's store could not be
                created. The user row has already been removed again.
        """
        email = normalize_email(email)

        otp = await OtpCodeRepository.get_latest_active(self._db, email=email)
        if otp is None:
            await self._db.commit()
            return self._reject(email, AuthFailure.NO_ACTIVE_CODE)

        if is_expired(otp.expires_at):
            await OtpCodeRepository.mark_used(self._db, otp.id)
            await self._db.commit()
            return self._reject(email, AuthFailure.CODE_EXPIRED)

        if has_exceeded_max_attempts(otp.attempts):
            await OtpCodeRepository.mark_used(self._db, otp.id)
            await self._db.commit()
            return self._reject(email, AuthFailure.TOO_MANY_ATTEMPTS)

        if not verify_code(code, otp.code_hash):
            counted = await OtpCodeRepository.increment_attempts(self._db, otp.id)
            await self._db.commit()
            if not counted:
                return self._reject(email, AuthFailure.NO_ACTIVE_CODE)
            return self._reject(email, AuthFailure.INCORRECT_CODE)

        # Consume the code before any identity work; it can never verify again.
        # A concurrent request may have claimed it since it was read.
        claimed = await OtpCodeRepository.mark_used(self._db, otp.id)
        await self._db.commit()
        if not claimed:
            return self._reject(email, AuthFailure.NO_ACTIVE_CODE)
        logger.info("otp_verified", email=email)

        user = await self._find_or_create_user(email)

        claims = TokenClaims(user_id=user.id, email=user.email)
        access_token = create_access_token(claims)
        refresh_token = create_refresh_token(claims)
        await SessionRepository.create(
            self._db,
            user_id=user.id,
            refresh_token=refresh_token,
            expires_at=refresh_token_expiry(),
        )
        await self._db.commit()

        return OtpVerificationResult(
            success=True,
            access_token=access_token,
            refresh_token=refresh_token,
            user=AuthUser.from_model(user),
        )

    def _reject(self, email: str, reason: AuthFailure) -> OtpVerificationResult:
        logger.info("otp_verification_failed", email=email, reason=reason.code)
        return OtpVerificationResult(success=False, error=reason)

    async def _find_or_create_user(self, email: str) -> User:
        """Return the user for an email, creating and provisioning if new.

        The insert runs in a savepoint. Losing a race against a concurrent
        first login for the same email reloads the winner's row and waits
        for its store instead of creating a second one.
        """
        user = await UserRepository.get_by_email(self._db, email)
        if user is not None:
            return user

        try:
            async with self._db.begin_nested():
                user = await UserRepository.create(self._db, email=email)
        except IntegrityError:
            existing = await UserRepository.get_by_email(self._db, email)
            if existing is None:
                raise
            logger.info("user_create_race_lost", user_id=str(existing.id))
            try:
                await self._stores.create_store(existing.id)
            except UserStoreError as exc:
                logger.error(
                    "user_store_provisioning_failed",
                    user_id=str(existing.id),
                    error=str(exc),
                )
                raise UserStoreProvisioningError() from exc
            return existing

        await self._db.commit()
        logger.info("user_created", user_id=str(user.id))

        try:
            await self._stores.create_store(user.id)
        except UserStoreError as exc:
            # Compensate: no user may exist without a backing store
            await UserRepository.delete(self._db, user)
            await self._db.commit()
            logger.error(
                "user_store_provisioning_failed",
                user_id=str(user.id),
                error=str(exc),
                rolled_back=True,
            )
            raise UserStoreProvisioningError() from exc

        return user

    # -----------------------------------------------------------------
    # Sessions
    # -----------------------------------------------------------------

    async def refresh_access_token(self, refresh_token: str) -> TokenRefreshResult:
        """Rotate a session: new access and refresh tokens, same session row.

        Both the token's own expiry and the session row's expiry must hold;
        a session that was removed or expired server-side rejects an
        otherwise valid token.

        Args:
            refresh_token: Current refresh token value.

        Returns:
            Success with the new token pair, or a failure with the reason.
        """
        claims = verify_refresh_token(refresh_token)
        if claims is None:
            return self._refresh_rejected(AuthFailure.INVALID_REFRESH_TOKEN)

        session = await SessionRepository.get_by_refresh_token(self._db, refresh_token)
        if session is None:
            await self._db.commit()
            return self._refresh_rejected(AuthFailure.SESSION_NOT_FOUND)

        if datetime.now(UTC) > session.expires_at:
            await SessionRepository.delete(self._db, session.id)
            await self._db.commit()
            return self._refresh_rejected(AuthFailure.SESSION_EXPIRED)

        new_claims = TokenClaims(user_id=session.user_id, email=session.user.email)
        access_token = create_access_token(new_claims)
        new_refresh_token = create_refresh_token(new_claims)
        await SessionRepository.rotate(
            self._db,
            session,
            refresh_token=new_refresh_token,
            expires_at=refresh_token_expiry(),
        )
        await self._db.commit()
        logger.info("session_refreshed", user_id=str(session.user_id))

        return TokenRefreshResult(
            success=True,
            access_token=access_token,
            refresh_token=new_refresh_token,
        )

    def _refresh_rejected(self, reason: AuthFailure) -> TokenRefreshResult:
        logger.info("session_refresh_failed", reason=reason.code)
        return TokenRefreshResult(success=False, error=reason)

    async def logout(self, refresh_token: str) -> None:
        """Delete the session holding this refresh token, if any."""
        deleted = await SessionRepository.delete_by_refresh_token(
            self._db, refresh_token
        )
        await self._db.commit()
        logger.info("logout", sessions_deleted=deleted)

    async def logout_all(self, user_id: uuid.UUID) -> None:
        """Delete every session of a user."""
        deleted = await SessionRepository.delete_all_for_user(self._db, user_id)
        await self._db.commit()
        logger.info("logout_all", user_id=str(user_id), sessions_deleted=deleted)

    # -----------------------------------------------------------------
    # Profile
    # -----------------------------------------------------------------

    async def get_user(self, user_id: uuid.UUID) -> User | None:
        """Fetch a user by id."""
        return await UserRepository.get_by_id(self._db, user_id)

    async def update_profile(self, user_id: uuid.UUID, *, name: str) -> User | None:
        """Set a user's display name.

        Returns:
            Updated user, or None if the user no longer exists.
        """
        user = await UserRepository.update(self._db, user_id, name=name)
        await self._db.commit()
        return user
