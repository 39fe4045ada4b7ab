"""Repository for one-time login codes."""

import uuid
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from timereport.models.otp_code import OtpCode


class OtpCodeRepository:
    """Stateless repository for OtpCode table operations.

    Emails passed in must already be normalized.
    """

    @staticmethod
    async def invalidate_active(db: AsyncSession, *, email: str) -> int:
        """Mark every unused code for an email as used.

        Args:
            db: Async database session.
            email: Normalized email address.

        Returns:
            Number of codes invalidated.
        """
        stmt = (
            update(OtpCode)
            .where(OtpCode.email == email, OtpCode.used.is_(False))
            .values(used=True)
        )
        result = await db.execute(stmt)
        row_count: int = result.rowcount  # type: ignore[attr-defined]
        return row_count

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        email: str,
        code_hash: str,
        expires_at: datetime,
    ) -> OtpCode:
        """Store a new active code.

        Args:
            db: Async database session.
            email: Normalized email address.
            code_hash: SHA-256 hex digest of the raw code.
            expires_at: Code expiry timestamp.

        Returns:
            Created OtpCode with attempts=0 and used=False.
        """
        otp = OtpCode(email=email, code_hash=code_hash, expires_at=expires_at)
        db.add(otp)
        await db.flush()
        return otp

    @staticmethod
    async def get_latest_active(db: AsyncSession, *, email: str) -> OtpCode | None:
        """Fetch the most recently issued unused code for an email.

        Args:
            db: Async database session.
            email: Normalized email address.

        Returns:
            OtpCode if one is active, None otherwise.
        """
        stmt = (
            select(OtpCode)
            .where(OtpCode.email == email, OtpCode.used.is_(False))
            .order_by(OtpCode.created_at.desc())
            .limit(1)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def mark_used(db: AsyncSession, otp_id: uuid.UUID) -> bool:
        """Claim a code so it can never verify again.

        Conditional on the code still being unused, so of two concurrent
        claims exactly one wins.

        Returns:
            True if this call consumed the code, False if it was already used.
        """
        stmt = (
            update(OtpCode)
            .where(OtpCode.id == otp_id, OtpCode.used.is_(False))
            .values(used=True)
        )
        result = await db.execute(stmt)
        return result.rowcount == 1  # type: ignore[attr-defined]

    @staticmethod
    async def increment_attempts(db: AsyncSession, otp_id: uuid.UUID) -> bool:
        """Count one wrong submission against a still-unused code.

        Single UPDATE with ``attempts = attempts + 1`` so concurrent wrong
        guesses are all counted.

        Returns:
            False if the code was consumed in the meantime.
        """
        stmt = (
            update(OtpCode)
            .where(OtpCode.id == otp_id, OtpCode.used.is_(False))
            .values(attempts=OtpCode.attempts + 1)
        )
        result = await db.execute(stmt)
        return result.rowcount == 1  # type: ignore[attr-defined]
