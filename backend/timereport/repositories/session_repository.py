"""Repository for login sessions (refresh tokens)."""

import uuid
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from timereport.models.session import Session


class SessionRepository:
    """Stateless repository for Session table operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        user_id: uuid.UUID,
        refresh_token: str,
        expires_at: datetime,
    ) -> Session:
        """Persist a new session for a refresh token.

        Args:
            db: Async database session.
            user_id: Owning user.
            refresh_token: Signed refresh token value.
            expires_at: Server-side session expiry.

        Returns:
            Created Session.
        """
        session = Session(
            user_id=user_id,
            refresh_token=refresh_token,
            expires_at=expires_at,
        )
        db.add(session)
        await db.flush()
        return session

    @staticmethod
    async def get_by_refresh_token(
        db: AsyncSession, refresh_token: str
    ) -> Session | None:
        """Look up a session by exact refresh token value, with its user.

        Args:
            db: Async database session.
            refresh_token: Refresh token value.

        Returns:
            Session with ``user`` loaded, or None.
        """
        stmt = (
            select(Session)
            .where(Session.refresh_token == refresh_token)
            .options(selectinload(Session.user))
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def rotate(
        db: AsyncSession,
        session: Session,
        *,
        refresh_token: str,
        expires_at: datetime,
    ) -> Session:
        """Replace a session's refresh token and extend its expiry in place.

        Args:
            db: Async database session.
            session: Session to rotate.
            refresh_token: New refresh token value.
            expires_at: New server-side expiry.

        Returns:
            The updated Session.
        """
        session.refresh_token = refresh_token
        session.expires_at = expires_at
        await db.flush()
        return session

    @staticmethod
    async def delete(db: AsyncSession, session_id: uuid.UUID) -> None:
        """Delete one session by id."""
        await db.execute(delete(Session).where(Session.id == session_id))

    @staticmethod
    async def delete_by_refresh_token(db: AsyncSession, refresh_token: str) -> int:
        """Delete sessions matching a refresh token value.

        Returns:
            Number of deleted rows (0 when nothing matched).
        """
        result = await db.execute(
            delete(Session).where(Session.refresh_token == refresh_token)
        )
        row_count: int = result.rowcount  # type: ignore[attr-defined]
        return row_count

    @staticmethod
    async def delete_all_for_user(db: AsyncSession, user_id: uuid.UUID) -> int:
        """Delete every session of a user ("log out everywhere").

        Returns:
            Number of deleted rows.
        """
        result = await db.execute(delete(Session).where(Session.user_id == user_id))
        row_count: int = result.rowcount  # type: ignore[attr-defined]
        return row_count

