"""Repository for User CRUD operations in the central store."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timereport.models.user import User

# Fields that may be updated via UserRepository.update().
# Security: Never add 'id' or 'email'.
# - id: primary key, also names the user's store file
# - email: unique identity, keyed by the login flow
_UPDATABLE_FIELDS: frozenset[str] = frozenset({"name"})


def normalize_email(email: str) -> str:
    """Lowercase and trim an email address."""
    return email.strip().lower()


class UserRepository:
    """Stateless repository for User table operations.

    All methods are static, with no instance state. Pass an AsyncSession
    for every call so the caller controls transaction boundaries.
    """

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: uuid.UUID) -> User | None:
        """Fetch a user by primary key.

        Args:
            db: Async database session.
            user_id: UUID primary key.

        Returns:
            User if found, None otherwise.
        """
        return await db.get(User, user_id)

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        """Fetch a user by email address (case-insensitive).

        Args:
            db: Async database session.
            email: Email address to look up.

        Returns:
            User if found, None otherwise.
        """
        stmt = select(User).where(User.email == normalize_email(email))
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        email: str,
        name: str | None = None,
    ) -> User:
        """Create a new user.

        Email is normalized before storage.

        Args:
            db: Async database session.
            email: User email address.
            name: Display name.

        Returns:
            Created User with generated fields populated.

        Raises:
            sqlalchemy.exc.IntegrityError: If email already exists.
        """
        user = User(email=normalize_email(email), name=name)
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return user

    @staticmethod
    async def update(
        db: AsyncSession,
        user_id: uuid.UUID,
        **kwargs: str | None,
    ) -> User | None:
        """Update user fields.

        Only fields in _UPDATABLE_FIELDS are allowed.

        Args:
            db: Async database session.
            user_id: UUID of the user to update.
            **kwargs: Field names and values to update.

        Returns:
            Updated User if found, None if user does not exist.

        Raises:
            ValueError: If an unknown field name is passed.
        """
        unknown = set(kwargs) - _UPDATABLE_FIELDS
        if unknown:
            msg = f"Unknown fields: {', '.join(sorted(unknown))}"
            raise ValueError(msg)

        user = await db.get(User, user_id)
        if user is None:
            return None

        for field, value in kwargs.items():
            setattr(user, field, value)

        await db.flush()
        await db.refresh(user)
        return user

    @staticmethod
    async def delete(db: AsyncSession, user: User) -> None:
        """Delete a user row (sessions cascade).

        Args:
            db: Async database session.
            user: User to delete.
        """
        await db.delete(user)
        await db.flush()
