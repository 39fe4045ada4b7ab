"""Session model - refresh token bound to a user.

The refresh token value is rotated in place on every refresh, so an old
value stops resolving as soon as its successor is issued.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timereport.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from timereport.models.user import User


class Session(Base, TimestampMixin):
    """Login session.

    Attributes:
        id: UUID primary key.
        user_id: Owning user.
        refresh_token: Current refresh token value (unique).
        expires_at: Server-side expiry, tracked independently of the
            token's own exp claim.
    """

    __tablename__ = "sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    refresh_token: Mapped[str] = mapped_column(
        Text(),
        unique=True,
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(
        nullable=False,
    )

    user: Mapped["User"] = relationship(
        "User",
        back_populates="sessions",
    )
