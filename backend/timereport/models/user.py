"""User model - identity record in the central store.

One row per normalized email. Each user owns exactly one per-user SQLite
store named after ``id``; that mapping lives on the filesystem, not in a
foreign key.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timereport.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from timereport.models.session import Session


class User(Base, TimestampMixin):
    """Authenticated identity.

    Attributes:
        id: UUID primary key. Also names the user's store file.
        email: Unique, lowercase, trimmed email address.
        name: Optional display name.
        created_at: Account creation timestamp (from TimestampMixin).
        updated_at: Last modification timestamp (from TimestampMixin).
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    name: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )

    sessions: Mapped[list["Session"]] = relationship(
        "Session",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
