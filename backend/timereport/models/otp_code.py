"""One-time login code model.

Codes are stored hashed and never deleted by the login flow; used and
expired rows accumulate as an audit trail. ``email`` is a plain string
rather than a foreign key because codes are requested before a user exists.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Index, Integer, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from timereport.models.base import Base, utcnow


class OtpCode(Base):
    """Hashed one-time login code.

    At most one unused code per email is active: issuing a new code marks
    every earlier unused code for that email as used.

    Attributes:
        id: UUID primary key.
        email: Normalized target email address.
        code_hash: SHA-256 hex digest of the six-digit code.
        expires_at: Moment after which the code is rejected.
        attempts: Number of wrong submissions so far.
        used: True once the code was consumed, superseded, or exhausted.
        created_at: Issue timestamp; the newest unused code is the active one.
    """

    __tablename__ = "otp_codes"
    __table_args__ = (Index("ix_otp_codes_email_used", "email", "used"),)

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    code_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(
        nullable=False,
    )
    attempts: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )
    used: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("0"),
    )
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow,
        nullable=False,
    )
