"""Project model - per-user store.

Lives in the user's own SQLite file, so there is no user column: tenant
isolation comes from which store the session points at.
"""

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, Integer, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timereport.models.base import TimestampMixin, UserStoreBase

if TYPE_CHECKING:
    from timereport.models.time_entry import TimeEntry


class Project(UserStoreBase, TimestampMixin):
    """A named project that time is logged against.

    Attributes:
        id: UUID primary key.
        name: Display name (1-100 chars).
        description: Optional free text (max 500 chars).
        hourly_rate: Rate in minor currency units per hour, or None.
        start_date: First day of the project.
        end_date: Optional last day of the project.
        is_active: Inactive projects are hidden by default and reject new
            time entries.
    """

    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )
    hourly_rate: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )
    start_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )
    end_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("1"),
    )

    time_entries: Mapped[list["TimeEntry"]] = relationship(
        "TimeEntry",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
