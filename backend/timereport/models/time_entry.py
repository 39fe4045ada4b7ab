"""Time entry model - per-user store.

One entry per project per day; logging time again for the same day
updates the existing row.
"""

import datetime as dt
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timereport.models.base import TimestampMixin, UserStoreBase

if TYPE_CHECKING:
    from timereport.models.project import Project


class TimeEntry(UserStoreBase, TimestampMixin):
    """Minutes worked on a project on a given day.

    Attributes:
        id: UUID primary key.
        project_id: Project the time belongs to.
        date: Calendar day of the work.
        minutes: Minutes worked (1-1440).
        description: Optional note (max 500 chars).
    """

    __tablename__ = "time_entries"
    __table_args__ = (
        UniqueConstraint("project_id", "date", name="uq_time_entries_project_date"),
        CheckConstraint(
            "minutes >= 1 AND minutes <= 1440", name="ck_time_entries_minutes"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=uuid.uuid4,
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[dt.date] = mapped_column(
        Date,
        nullable=False,
        index=True,
    )
    minutes: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    project: Mapped["Project"] = relationship(
        "Project",
        back_populates="time_entries",
    )
