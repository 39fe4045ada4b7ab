"""Repository for time entries in a per-user store."""

import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from timereport.models.time_entry import TimeEntry

_UPDATABLE_FIELDS: frozenset[str] = frozenset({"date", "minutes", "description"})


@dataclass(frozen=True)
class TimeEntryFilter:
    """Optional filters for listing time entries.

    Each field is independent; None means "do not filter on this".

    Attributes:
        project_id: Only entries of this project.
        date_from: Only entries on or after this day.
        date_to: Only entries on or before this day.
    """

    project_id: uuid.UUID | None = None
    date_from: date | None = None
    date_to: date | None = None


class TimeEntryRepository:
    """Stateless repository for TimeEntry table operations.

    Returned entries always have ``project`` loaded.
    """

    @staticmethod
    async def find(
        db: AsyncSession,
        entry_filter: TimeEntryFilter,
        *,
        ascending: bool = False,
    ) -> list[TimeEntry]:
        """List entries matching a filter, ordered by date.

        Args:
            db: Per-user store session.
            entry_filter: Optional predicates.
            ascending: Oldest first instead of newest first.

        Returns:
            Matching time entries.
        """
        stmt = select(TimeEntry).options(selectinload(TimeEntry.project))
        if entry_filter.project_id is not None:
            stmt = stmt.where(TimeEntry.project_id == entry_filter.project_id)
        if entry_filter.date_from is not None:
            stmt = stmt.where(TimeEntry.date >= entry_filter.date_from)
        if entry_filter.date_to is not None:
            stmt = stmt.where(TimeEntry.date <= entry_filter.date_to)
        order = TimeEntry.date.asc() if ascending else TimeEntry.date.desc()
        result = await db.execute(stmt.order_by(order))
        return list(result.scalars().all())

    @staticmethod
    async def get_by_id(db: AsyncSession, entry_id: uuid.UUID) -> TimeEntry | None:
        """Fetch an entry by primary key."""
        stmt = (
            select(TimeEntry)
            .where(TimeEntry.id == entry_id)
            .options(selectinload(TimeEntry.project))
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_for_day(
        db: AsyncSession, project_id: uuid.UUID, day: date
    ) -> TimeEntry | None:
        """Fetch the entry of a project on a given day."""
        stmt = (
            select(TimeEntry)
            .where(TimeEntry.project_id == project_id, TimeEntry.date == day)
            .options(selectinload(TimeEntry.project))
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(db: AsyncSession, **fields: Any) -> TimeEntry:
        """Create an entry.

        Raises:
            sqlalchemy.exc.IntegrityError: If the project already has an
                entry on that day.
        """
        entry = TimeEntry(**fields)
        db.add(entry)
        await db.flush()
        await db.refresh(entry, attribute_names=["project"])
        return entry

    @staticmethod
    async def update(
        db: AsyncSession, entry: TimeEntry, **fields: Any
    ) -> TimeEntry:
        """Apply a partial update to a loaded entry.

        Raises:
            ValueError: If an unknown field name is passed.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            msg = f"Unknown fields: {', '.join(sorted(unknown))}"
            raise ValueError(msg)

        for field, value in fields.items():
            setattr(entry, field, value)
        await db.flush()
        await db.refresh(entry, attribute_names=["updated_at", "project"])
        return entry

    @staticmethod
    async def delete(db: AsyncSession, entry: TimeEntry) -> None:
        """Delete an entry."""
        await db.delete(entry)
        await db.flush()
