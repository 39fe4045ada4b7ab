"""Time entries within a user's own store.

A project has at most one entry per day. Logging time for a day that
already has an entry replaces that entry's minutes and description.
"""

import uuid
from datetime import date, timedelta
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from timereport.core.errors import ConflictError, NotFoundError
from timereport.models.time_entry import TimeEntry
from timereport.repositories.project_repository import ProjectRepository
from timereport.repositories.time_entry_repository import (
    TimeEntryFilter,
    TimeEntryRepository,
)

logger = structlog.get_logger()

WEEK_LENGTH = timedelta(days=7)


class TimeEntryService:
    """Read and write time entries, bound to one per-user store session."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def list_entries(
        self, entry_filter: TimeEntryFilter | None = None
    ) -> list[TimeEntry]:
        """List entries, newest day first.

        Args:
            entry_filter: Optional project and date range predicates.
        """
        return await TimeEntryRepository.find(
            self._db, entry_filter or TimeEntryFilter()
        )

    async def get_entry(self, entry_id: uuid.UUID) -> TimeEntry | None:
        return await TimeEntryRepository.get_by_id(self._db, entry_id)

    async def upsert_entry(
        self,
        *,
        project_id: uuid.UUID,
        day: date,
        minutes: int,
        description: str | None = None,
    ) -> TimeEntry:
        """Log time for a project on a day, creating or replacing the entry.

        Args:
            project_id: Project to log against. Must exist and be active.
            day: Day the time was worked.
            minutes: Minutes worked, 1 to 1440.
            description: Optional note. When replacing an existing entry,
                None keeps the current note.

        Returns:
            The created or updated entry.

        Raises:
            NotFoundError: If the project does not exist or is inactive.
        """
        project = await ProjectRepository.get_active(self._db, project_id)
        if project is None:
            raise NotFoundError("Project", str(project_id))

        existing = await TimeEntryRepository.get_for_day(self._db, project_id, day)
        if existing is not None:
            fields: dict[str, Any] = {"minutes": minutes}
            if description is not None:
                fields["description"] = description
            return await TimeEntryRepository.update(self._db, existing, **fields)

        entry = await TimeEntryRepository.create(
            self._db,
            project_id=project_id,
            date=day,
            minutes=minutes,
            description=description,
        )
        logger.info("time_entry_created", entry_id=str(entry.id))
        return entry

    async def update_entry(
        self, entry_id: uuid.UUID, **fields: Any
    ) -> TimeEntry | None:
        """Apply a partial update (date, minutes, description).

        Returns:
            Updated entry, or None if it does not exist.

        Raises:
            ConflictError: If the entry would move onto a day its project
                already has another entry for.
        """
        entry = await TimeEntryRepository.get_by_id(self._db, entry_id)
        if entry is None:
            return None

        new_day = fields.get("date")
        if new_day is not None and new_day != entry.date:
            clash = await TimeEntryRepository.get_for_day(
                self._db, entry.project_id, new_day
            )
            if clash is not None:
                raise ConflictError(
                    code="TIME_ENTRY_EXISTS",
                    message=f"An entry for {new_day.isoformat()} already exists",
                )
        return await TimeEntryRepository.update(self._db, entry, **fields)

    async def delete_entry(self, entry_id: uuid.UUID) -> bool:
        """Delete an entry.

        Returns:
            True if an entry was deleted.
        """
        entry = await TimeEntryRepository.get_by_id(self._db, entry_id)
        if entry is None:
            return False
        await TimeEntryRepository.delete(self._db, entry)
        return True

    async def week_entries(self, week_start: date) -> list[TimeEntry]:
        """Entries of the seven days starting at ``week_start``, oldest first."""
        entry_filter = TimeEntryFilter(
            date_from=week_start,
            date_to=week_start + WEEK_LENGTH - timedelta(days=1),
        )
        return await TimeEntryRepository.find(self._db, entry_filter, ascending=True)
