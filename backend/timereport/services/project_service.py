"""Project management within a user's own store.

Every project read comes back with its logged time rolled up:
``total_minutes`` sums the project's entries and ``total_amount`` prices
them at the hourly rate (minor currency units, rounded). Projects without a
rate have no amount.
"""

import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from timereport.core.errors import InvalidStateError
from timereport.models.project import Project
from timereport.repositories.project_repository import ProjectRepository

logger = structlog.get_logger()


def _check_date_range(start_date: date, end_date: date | None) -> None:
    if end_date is not None and end_date < start_date:
        raise InvalidStateError("Project end date is before its start date")


def compute_total_amount(total_minutes: int, hourly_rate: int | None) -> int | None:
    """Price logged minutes at an hourly rate.

    Args:
        total_minutes: Minutes worked.
        hourly_rate: Rate per hour in minor currency units, or None.

    Returns:
        Rounded amount in minor units, or None when no rate is set.
    """
    if hourly_rate is None:
        return None
    return round(total_minutes / 60 * hourly_rate)


@dataclass(frozen=True)
class ProjectWithStats:
    """A project together with its rolled-up time."""

    project: Project
    total_minutes: int
    total_amount: int | None


class ProjectService:
    """CRUD over projects, bound to one per-user store session.

    Args:
        db: Session on the caller's per-user store. Writes are flushed here
            and committed by the session owner.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def list_projects(
        self, *, include_inactive: bool = False
    ) -> list[ProjectWithStats]:
        """List projects newest first, with totals."""
        projects = await ProjectRepository.list_all(
            self._db, include_inactive=include_inactive
        )
        totals = await ProjectRepository.total_minutes(
            self._db, [project.id for project in projects]
        )
        return [
            self._with_stats(project, totals.get(project.id, 0))
            for project in projects
        ]

    async def get_project(self, project_id: uuid.UUID) -> ProjectWithStats | None:
        """Fetch one project with totals, or None if it does not exist."""
        project = await ProjectRepository.get_by_id(self._db, project_id)
        if project is None:
            return None
        totals = await ProjectRepository.total_minutes(self._db, [project.id])
        return self._with_stats(project, totals.get(project.id, 0))

    async def create_project(self, **fields: Any) -> ProjectWithStats:
        """Create a project. A fresh project has no logged time.

        Raises:
            InvalidStateError: If end_date is before start_date.
        """
        _check_date_range(fields["start_date"], fields.get("end_date"))
        project = await ProjectRepository.create(self._db, **fields)
        logger.info("project_created", project_id=str(project.id))
        return self._with_stats(project, 0)

    async def update_project(
        self, project_id: uuid.UUID, **fields: Any
    ) -> ProjectWithStats | None:
        """Apply a partial update.

        Only the given fields change; an empty update returns the project
        unchanged.

        Returns:
            Updated project with totals, or None if it does not exist.

        Raises:
            InvalidStateError: If the resulting end_date is before
                start_date.
        """
        project = await ProjectRepository.get_by_id(self._db, project_id)
        if project is None:
            return None
        _check_date_range(
            fields.get("start_date", project.start_date),
            fields.get("end_date", project.end_date),
        )
        await ProjectRepository.update(self._db, project_id, **fields)
        totals = await ProjectRepository.total_minutes(self._db, [project.id])
        return self._with_stats(project, totals.get(project.id, 0))

    async def delete_project(self, project_id: uuid.UUID) -> bool:
        """Delete a project and its time entries.

        Returns:
            True if a project was deleted.
        """
        project = await ProjectRepository.get_by_id(self._db, project_id)
        if project is None:
            return False
        await ProjectRepository.delete(self._db, project)
        logger.info("project_deleted", project_id=str(project_id))
        return True

    @staticmethod
    def _with_stats(project: Project, total_minutes: int) -> ProjectWithStats:
        return ProjectWithStats(
            project=project,
            total_minutes=total_minutes,
            total_amount=compute_total_amount(total_minutes, project.hourly_rate),
        )
