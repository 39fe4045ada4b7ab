"""Repository for projects in a per-user store.

Sessions passed here are bound to one user's SQLite file, so queries need
no ownership filter.
"""

import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from timereport.models.project import Project
from timereport.models.time_entry import TimeEntry

_UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {
        "name",
        "description",
        "hourly_rate",
        "start_date",
        "end_date",
        "is_active",
    }
)


class ProjectRepository:
    """Stateless repository for Project table operations."""

    @staticmethod
    async def list_all(
        db: AsyncSession, *, include_inactive: bool = False
    ) -> list[Project]:
        """List projects, newest first.

        Args:
            db: Per-user store session.
            include_inactive: Also return projects with is_active=False.

        Returns:
            List of projects.
        """
        stmt = select(Project).order_by(Project.created_at.desc())
        if not include_inactive:
            stmt = stmt.where(Project.is_active.is_(True))
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_by_id(db: AsyncSession, project_id: uuid.UUID) -> Project | None:
        """Fetch a project by primary key."""
        return await db.get(Project, project_id)

    @staticmethod
    async def get_active(db: AsyncSession, project_id: uuid.UUID) -> Project | None:
        """Fetch a project only if it is active."""
        stmt = select(Project).where(
            Project.id == project_id,
            Project.is_active.is_(True),
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def total_minutes(
        db: AsyncSession, project_ids: list[uuid.UUID]
    ) -> dict[uuid.UUID, int]:
        """Sum logged minutes per project.

        Args:
            db: Per-user store session.
            project_ids: Projects to aggregate.

        Returns:
            Mapping of project id to total minutes. Projects without
            entries are absent.
        """
        if not project_ids:
            return {}
        stmt = (
            select(TimeEntry.project_id, func.sum(TimeEntry.minutes))
            .where(TimeEntry.project_id.in_(project_ids))
            .group_by(TimeEntry.project_id)
        )
        result = await db.execute(stmt)
        return {project_id: int(total) for project_id, total in result.all()}

    @staticmethod
    async def create(db: AsyncSession, **fields: Any) -> Project:
        """Create a project.

        Returns:
            Created Project with generated fields populated.
        """
        project = Project(**fields)
        db.add(project)
        await db.flush()
        await db.refresh(project)
        return project

    @staticmethod
    async def update(
        db: AsyncSession, project_id: uuid.UUID, **fields: Any
    ) -> Project | None:
        """Apply a partial update.

        Returns:
            Updated Project, or None if it does not exist.

        Raises:
            ValueError: If an unknown field name is passed.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            msg = f"Unknown fields: {', '.join(sorted(unknown))}"
            raise ValueError(msg)

        project = await db.get(Project, project_id)
        if project is None:
            return None
        for field, value in fields.items():
            setattr(project, field, value)
        await db.flush()
        await db.refresh(project)
        return project

    @staticmethod
    async def delete(db: AsyncSession, project: Project) -> None:
        """Delete a project; its time entries cascade."""
        await db.delete(project)
        await db.flush()
