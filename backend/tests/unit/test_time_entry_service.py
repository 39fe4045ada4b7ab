"""Tests for TimeEntryService against a real per-user store."""

import uuid
from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from timereport.core.errors import ConflictError, NotFoundError
from timereport.models import Project
from timereport.repositories.time_entry_repository import TimeEntryFilter
from timereport.services.project_service import ProjectService
from timereport.services.time_entry_service import TimeEntryService

_MONDAY = date(2026, 3, 2)


@pytest.fixture
def entries(store_session: AsyncSession) -> TimeEntryService:
    return TimeEntryService(store_session)


@pytest.fixture
async def project(store_session: AsyncSession) -> Project:
    created = await ProjectService(store_session).create_project(
        name="Client A", start_date=date(2026, 1, 1), hourly_rate=80000
    )
    return created.project


@pytest.fixture
async def other_project(store_session: AsyncSession) -> Project:
    created = await ProjectService(store_session).create_project(
        name="Client B", start_date=date(2026, 1, 1)
    )
    return created.project


class TestUpsertEntry:
    """Test TimeEntryService.upsert_entry()."""

    async def test_creates_entry_with_project_summary(
        self, entries: TimeEntryService, project: Project
    ):
        entry = await entries.upsert_entry(
            project_id=project.id, day=_MONDAY, minutes=120, description="Design"
        )

        assert entry.minutes == 120
        assert entry.description == "Design"
        assert entry.project.name == "Client A"

    async def test_second_log_for_same_day_replaces(
        self, entries: TimeEntryService, project: Project
    ):
        first = await entries.upsert_entry(
            project_id=project.id, day=_MONDAY, minutes=60, description="a"
        )
        second = await entries.upsert_entry(
            project_id=project.id, day=_MONDAY, minutes=90, description="b"
        )

        assert second.id == first.id
        assert second.minutes == 90
        assert second.description == "b"
        assert len(await entries.list_entries()) == 1

    async def test_same_day_on_different_projects_are_separate(
        self, entries: TimeEntryService, project: Project, other_project: Project
    ):
        await entries.upsert_entry(project_id=project.id, day=_MONDAY, minutes=60)
        await entries.upsert_entry(project_id=other_project.id, day=_MONDAY, minutes=30)

        assert len(await entries.list_entries()) == 2

    async def test_unknown_project_is_not_found(self, entries: TimeEntryService):
        with pytest.raises(NotFoundError):
            await entries.upsert_entry(project_id=uuid.uuid4(), day=_MONDAY, minutes=60)

    async def test_inactive_project_is_not_found(
        self, entries: TimeEntryService, store_session: AsyncSession, project: Project
    ):
        await ProjectService(store_session).update_project(project.id, is_active=False)

        with pytest.raises(NotFoundError):
            await entries.upsert_entry(project_id=project.id, day=_MONDAY, minutes=60)


class TestListEntries:
    """Test TimeEntryService.list_entries() with TimeEntryFilter."""

    @pytest.fixture
    async def logged(
        self, entries: TimeEntryService, project: Project, other_project: Project
    ):
        for offset, target in ((0, project), (1, project), (2, other_project)):
            await entries.upsert_entry(
                project_id=target.id,
                day=date(2026, 3, 2 + offset),
                minutes=60,
            )

    async def test_no_filter_returns_all_newest_first(
        self, entries: TimeEntryService, logged
    ):
        result = await entries.list_entries()
        assert [e.date for e in result] == [
            date(2026, 3, 4),
            date(2026, 3, 3),
            date(2026, 3, 2),
        ]

    async def test_filters_by_project(
        self, entries: TimeEntryService, project: Project, logged
    ):
        result = await entries.list_entries(TimeEntryFilter(project_id=project.id))
        assert {e.project_id for e in result} == {project.id}
        assert len(result) == 2

    async def test_filters_by_inclusive_date_range(
        self, entries: TimeEntryService, logged
    ):
        result = await entries.list_entries(
            TimeEntryFilter(date_from=date(2026, 3, 3), date_to=date(2026, 3, 3))
        )
        assert [e.date for e in result] == [date(2026, 3, 3)]

    async def test_open_ended_range(self, entries: TimeEntryService, logged):
        result = await entries.list_entries(TimeEntryFilter(date_from=date(2026, 3, 3)))
        assert len(result) == 2

    async def test_combined_filters(
        self, entries: TimeEntryService, other_project: Project, logged
    ):
        result = await entries.list_entries(
            TimeEntryFilter(project_id=other_project.id, date_to=date(2026, 3, 3))
        )
        assert result == []


class TestWeekEntries:
    """Test TimeEntryService.week_entries()."""

    async def test_covers_seven_days_oldest_first(
        self, entries: TimeEntryService, project: Project
    ):
        for day in (
            date(2026, 3, 1),  # day before the week
            date(2026, 3, 8),  # last day of the week
            date(2026, 3, 2),  # first day of the week
            date(2026, 3, 9),  # day after the week
        ):
            await entries.upsert_entry(project_id=project.id, day=day, minutes=30)

        week = await entries.week_entries(_MONDAY)

        assert [e.date for e in week] == [date(2026, 3, 2), date(2026, 3, 8)]


class TestUpdateEntry:
    """Test TimeEntryService.update_entry()."""

    async def test_partial_update(self, entries: TimeEntryService, project: Project):
        entry = await entries.upsert_entry(
            project_id=project.id, day=_MONDAY, minutes=60, description="keep"
        )

        updated = await entries.update_entry(entry.id, minutes=45)

        assert updated.minutes == 45
        assert updated.description == "keep"

    async def test_moving_onto_taken_day_conflicts(
        self, entries: TimeEntryService, project: Project
    ):
        await entries.upsert_entry(project_id=project.id, day=_MONDAY, minutes=60)
        tuesday = await entries.upsert_entry(
            project_id=project.id, day=date(2026, 3, 3), minutes=60
        )

        with pytest.raises(ConflictError):
            await entries.update_entry(tuesday.id, date=_MONDAY)

    async def test_move_to_free_day(self, entries: TimeEntryService, project: Project):
        entry = await entries.upsert_entry(project_id=project.id, day=_MONDAY, minutes=60)

        updated = await entries.update_entry(entry.id, date=date(2026, 3, 5))

        assert updated.date == date(2026, 3, 5)

    async def test_unknown_id_returns_none(self, entries: TimeEntryService):
        assert await entries.update_entry(uuid.uuid4(), minutes=10) is None


class TestDeleteEntry:
    """Test TimeEntryService.delete_entry()."""

    async def test_deletes(self, entries: TimeEntryService, project: Project):
        entry = await entries.upsert_entry(project_id=project.id, day=_MONDAY, minutes=60)

        assert await entries.delete_entry(entry.id) is True
        assert await entries.get_entry(entry.id) is None

    async def test_unknown_id_returns_false(self, entries: TimeEntryService):
        assert await entries.delete_entry(uuid.uuid4()) is False
