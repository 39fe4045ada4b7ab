"""Time entry endpoints.

Endpoints:
- GET /time-entries: list, optionally filtered by project and date range
- GET /time-entries/week: the seven days starting at ``start``
- GET /time-entries/{entry_id}: one entry
- POST /time-entries: log time for a project on a day (create or replace)
- PATCH /time-entries/{entry_id}: partial update
- DELETE /time-entries/{entry_id}: delete
"""

import uuid
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from timereport.api.deps import UserStoreSession
from timereport.core.errors import NotFoundError
from timereport.core.responses import DataResponse
from timereport.repositories.time_entry_repository import TimeEntryFilter
from timereport.schemas.time_entry import (
    TimeEntryResponse,
    UpdateTimeEntryRequest,
    UpsertTimeEntryRequest,
)
from timereport.services.time_entry_service import TimeEntryService

router = APIRouter()


@router.get("")
async def list_time_entries(
    db: UserStoreSession,
    project_id: uuid.UUID | None = None,
    date_from: Annotated[date | None, Query(alias="from")] = None,
    date_to: Annotated[date | None, Query(alias="to")] = None,
) -> DataResponse[list[TimeEntryResponse]]:
    """List time entries, newest day first.

    Query params ``project_id``, ``from`` and ``to`` each narrow the result
    independently.
    """
    entry_filter = TimeEntryFilter(
        project_id=project_id,
        date_from=date_from,
        date_to=date_to,
    )
    entries = await TimeEntryService(db).list_entries(entry_filter)
    return DataResponse(data=[TimeEntryResponse.from_model(e) for e in entries])


@router.get("/week")
async def get_week(
    db: UserStoreSession,
    start: date,
) -> DataResponse[list[TimeEntryResponse]]:
    """Entries from ``start`` through the following six days, oldest first."""
    entries = await TimeEntryService(db).week_entries(start)
    return DataResponse(data=[TimeEntryResponse.from_model(e) for e in entries])


@router.get("/{entry_id}")
async def get_time_entry(
    entry_id: uuid.UUID,
    db: UserStoreSession,
) -> DataResponse[TimeEntryResponse]:
    """Get one time entry.

    Raises:
        NotFoundError: If the entry does not exist.
    """
    entry = await TimeEntryService(db).get_entry(entry_id)
    if entry is None:
        raise NotFoundError("Time entry", str(entry_id))
    return DataResponse(data=TimeEntryResponse.from_model(entry))


@router.post("", status_code=status.HTTP_201_CREATED)
async def upsert_time_entry(
    body: UpsertTimeEntryRequest,
    db: UserStoreSession,
) -> DataResponse[TimeEntryResponse]:
    """Log time for a project on a day.

    An existing entry for the same project and day is replaced.

    Raises:
        NotFoundError: If the project does not exist or is inactive.
    """
    entry = await TimeEntryService(db).upsert_entry(
        project_id=body.project_id,
        day=body.date,
        minutes=body.minutes,
        description=body.description,
    )
    return DataResponse(data=TimeEntryResponse.from_model(entry))


@router.patch("/{entry_id}")
async def update_time_entry(
    entry_id: uuid.UUID,
    body: UpdateTimeEntryRequest,
    db: UserStoreSession,
) -> DataResponse[TimeEntryResponse]:
    """Update the fields present in the body.

    Raises:
        NotFoundError: If the entry does not exist.
        ConflictError: If the new date already has an entry for the project.
    """
    fields = body.model_dump(exclude_unset=True)
    entry = await TimeEntryService(db).update_entry(entry_id, **fields)
    if entry is None:
        raise NotFoundError("Time entry", str(entry_id))
    return DataResponse(data=TimeEntryResponse.from_model(entry))


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_time_entry(
    entry_id: uuid.UUID,
    db: UserStoreSession,
) -> Response:
    """Delete a time entry.

    Raises:
        NotFoundError: If the entry does not exist.
    """
    deleted = await TimeEntryService(db).delete_entry(entry_id)
    if not deleted:
        raise NotFoundError("Time entry", str(entry_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
