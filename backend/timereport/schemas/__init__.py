"""Pydantic request/response schemas for API endpoints."""

from timereport.schemas.project import (
    CreateProjectRequest,
    ProjectResponse,
    UpdateProjectRequest,
)
from timereport.schemas.time_entry import (
    TimeEntryResponse,
    UpdateTimeEntryRequest,
    UpsertTimeEntryRequest,
)

__all__ = [
    # Projects
    "CreateProjectRequest",
    "ProjectResponse",
    "UpdateProjectRequest",
    # Time entries
    "TimeEntryResponse",
    "UpdateTimeEntryRequest",
    "UpsertTimeEntryRequest",
]
