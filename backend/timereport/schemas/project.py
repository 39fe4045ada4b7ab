"""Project request and response schemas.

Money fields (``hourly_rate``, ``total_amount``) are integers in minor
currency units.
"""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from timereport.services.project_service import ProjectWithStats


class CreateProjectRequest(BaseModel):
    """Request body for POST /projects."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    hourly_rate: int | None = Field(default=None, ge=0)
    start_date: date
    end_date: date | None = None


class UpdateProjectRequest(BaseModel):
    """Request body for PATCH /projects/{id}.

    Only fields present in the body are changed.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    hourly_rate: int | None = Field(default=None, ge=0)
    start_date: date | None = None
    end_date: date | None = None
    is_active: bool | None = None

    @model_validator(mode="after")
    def check_required_not_null(self) -> "UpdateProjectRequest":
        for name in ("name", "start_date", "is_active"):
            if name in self.model_fields_set and getattr(self, name) is None:
                msg = f"{name} must not be null"
                raise ValueError(msg)
        return self


class ProjectResponse(BaseModel):
    """A project with its logged time rolled up.

    Attributes:
        total_minutes: Sum of all time entry minutes.
        total_amount: total_minutes priced at hourly_rate, or None when the
            project has no rate.
    """

    id: uuid.UUID
    name: str
    description: str | None
    hourly_rate: int | None
    start_date: date
    end_date: date | None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    total_minutes: int
    total_amount: int | None

    @classmethod
    def from_stats(cls, stats: ProjectWithStats) -> "ProjectResponse":
        project = stats.project
        return cls(
            id=project.id,
            name=project.name,
            description=project.description,
            hourly_rate=project.hourly_rate,
            start_date=project.start_date,
            end_date=project.end_date,
            is_active=project.is_active,
            created_at=project.created_at,
            updated_at=project.updated_at,
            total_minutes=stats.total_minutes,
            total_amount=stats.total_amount,
        )
