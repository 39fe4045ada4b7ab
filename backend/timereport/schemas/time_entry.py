"""Time entry request and response schemas."""

import datetime as dt
import uuid

from pydantic import BaseModel, ConfigDict, Field, model_validator

from timereport.models.time_entry import TimeEntry

MAX_MINUTES_PER_DAY = 1440


class UpsertTimeEntryRequest(BaseModel):
    """Request body for POST /time-entries.

    Creates the entry for (project_id, date), or replaces minutes and
    description of the one already there.
    """

    model_config = ConfigDict(extra="forbid")

    project_id: uuid.UUID
    date: dt.date
    minutes: int = Field(ge=1, le=MAX_MINUTES_PER_DAY)
    description: str | None = Field(default=None, max_length=500)


class UpdateTimeEntryRequest(BaseModel):
    """Request body for PATCH /time-entries/{id}."""

    model_config = ConfigDict(extra="forbid")

    date: dt.date | None = None
    minutes: int | None = Field(default=None, ge=1, le=MAX_MINUTES_PER_DAY)
    description: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def check_required_not_null(self) -> "UpdateTimeEntryRequest":
        for name in ("date", "minutes"):
            if name in self.model_fields_set and getattr(self, name) is None:
                msg = f"{name} must not be null"
                raise ValueError(msg)
        return self


class TimeEntryResponse(BaseModel):
    """A time entry with a summary of its project."""

    id: uuid.UUID
    project_id: uuid.UUID
    project_name: str
    project_hourly_rate: int | None
    date: dt.date
    minutes: int
    description: str | None
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_model(cls, entry: TimeEntry) -> "TimeEntryResponse":
        """Build from an entry whose ``project`` is loaded."""
        return cls(
            id=entry.id,
            project_id=entry.project_id,
            project_name=entry.project.name,
            project_hourly_rate=entry.project.hourly_rate,
            date=entry.date,
            minutes=entry.minutes,
            description=entry.description,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )
