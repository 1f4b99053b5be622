# planner/core/appointments/schemas.py
"""
Pydantic schemas of appointments.

Used in:
    * planner/api/v1/appointments.py      ― request bodies and responses
    * core.appointments.service           ― candidate definitions and occurrences
    * core.appointments.recurrence        ― occurrence construction
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import RecurrenceInterval

# Numeric codes used by the web client (Daily = 0, Weekly = 1, Monthly = 2)
_INTERVAL_CODES = {0: RecurrenceInterval.DAILY, 1: RecurrenceInterval.WEEKLY, 2: RecurrenceInterval.MONTHLY}


class AppointmentBase(BaseModel):
    """Fields shared by every appointment representation."""

    title: str = Field(..., min_length=1, max_length=200, description="Appointment title")
    description: str | None = Field(None, description="Free-form description")
    location: str | None = Field(None, max_length=255)
    attendees: str | None = Field(None, max_length=500, description="Attendees, free text")
    type: str = Field("other", max_length=50, description="Category (meeting, personal, ...)")
    start_time: datetime = Field(..., description="Start, naive local time")
    end_time: datetime = Field(..., description="End, naive local time")
    is_recurring: bool = False
    recurrence_interval: RecurrenceInterval = RecurrenceInterval.DAILY
    recurrence_end_date: date | None = Field(None, description="Last day (inclusive) of a series")

    @field_validator("recurrence_interval", mode="before")
    @classmethod
    def parse_interval(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("recurrence_interval must be daily, weekly or monthly")
        if isinstance(value, int):
            try:
                return _INTERVAL_CODES[value]
            except KeyError:
                raise ValueError(f"Unknown recurrence interval code: {value}") from None
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("recurrence_end_date", mode="before")
    @classmethod
    def truncate_end_date(cls, value: Any) -> Any:
        # Only the date part of an end bound is meaningful
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and "T" in value:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        return value

    @field_validator("start_time", "end_time")
    @classmethod
    def drop_tz(cls, value: datetime) -> datetime:
        # Local wall-clock time only; an explicit offset is discarded, not converted
        return value.replace(tzinfo=None)


class AppointmentIn(AppointmentBase):
    """Appointment definition sent by the client (no id, no owner)."""


class AppointmentDefinition(AppointmentBase):
    """
    A definition the recurrence and conflict algorithms operate on.
    ``id`` is ``None`` for a candidate that has not been stored yet.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    owner_id: int | None = None


class AppointmentOut(AppointmentBase):
    """A stored definition or one of its occurrences, as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Definition id; shared by all occurrences of a series")
    owner_id: int


Occurrence = AppointmentOut


__all__: list[str] = [
    "AppointmentBase",
    "AppointmentIn",
    "AppointmentDefinition",
    "AppointmentOut",
    "Occurrence",
]
