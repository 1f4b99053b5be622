# planner/core/appointments/errors.py

from __future__ import annotations

from .conflicts import Conflict


class AppointmentError(Exception):
    """Base class of appointment write/read errors surfaced to the client."""


class InvalidIntervalError(AppointmentError):
    def __init__(self, message: str = "End time must be after start time") -> None:
        super().__init__(message)


class AppointmentNotFoundError(AppointmentError):
    def __init__(self, appointment_id: int) -> None:
        self.appointment_id = appointment_id
        super().__init__("Appointment not found or you don't have permission to access it")


class AppointmentConflictError(AppointmentError):
    def __init__(self, conflict: Conflict, recurring: bool = False) -> None:
        self.conflict = conflict
        message = "This appointment conflicts with an existing appointment"
        if recurring:
            message += f" on {conflict.occurrence_start.date().isoformat()}"
        super().__init__(message)


__all__ = [
    "AppointmentError",
    "InvalidIntervalError",
    "AppointmentNotFoundError",
    "AppointmentConflictError",
]
