# planner/core/appointments/__init__.py

"""
Appointments package.

Re-exports the service and the store implementations so callers can write
`from planner.core.appointments import AppointmentsService`.
"""

from .service import AppointmentsService  # noqa: F401
from .store import BaseAppointmentStore, InMemoryAppointmentStore, SqlAppointmentStore  # noqa: F401

__all__: list[str] = [
    "AppointmentsService",
    "BaseAppointmentStore",
    "InMemoryAppointmentStore",
    "SqlAppointmentStore",
]
