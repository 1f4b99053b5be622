# planner/core/appointments/store.py
"""
Appointment store: the only shared mutable resource of the planner.

``BaseAppointmentStore`` is the async interface the service depends on.
Every method is scoped to one owner; rows of other owners behave exactly
like missing rows.
"""

from __future__ import annotations

import itertools
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Appointment
from .schemas import AppointmentDefinition, AppointmentIn

log = logging.getLogger(__name__)


class BaseAppointmentStore(ABC):
    """Abstract async appointment store."""

    name: str

    @abstractmethod
    async def list_by_owner(self, owner_id: int) -> Sequence[Any]:
        """Return every definition of ``owner_id``, ordered by start time."""
        ...

    @abstractmethod
    async def get(self, owner_id: int, appointment_id: int) -> Optional[Any]:
        """Return the definition or ``None`` if missing or owned by someone else."""
        ...

    @abstractmethod
    async def insert(self, owner_id: int, data: AppointmentIn) -> Any:
        """Persist a new definition and return it with its id."""
        ...

    @abstractmethod
    async def update(self, owner_id: int, appointment_id: int, data: AppointmentIn) -> Optional[Any]:
        """Overwrite the whole definition; ``None`` if it does not exist."""
        ...

    @abstractmethod
    async def delete(self, owner_id: int, appointment_id: int) -> bool:
        """Delete the whole definition; ``False`` if it does not exist."""
        ...


class SqlAppointmentStore(BaseAppointmentStore):
    """
    Store backed by a request-scoped ``AsyncSession``.
    Writes are flushed; commit/rollback belongs to the session owner.
    """

    name: str = "sql"

    def __init__(self, db_session: AsyncSession) -> None:
        self.db: AsyncSession = db_session

    async def list_by_owner(self, owner_id: int) -> Sequence[Appointment]:
        stmt = (
            select(Appointment)
            .where(Appointment.owner_id == owner_id)
            .order_by(Appointment.start_time, Appointment.id)
        )
        result = await self.db.scalars(stmt)
        return result.all()

    async def get(self, owner_id: int, appointment_id: int) -> Optional[Appointment]:
        stmt = select(Appointment).where(
            Appointment.id == appointment_id,
            Appointment.owner_id == owner_id,
        )
        return (await self.db.scalars(stmt)).first()

    async def insert(self, owner_id: int, data: AppointmentIn) -> Appointment:
        row = Appointment(owner_id=owner_id, **data.model_dump())
        self.db.add(row)
        await self.db.flush()
        await self.db.refresh(row)
        log.debug("Inserted appointment id=%d for owner %s", row.id, owner_id)
        return row

    async def update(self, owner_id: int, appointment_id: int, data: AppointmentIn) -> Optional[Appointment]:
        row = await self.get(owner_id, appointment_id)
        if row is None:
            return None
        for field, value in data.model_dump().items():
            setattr(row, field, value)
        await self.db.flush()
        await self.db.refresh(row)
        log.debug("Updated appointment id=%d for owner %s", appointment_id, owner_id)
        return row

    async def delete(self, owner_id: int, appointment_id: int) -> bool:
        row = await self.get(owner_id, appointment_id)
        if row is None:
            return False
        await self.db.delete(row)
        await self.db.flush()
        log.debug("Deleted appointment id=%d for owner %s", appointment_id, owner_id)
        return True


class InMemoryAppointmentStore(BaseAppointmentStore):
    """Process-local store; keeps definitions in a dict (tests, local tooling)."""

    name: str = "memory"

    def __init__(self) -> None:
        self._rows: Dict[int, AppointmentDefinition] = {}
        self._ids = itertools.count(1)

    async def list_by_owner(self, owner_id: int) -> List[AppointmentDefinition]:
        rows = [row for row in self._rows.values() if row.owner_id == owner_id]
        return sorted(rows, key=lambda row: (row.start_time, row.id))

    async def get(self, owner_id: int, appointment_id: int) -> Optional[AppointmentDefinition]:
        row = self._rows.get(appointment_id)
        if row is None or row.owner_id != owner_id:
            return None
        return row

    async def insert(self, owner_id: int, data: AppointmentIn) -> AppointmentDefinition:
        row = AppointmentDefinition(id=next(self._ids), owner_id=owner_id, **data.model_dump())
        self._rows[row.id] = row
        return row

    async def update(self, owner_id: int, appointment_id: int, data: AppointmentIn) -> Optional[AppointmentDefinition]:
        if await self.get(owner_id, appointment_id) is None:
            return None
        row = AppointmentDefinition(id=appointment_id, owner_id=owner_id, **data.model_dump())
        self._rows[appointment_id] = row
        return row

    async def delete(self, owner_id: int, appointment_id: int) -> bool:
        if await self.get(owner_id, appointment_id) is None:
            return False
        del self._rows[appointment_id]
        return True


__all__ = ["BaseAppointmentStore", "SqlAppointmentStore", "InMemoryAppointmentStore"]
