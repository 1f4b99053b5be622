# planner/core/appointments/service.py

"""Service layer for appointments: read path and write paths."""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, List, Sequence, Tuple

from dateutil.relativedelta import relativedelta

from planner.config import settings

from .conflicts import find_conflict
from .errors import AppointmentConflictError, AppointmentNotFoundError, InvalidIntervalError
from .recurrence import expand, make_occurrence
from .schemas import AppointmentDefinition, AppointmentIn, AppointmentOut
from .store import BaseAppointmentStore

log = logging.getLogger(__name__)


class AppointmentsService:
    """
    Async service orchestrating recurrence expansion, conflict detection
    and the appointment store for one request.
    """

    def __init__(self, store: BaseAppointmentStore) -> None:
        """
        Args:
            store (BaseAppointmentStore): Request-scoped appointment store.
        """
        self.store = store

    # ------------------------------------------------------------------ #
    #                             Read path                              #
    # ------------------------------------------------------------------ #

    @staticmethod
    def default_window(today: date | None = None) -> Tuple[datetime, datetime]:
        today = today or date.today()
        start = datetime.combine(today - relativedelta(months=settings.LIST_WINDOW_PAST_MONTHS), time.min)
        end = datetime.combine(today + relativedelta(months=settings.LIST_WINDOW_FUTURE_MONTHS), time.max)
        return start, end

    async def list_occurrences(
        self,
        owner_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> List[AppointmentOut]:
        """
        Returns every occurrence of the owner's appointments that starts
        within ``[start, end]`` (both bounds inclusive), sorted by start time.

        Args:
            owner_id (int): Calendar owner.
            start (datetime | None): Window start; defaults to one month back.
            end (datetime | None): Window end; defaults to three months ahead.

        Raises:
            InvalidIntervalError: if ``start`` is after ``end``.
        """
        if start is None or end is None:
            default_start, default_end = self.default_window()
            start = start or default_start
            end = end or default_end
        if start > end:
            raise InvalidIntervalError("Window start must not be after window end")

        definitions = await self.store.list_by_owner(owner_id)
        occurrences: List[AppointmentOut] = []
        for definition in definitions:
            for occ_start in expand(definition, end):
                if start <= occ_start <= end:
                    occurrences.append(make_occurrence(definition, occ_start))

        occurrences.sort(key=lambda occ: occ.start_time)
        log.debug(
            "Owner %s: %d definitions expanded to %d occurrences in [%s, %s]",
            owner_id, len(definitions), len(occurrences), start, end,
        )
        return occurrences

    async def list_for_day(self, owner_id: int, day: date) -> List[AppointmentOut]:
        """Occurrences starting on ``day``."""
        return await self.list_occurrences(
            owner_id, datetime.combine(day, time.min), datetime.combine(day, time.max)
        )

    async def list_definitions(self, owner_id: int) -> Sequence[Any]:
        return await self.store.list_by_owner(owner_id)

    async def get_definition(self, owner_id: int, appointment_id: int) -> Any:
        definition = await self.store.get(owner_id, appointment_id)
        if definition is None:
            log.info("Appointment id=%d not found for owner %s", appointment_id, owner_id)
            raise AppointmentNotFoundError(appointment_id)
        return definition

    # ------------------------------------------------------------------ #
    #                             Write path                             #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validate(data: AppointmentIn) -> None:
        if data.start_time >= data.end_time:
            raise InvalidIntervalError()

    async def _ensure_free(
        self,
        owner_id: int,
        data: AppointmentIn,
        exclude_id: int | None = None,
        check_series: bool = True,
    ) -> None:
        candidate = AppointmentDefinition(id=exclude_id, owner_id=owner_id, **data.model_dump())
        existing = await self.store.list_by_owner(owner_id)
        conflict = find_conflict(candidate, existing, exclude_id, check_series=check_series)
        if conflict is not None:
            recurring = candidate.is_recurring and check_series
            log.info(
                "Owner %s: candidate %s..%s collides with appointment id=%s",
                owner_id, conflict.occurrence_start, conflict.occurrence_end, conflict.existing_id,
            )
            raise AppointmentConflictError(conflict, recurring=recurring)

    async def create(self, owner_id: int, data: AppointmentIn) -> AppointmentOut:
        """
        Validates and stores a new definition.

        Raises:
            InvalidIntervalError: start is not before end.
            AppointmentConflictError: an occurrence overlaps an existing appointment.
        """
        self._validate(data)
        await self._ensure_free(owner_id, data)
        row = await self.store.insert(owner_id, data)
        log.info(
            "Created appointment id=%s for owner %s (recurring=%s)", row.id, owner_id, row.is_recurring
        )
        return make_occurrence(row, row.start_time)

    async def update(
        self,
        owner_id: int,
        appointment_id: int,
        data: AppointmentIn,
        update_all_future_events: bool = True,
    ) -> AppointmentOut:
        """
        Overwrites a stored definition.

        The conflict check ignores the definition itself. With
        ``update_all_future_events`` the whole new series is checked,
        otherwise only the base interval.

        Raises:
            AppointmentNotFoundError, InvalidIntervalError, AppointmentConflictError
        """
        await self.get_definition(owner_id, appointment_id)
        self._validate(data)
        await self._ensure_free(
            owner_id, data, exclude_id=appointment_id, check_series=update_all_future_events
        )
        row = await self.store.update(owner_id, appointment_id, data)
        if row is None:
            raise AppointmentNotFoundError(appointment_id)
        log.info(
            "Updated appointment id=%d for owner %s (all future events=%s)",
            appointment_id, owner_id, update_all_future_events,
        )
        return make_occurrence(row, row.start_time)

    async def delete(self, owner_id: int, appointment_id: int, delete_all_future: bool = True) -> None:
        """
        Deletes a definition. A recurring series is always removed as a whole;
        ``delete_all_future`` is accepted for client compatibility only.

        Raises:
            AppointmentNotFoundError
        """
        removed = await self.store.delete(owner_id, appointment_id)
        if not removed:
            log.info("Appointment id=%d not found for deletion (owner %s)", appointment_id, owner_id)
            raise AppointmentNotFoundError(appointment_id)
        log.info(
            "Deleted appointment id=%d for owner %s (delete_all_future=%s)",
            appointment_id, owner_id, delete_all_future,
        )


__all__ = ["AppointmentsService"]
