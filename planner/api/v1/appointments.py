# planner/api/v1/appointments.py

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from planner.core.appointments import (
    AppointmentsService,
    BaseAppointmentStore,
    SqlAppointmentStore,
)
from planner.core.appointments.errors import (
    AppointmentConflictError,
    AppointmentNotFoundError,
    InvalidIntervalError,
)
from planner.core.appointments.schemas import AppointmentIn, AppointmentOut
from planner.core.auth.security import get_current_user_id
from planner.db.base import get_async_db_session

router = APIRouter(
    prefix="/v1/appointments",
    tags=["Appointments"],
    dependencies=[Depends(get_current_user_id)],
)
log = logging.getLogger(__name__)


# --- Dependencies ---

def get_appointment_store(db: AsyncSession = Depends(get_async_db_session)) -> BaseAppointmentStore:
    return SqlAppointmentStore(db)


def get_appointments_service(
    store: BaseAppointmentStore = Depends(get_appointment_store),
) -> AppointmentsService:
    return AppointmentsService(store)


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, AppointmentNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, AppointmentConflictError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error": str(exc),
                "conflict_date": exc.conflict.occurrence_start.date().isoformat(),
                "conflicting_appointment_id": exc.conflict.existing_id,
            },
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"error": str(exc)})


def _internal_error(action: str, owner_id: int) -> HTTPException:
    log.exception("API: error %s for owner %s", action, owner_id)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Could not complete the request ({action}).",
    )


# --- Read endpoints ---

@router.get(
    "",
    response_model=List[AppointmentOut],
    summary="List occurrences in a window",
    description=(
        "Expands every appointment of the current user into the occurrences "
        "starting within [start, end] and returns them sorted by start time. "
        "Without bounds the window spans one month back to three months ahead."
    ),
)
async def list_appointments(
    start: datetime | None = Query(None, description="Window start (naive local time)"),
    end: datetime | None = Query(None, description="Window end, inclusive"),
    owner_id: int = Depends(get_current_user_id),
    service: AppointmentsService = Depends(get_appointments_service),
) -> List[AppointmentOut]:
    log.info("API: owner %s listing appointments in [%s, %s]", owner_id, start, end)
    try:
        return await service.list_occurrences(
            owner_id,
            start.replace(tzinfo=None) if start else None,
            end.replace(tzinfo=None) if end else None,
        )
    except InvalidIntervalError as e:
        raise _http_error(e) from e
    except Exception as e:
        raise _internal_error("listing appointments", owner_id) from e


@router.get("/day", response_model=List[AppointmentOut], summary="Occurrences of one day")
async def list_appointments_for_day(
    day: date = Query(..., alias="date"),
    owner_id: int = Depends(get_current_user_id),
    service: AppointmentsService = Depends(get_appointments_service),
) -> List[AppointmentOut]:
    try:
        return await service.list_for_day(owner_id, day)
    except Exception as e:
        raise _internal_error("listing one day", owner_id) from e


@router.get("/series", response_model=List[AppointmentOut], summary="Stored appointment definitions")
async def list_series(
    owner_id: int = Depends(get_current_user_id),
    service: AppointmentsService = Depends(get_appointments_service),
) -> List[AppointmentOut]:
    try:
        definitions = await service.list_definitions(owner_id)
        return [AppointmentOut.model_validate(d) for d in definitions]
    except Exception as e:
        raise _internal_error("listing series", owner_id) from e


@router.get("/{appointment_id}", response_model=AppointmentOut, summary="One appointment definition")
async def get_appointment(
    appointment_id: int,
    owner_id: int = Depends(get_current_user_id),
    service: AppointmentsService = Depends(get_appointments_service),
) -> AppointmentOut:
    try:
        definition = await service.get_definition(owner_id, appointment_id)
        return AppointmentOut.model_validate(definition)
    except AppointmentNotFoundError as e:
        raise _http_error(e) from e
    except Exception as e:
        raise _internal_error("reading an appointment", owner_id) from e


# --- Write endpoints ---

@router.post(
    "",
    response_model=AppointmentOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create an appointment or a recurring series",
)
async def create_appointment(
    payload: AppointmentIn = Body(...),
    owner_id: int = Depends(get_current_user_id),
    service: AppointmentsService = Depends(get_appointments_service),
) -> AppointmentOut:
    log.info("API: owner %s creating '%.50s' at %s", owner_id, payload.title, payload.start_time)
    try:
        return await service.create(owner_id, payload)
    except (InvalidIntervalError, AppointmentConflictError) as e:
        raise _http_error(e) from e
    except Exception as e:
        raise _internal_error("creating an appointment", owner_id) from e


@router.put("/{appointment_id}", response_model=AppointmentOut, summary="Update an appointment")
async def update_appointment(
    appointment_id: int,
    payload: AppointmentIn = Body(...),
    update_all_future_events: bool = Query(True),
    owner_id: int = Depends(get_current_user_id),
    service: AppointmentsService = Depends(get_appointments_service),
) -> AppointmentOut:
    log.info("API: owner %s updating appointment id=%d", owner_id, appointment_id)
    try:
        return await service.update(owner_id, appointment_id, payload, update_all_future_events)
    except (AppointmentNotFoundError, InvalidIntervalError, AppointmentConflictError) as e:
        raise _http_error(e) from e
    except Exception as e:
        raise _internal_error("updating an appointment", owner_id) from e


@router.delete(
    "/{appointment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete an appointment (whole series)",
)
async def delete_appointment(
    appointment_id: int,
    delete_all_future: bool = Query(True),
    owner_id: int = Depends(get_current_user_id),
    service: AppointmentsService = Depends(get_appointments_service),
) -> Response:
    log.info("API: owner %s deleting appointment id=%d", owner_id, appointment_id)
    try:
        await service.delete(owner_id, appointment_id, delete_all_future)
    except AppointmentNotFoundError as e:
        raise _http_error(e) from e
    except Exception as e:
        raise _internal_error("deleting an appointment", owner_id) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
