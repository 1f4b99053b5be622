# tests/test_appointments_service.py
from datetime import date, datetime

import pytest

from planner.core.appointments import AppointmentsService, InMemoryAppointmentStore
from planner.core.appointments.errors import (
    AppointmentConflictError,
    AppointmentNotFoundError,
    InvalidIntervalError,
)
from planner.core.appointments.models import RecurrenceInterval

from .conftest import make_payload

OWNER = 1
OTHER = 2


class CountingStore(InMemoryAppointmentStore):
    """In-memory store that records how often it was read."""

    def __init__(self) -> None:
        super().__init__()
        self.reads = 0

    async def list_by_owner(self, owner_id):
        self.reads += 1
        return await super().list_by_owner(owner_id)


@pytest.fixture
def store():
    return CountingStore()


@pytest.fixture
def service(store):
    return AppointmentsService(store)


@pytest.mark.asyncio
async def test_read_path_expands_weekly_series(service):
    await service.create(OWNER, make_payload(datetime(2023, 10, 16, 14, 0), datetime(2023, 10, 16, 15, 0), title="Dentist"))
    await service.create(
        OWNER,
        make_payload(
            datetime(2023, 10, 1, 9, 0),
            datetime(2023, 10, 1, 10, 0),
            title="Weekly sync",
            is_recurring=True,
            recurrence_interval=RecurrenceInterval.WEEKLY,
        ),
    )

    occurrences = await service.list_occurrences(OWNER, datetime(2023, 10, 1), datetime(2023, 10, 31))

    assert [o.start_time for o in occurrences] == [
        datetime(2023, 10, 1, 9, 0),
        datetime(2023, 10, 8, 9, 0),
        datetime(2023, 10, 15, 9, 0),
        datetime(2023, 10, 16, 14, 0),
        datetime(2023, 10, 22, 9, 0),
        datetime(2023, 10, 29, 9, 0),
    ]
    assert sum(o.title == "Weekly sync" for o in occurrences) == 5
    # Every occurrence of the series carries the definition id
    assert len({o.id for o in occurrences if o.title == "Weekly sync"}) == 1


@pytest.mark.asyncio
async def test_read_path_is_scoped_to_owner(service):
    await service.create(OTHER, make_payload(datetime(2023, 10, 2, 9, 0), datetime(2023, 10, 2, 10, 0)))
    assert await service.list_occurrences(OWNER, datetime(2023, 10, 1), datetime(2023, 10, 31)) == []


@pytest.mark.asyncio
async def test_read_window_bounds_are_inclusive(service):
    await service.create(OWNER, make_payload(datetime(2023, 10, 31, 0, 0), datetime(2023, 10, 31, 1, 0)))
    occurrences = await service.list_occurrences(OWNER, datetime(2023, 10, 1), datetime(2023, 10, 31))
    assert len(occurrences) == 1


@pytest.mark.asyncio
async def test_read_window_must_be_ordered(service):
    with pytest.raises(InvalidIntervalError):
        await service.list_occurrences(OWNER, datetime(2023, 10, 31), datetime(2023, 10, 1))


@pytest.mark.asyncio
async def test_list_for_day(service):
    await service.create(
        OWNER,
        make_payload(
            datetime(2023, 10, 1, 9, 0), datetime(2023, 10, 1, 10, 0), is_recurring=True,
            recurrence_end_date=date(2023, 10, 5),
        ),
    )
    day = await service.list_for_day(OWNER, date(2023, 10, 4))
    assert [o.start_time for o in day] == [datetime(2023, 10, 4, 9, 0)]
    assert await service.list_for_day(OWNER, date(2023, 10, 6)) == []


def test_default_window():
    start, end = AppointmentsService.default_window(date(2023, 10, 15))
    assert start == datetime(2023, 9, 15, 0, 0)
    assert end.date() == date(2024, 1, 15)


@pytest.mark.asyncio
async def test_create_rejects_inverted_interval_before_store_access(service, store):
    with pytest.raises(InvalidIntervalError):
        await service.create(OWNER, make_payload(datetime(2023, 10, 15, 11, 0), datetime(2023, 10, 15, 10, 0)))
    assert store.reads == 0


@pytest.mark.asyncio
async def test_create_rejects_zero_length_interval(service):
    with pytest.raises(InvalidIntervalError):
        await service.create(OWNER, make_payload(datetime(2023, 10, 15, 10, 0), datetime(2023, 10, 15, 10, 0)))


@pytest.mark.asyncio
async def test_create_conflict_and_back_to_back(service):
    await service.create(OWNER, make_payload(datetime(2023, 10, 15, 10, 0), datetime(2023, 10, 15, 11, 0)))

    with pytest.raises(AppointmentConflictError) as exc_info:
        await service.create(OWNER, make_payload(datetime(2023, 10, 15, 10, 30), datetime(2023, 10, 15, 11, 30)))
    assert str(exc_info.value) == "This appointment conflicts with an existing appointment"

    created = await service.create(OWNER, make_payload(datetime(2023, 10, 15, 11, 0), datetime(2023, 10, 15, 12, 0)))
    assert created.id == 2
    assert created.owner_id == OWNER


@pytest.mark.asyncio
async def test_recurring_conflict_names_the_date(service):
    await service.create(OWNER, make_payload(datetime(2023, 10, 4, 9, 0), datetime(2023, 10, 4, 10, 0)))
    with pytest.raises(AppointmentConflictError) as exc_info:
        await service.create(
            OWNER,
            make_payload(datetime(2023, 10, 1, 9, 30), datetime(2023, 10, 1, 10, 30), is_recurring=True),
        )
    assert str(exc_info.value).endswith("on 2023-10-04")
    assert exc_info.value.conflict.occurrence_start == datetime(2023, 10, 4, 9, 30)


@pytest.mark.asyncio
async def test_other_owners_do_not_conflict(service):
    await service.create(OTHER, make_payload(datetime(2023, 10, 15, 10, 0), datetime(2023, 10, 15, 11, 0)))
    created = await service.create(OWNER, make_payload(datetime(2023, 10, 15, 10, 0), datetime(2023, 10, 15, 11, 0)))
    assert created.owner_id == OWNER


@pytest.mark.asyncio
async def test_update_ignores_itself(service):
    created = await service.create(OWNER, make_payload(datetime(2023, 10, 15, 10, 0), datetime(2023, 10, 15, 11, 0)))
    updated = await service.update(
        OWNER, created.id,
        make_payload(datetime(2023, 10, 15, 10, 30), datetime(2023, 10, 15, 11, 30), title="Moved"),
    )
    assert updated.id == created.id
    assert updated.title == "Moved"
    assert updated.start_time == datetime(2023, 10, 15, 10, 30)


@pytest.mark.asyncio
async def test_update_conflicting_with_another_appointment(service):
    await service.create(OWNER, make_payload(datetime(2023, 10, 15, 10, 0), datetime(2023, 10, 15, 11, 0)))
    second = await service.create(OWNER, make_payload(datetime(2023, 10, 15, 12, 0), datetime(2023, 10, 15, 13, 0)))
    with pytest.raises(AppointmentConflictError):
        await service.update(OWNER, second.id, make_payload(datetime(2023, 10, 15, 10, 30), datetime(2023, 10, 15, 11, 30)))


@pytest.mark.asyncio
async def test_update_without_series_check(service):
    await service.create(OWNER, make_payload(datetime(2023, 10, 4, 9, 0), datetime(2023, 10, 4, 10, 0)))
    target = await service.create(OWNER, make_payload(datetime(2023, 10, 1, 12, 0), datetime(2023, 10, 1, 13, 0)))
    series = make_payload(datetime(2023, 10, 1, 9, 30), datetime(2023, 10, 1, 10, 30), is_recurring=True)

    with pytest.raises(AppointmentConflictError):
        await service.update(OWNER, target.id, series)

    updated = await service.update(OWNER, target.id, series, update_all_future_events=False)
    assert updated.is_recurring is True


@pytest.mark.asyncio
async def test_update_missing_or_foreign(service):
    created = await service.create(OTHER, make_payload(datetime(2023, 10, 15, 10, 0), datetime(2023, 10, 15, 11, 0)))
    payload = make_payload(datetime(2023, 10, 16, 10, 0), datetime(2023, 10, 16, 11, 0))
    with pytest.raises(AppointmentNotFoundError):
        await service.update(OWNER, created.id, payload)
    with pytest.raises(AppointmentNotFoundError):
        await service.update(OWNER, 999, payload)


@pytest.mark.asyncio
async def test_update_validates_interval(service):
    created = await service.create(OWNER, make_payload(datetime(2023, 10, 15, 10, 0), datetime(2023, 10, 15, 11, 0)))
    with pytest.raises(InvalidIntervalError):
        await service.update(OWNER, created.id, make_payload(datetime(2023, 10, 15, 11, 0), datetime(2023, 10, 15, 10, 0)))


@pytest.mark.asyncio
async def test_delete_removes_whole_series(service):
    created = await service.create(
        OWNER, make_payload(datetime(2023, 10, 1, 9, 0), datetime(2023, 10, 1, 10, 0), is_recurring=True)
    )
    await service.delete(OWNER, created.id, delete_all_future=False)
    assert await service.list_occurrences(OWNER, datetime(2023, 10, 1), datetime(2023, 12, 31)) == []
    assert await service.list_definitions(OWNER) == []


@pytest.mark.asyncio
async def test_delete_missing_or_foreign(service):
    created = await service.create(OTHER, make_payload(datetime(2023, 10, 15, 10, 0), datetime(2023, 10, 15, 11, 0)))
    with pytest.raises(AppointmentNotFoundError):
        await service.delete(OWNER, created.id)
    # Still there for its owner
    assert (await service.get_definition(OTHER, created.id)).id == created.id


@pytest.mark.asyncio
async def test_recurring_candidate_conflicts_with_later_series(service):
    series = await service.create(
        OWNER,
        make_payload(
            datetime(2023, 11, 1, 9, 0), datetime(2023, 11, 1, 10, 0),
            is_recurring=True, recurrence_interval=RecurrenceInterval.DAILY,
        ),
    )
    with pytest.raises(AppointmentConflictError) as exc_info:
        await service.create(
            OWNER,
            make_payload(
                datetime(2023, 10, 1, 9, 30), datetime(2023, 10, 1, 10, 30),
                is_recurring=True, recurrence_interval=RecurrenceInterval.WEEKLY,
            ),
        )
    assert exc_info.value.conflict.occurrence_start == datetime(2023, 11, 5, 9, 30)
    assert exc_info.value.conflict.existing_id == series.id
    assert str(exc_info.value).endswith("on 2023-11-05")
