import os

# Test environment: in-memory SQLite (aiosqlite), fixed JWT secret
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from datetime import datetime  # noqa: E402

import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from planner.core.appointments.models import RecurrenceInterval  # noqa: E402
from planner.core.appointments.schemas import AppointmentDefinition, AppointmentIn  # noqa: E402
from planner.db.base import async_session_context, create_db_and_tables, drop_db_and_tables  # noqa: E402


@pytest_asyncio.fixture
async def setup_db():
    await create_db_and_tables()
    yield
    await drop_db_and_tables()


@pytest_asyncio.fixture
async def db_session(setup_db) -> AsyncSession:
    async with async_session_context() as session:
        yield session


def make_definition(
    start: datetime,
    end: datetime,
    *,
    id: int | None = None,
    owner_id: int | None = 1,
    recurring: bool = False,
    interval: RecurrenceInterval = RecurrenceInterval.DAILY,
    until=None,
    title: str = "Appointment",
) -> AppointmentDefinition:
    return AppointmentDefinition(
        id=id,
        owner_id=owner_id,
        title=title,
        start_time=start,
        end_time=end,
        is_recurring=recurring,
        recurrence_interval=interval,
        recurrence_end_date=until,
    )


def make_payload(start: datetime, end: datetime, **fields) -> AppointmentIn:
    return AppointmentIn(title=fields.pop("title", "Appointment"), start_time=start, end_time=end, **fields)
