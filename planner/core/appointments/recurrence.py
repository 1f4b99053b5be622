# planner/core/appointments/recurrence.py
"""
Expansion of appointment definitions into concrete occurrences.

A definition is any object exposing ``start_time``, ``end_time``,
``is_recurring``, ``recurrence_interval`` and ``recurrence_end_date``
(the ``Appointment`` ORM row and the ``AppointmentDefinition`` schema both do).

Expansion is always bounded by a caller-supplied horizon. The stop test
compares dates only, so an end bound of 2023-10-03 keeps every occurrence
starting on that day whatever its time of day.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, List, Tuple

from dateutil.relativedelta import relativedelta

from planner.config import settings

from .models import RecurrenceInterval
from .schemas import AppointmentOut

_FIXED_STEPS = {
    RecurrenceInterval.DAILY: timedelta(days=1),
    RecurrenceInterval.WEEKLY: timedelta(days=7),
}


def step(moment: datetime, interval: RecurrenceInterval) -> datetime:
    """
    Advance ``moment`` by one recurrence step.

    Monthly steps keep the day of month and clamp it to the last day of
    shorter months (Jan 31 -> Feb 28).
    """
    if interval is RecurrenceInterval.MONTHLY:
        return moment + relativedelta(months=1)
    try:
        return moment + _FIXED_STEPS[interval]
    except KeyError:
        raise ValueError(f"Unsupported recurrence interval: {interval!r}") from None


def default_horizon(start_time: datetime) -> datetime:
    """Fallback expansion bound for a series without an explicit window."""
    return start_time + relativedelta(months=settings.RECURRENCE_HORIZON_MONTHS)


def effective_end_date(definition: Any, horizon: datetime) -> date:
    end_date = definition.recurrence_end_date
    if end_date is not None and end_date < horizon.date():
        return end_date
    return horizon.date()


def expand(definition: Any, horizon: datetime) -> List[datetime]:
    """
    Return the ordered start times of all occurrences of ``definition``
    up to ``horizon`` (date-inclusive).

    The definition's own start is always the first element, even when it
    lies after the horizon. A non-recurring definition yields only that start.
    """
    if not definition.is_recurring:
        return [definition.start_time]

    last_day = effective_end_date(definition, horizon)
    interval = RecurrenceInterval(definition.recurrence_interval)

    starts = [definition.start_time]
    current = definition.start_time
    while True:
        current = step(current, interval)
        if current.date() > last_day:
            break
        starts.append(current)
    return starts


def expand_occurrences(definition: Any, horizon: datetime) -> List[Tuple[datetime, datetime]]:
    """Like :func:`expand` but yields ``(start, end)`` pairs with the definition's duration."""
    duration = definition.end_time - definition.start_time
    return [(start, start + duration) for start in expand(definition, horizon)]


def make_occurrence(definition: Any, start: datetime) -> AppointmentOut:
    """Build the occurrence of ``definition`` that starts at ``start``."""
    duration = definition.end_time - definition.start_time
    occurrence = AppointmentOut.model_validate(definition, from_attributes=True)
    return occurrence.model_copy(update={"start_time": start, "end_time": start + duration})


__all__ = [
    "step",
    "default_horizon",
    "effective_end_date",
    "expand",
    "expand_occurrences",
    "make_occurrence",
]
