# planner/core/appointments/conflicts.py
"""
Detection of overlaps between a candidate appointment and the owner's
existing, possibly recurring, appointments.

Intervals are half-open: ``[start, end)``. Back-to-back appointments
(one ends exactly when the other starts) do not conflict.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .recurrence import default_horizon, expand_occurrences


class Conflict(BaseModel):
    """First collision found: which candidate occurrence hit which definition."""

    model_config = ConfigDict(frozen=True)

    occurrence_start: datetime
    occurrence_end: datetime
    existing_id: Optional[int]


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """True if ``[start_a, end_a)`` overlaps ``[start_b, end_b)``."""
    return start_a < end_b and start_b < end_a


def candidate_occurrences(candidate: Any, check_series: bool | None = None) -> List[Tuple[datetime, datetime]]:
    """
    Intervals of ``candidate`` that must be free.

    A recurring candidate is expanded over its default horizon unless
    ``check_series`` is ``False``, in which case only the base interval counts.
    """
    if candidate.is_recurring and check_series is not False:
        return expand_occurrences(candidate, default_horizon(candidate.start_time))
    return [(candidate.start_time, candidate.end_time)]


def _same_owner(candidate: Any, existing: Any) -> bool:
    candidate_owner = getattr(candidate, "owner_id", None)
    existing_owner = getattr(existing, "owner_id", None)
    return candidate_owner is None or existing_owner is None or candidate_owner == existing_owner


def find_conflict(
    candidate: Any,
    existing: Iterable[Any],
    exclude_id: Optional[int] = None,
    *,
    check_series: bool | None = None,
) -> Optional[Conflict]:
    """
    Return the first collision between ``candidate`` and ``existing``, or ``None``.

    Args:
        candidate: Definition being created or updated.
        existing: The owner's stored definitions. Recurring ones are expanded
            far enough to cover every candidate occurrence.
        exclude_id: Id skipped in ``existing`` (the definition being updated).
        check_series: ``False`` checks only the candidate's base interval.

    Returns:
        Conflict | None: The first colliding candidate occurrence, in
        chronological order of the candidate's occurrences.
    """
    intervals = candidate_occurrences(candidate, check_series)
    horizon = max(end for _, end in intervals)

    busy: List[Tuple[datetime, datetime, Optional[int]]] = []
    for definition in existing:
        if exclude_id is not None and definition.id == exclude_id:
            continue
        if not _same_owner(candidate, definition):
            continue
        busy.extend(
            (start, end, definition.id) for start, end in expand_occurrences(definition, horizon)
        )

    for occ_start, occ_end in intervals:
        for busy_start, busy_end, busy_id in busy:
            if overlaps(occ_start, occ_end, busy_start, busy_end):
                return Conflict(occurrence_start=occ_start, occurrence_end=occ_end, existing_id=busy_id)
    return None


def has_conflict(
    candidate: Any,
    existing: Iterable[Any],
    exclude_id: Optional[int] = None,
    *,
    check_series: bool | None = None,
) -> bool:
    return find_conflict(candidate, existing, exclude_id, check_series=check_series) is not None


__all__ = [
    "Conflict",
    "overlaps",
    "candidate_occurrences",
    "find_conflict",
    "has_conflict",
]
