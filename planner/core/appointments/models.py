# planner/core/appointments/models.py

from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from planner.db.base import Base


class RecurrenceInterval(str, enum.Enum):
    """Fixed recurrence step of a series."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


# Category ids understood by the web client; the backend stores any string.
APPOINTMENT_TYPES: tuple[str, ...] = (
    "meeting", "personal", "reminder", "deadline", "travel", "health", "social", "other",
)


class Appointment(Base):
    """
    ORM model of an appointment definition.

    A recurring series is a single row; its occurrences are derived on demand
    and are never stored.
    """
    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(
        "user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    attendees: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    type: Mapped[str] = mapped_column(String(50), default="other", nullable=False)

    # Naive local time, no offset
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    is_recurring: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    recurrence_interval: Mapped[RecurrenceInterval] = mapped_column(
        Enum(
            RecurrenceInterval,
            native_enum=False,
            length=16,
            values_callable=lambda members: [m.value for m in members],
        ),
        default=RecurrenceInterval.DAILY,
        nullable=False,
    )
    recurrence_end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_appointments_user_id_start_time", "user_id", "start_time"),
    )

    def __repr__(self) -> str:  # pragma: no cover
        start_str = self.start_time.strftime("%Y-%m-%dT%H:%M:%S")
        return (
            f"<Appointment id={self.id} owner={self.owner_id} start='{start_str}' "
            f"recurring={self.is_recurring}>"
        )
