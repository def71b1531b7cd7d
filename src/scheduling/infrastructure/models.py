# src/scheduling/infrastructure/models.py
"""
Scheduling models.
Contains:
- AppointmentORM (booked visits)
- AvailabilitySlotORM (dated, per-minute doctor slots)
Important:
- At most one non-cancelled appointment per (doctor, date, time), enforced by a
  partial unique index
- A slot carrying an appointment_id is never available
"""
from __future__ import annotations

import datetime as dt
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    Index,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
    text,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.shared.infrastructure.database.base_model import Base

APPOINTMENT_STATUSES = ("scheduled", "confirmed", "cancelled", "completed", "no_show")
_LIVE_APPOINTMENT = text("status != 'cancelled'")


class AppointmentORM(Base):
    """Booked visit of one patient with one doctor."""
    __tablename__ = "appointments"

    patient_id: Mapped[int] = mapped_column(Integer, nullable=False)
    doctor_id: Mapped[int] = mapped_column(Integer, nullable=False)
    appointment_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    appointment_time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="scheduled", server_default="scheduled"
    )
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('scheduled', 'confirmed', 'cancelled', 'completed', 'no_show')",
            name="chk_appointments__status",
        ),
        Index(
            "uq_appointments__live_slot",
            "doctor_id",
            "appointment_date",
            "appointment_time",
            unique=True,
            sqlite_where=_LIVE_APPOINTMENT,
            postgresql_where=_LIVE_APPOINTMENT,
        ),
        Index("ix_appointments__patient", "patient_id"),
        Index("ix_appointments__doctor_date", "doctor_id", "appointment_date"),
    )


class AvailabilitySlotORM(Base):
    """One dated start time a doctor can be booked at."""
    __tablename__ = "availabilities"

    doctor_id: Mapped[int] = mapped_column(Integer, nullable=False)
    slot_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    slot_time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    is_available: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    # weak back-reference, no FK: the slot never owns the appointment
    appointment_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("doctor_id", "slot_date", "slot_time", name="uq_availabilities__doctor_slot"),
        CheckConstraint(
            "appointment_id IS NULL OR NOT is_available",
            name="chk_availabilities__booked_not_available",
        ),
        Index("ix_availabilities__doctor_date", "doctor_id", "slot_date"),
    )


__all__ = ["APPOINTMENT_STATUSES", "AppointmentORM", "AvailabilitySlotORM"]
