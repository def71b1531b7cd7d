from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from src.scheduling.domain.value_objects.slot_key import SlotKey


class AppointmentStatus(str, Enum):
    """Mirrors the `appointments.status` check constraint."""
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self]

    def can_transition_to(self, target: "AppointmentStatus") -> bool:
        return target == self or target in _TRANSITIONS[self]


_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset(
        {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW}
    ),
    AppointmentStatus.CONFIRMED: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
}

# states in which an appointment still occupies its slot and may be moved
ACTIVE_STATUSES = frozenset({AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED})


@dataclass(frozen=True, slots=True)
class Appointment:
    """
    Domain entity for a booked visit. Mirrors `appointments`.
    patient_id / doctor_id never change after creation.
    """
    id: int
    patient_id: int
    doctor_id: int
    appointment_date: dt.date
    appointment_time: dt.time
    status: AppointmentStatus
    reason: Optional[str]
    created_at: dt.datetime
    updated_at: dt.datetime

    @property
    def slot_key(self) -> SlotKey:
        return SlotKey(self.doctor_id, self.appointment_date, self.appointment_time)

    def is_cancelled(self) -> bool:
        return self.status is AppointmentStatus.CANCELLED

    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


@dataclass(frozen=True, slots=True)
class AppointmentDraft:
    """Values for a new appointment row."""
    patient_id: int
    doctor_id: int
    appointment_date: dt.date
    appointment_time: dt.time
    reason: Optional[str] = None
    status: AppointmentStatus = AppointmentStatus.SCHEDULED

    @property
    def slot_key(self) -> SlotKey:
        return SlotKey(self.doctor_id, self.appointment_date, self.appointment_time)


@dataclass(frozen=True, slots=True)
class AppointmentPatch:
    """
    Partial update. Only fields that are not None are written;
    an empty patch leaves the row untouched.
    """
    appointment_date: Optional[dt.date] = None
    appointment_time: Optional[dt.time] = None
    status: Optional[AppointmentStatus] = None
    reason: Optional[str] = None

    def values(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.appointment_date is not None:
            out["appointment_date"] = self.appointment_date
        if self.appointment_time is not None:
            out["appointment_time"] = self.appointment_time
        if self.status is not None:
            out["status"] = self.status.value
        if self.reason is not None:
            out["reason"] = self.reason
        return out

    def is_empty(self) -> bool:
        return not self.values()

    def touches_schedule(self) -> bool:
        return self.appointment_date is not None or self.appointment_time is not None
