from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Dict, Optional

from src.scheduling.domain.value_objects.slot_key import SlotKey


@dataclass(frozen=True, slots=True)
class AvailabilitySlot:
    """
    Domain entity for one bookable minute of a doctor's day. Mirrors `availabilities`.

    appointment_id is a weak back-reference to the appointment holding the slot;
    whenever it is set, is_available is False.
    """
    id: int
    doctor_id: int
    slot_date: dt.date
    slot_time: dt.time
    is_available: bool
    appointment_id: Optional[int]
    created_at: dt.datetime
    updated_at: dt.datetime

    @property
    def key(self) -> SlotKey:
        return SlotKey(self.doctor_id, self.slot_date, self.slot_time)

    def is_bookable(self) -> bool:
        return self.is_available and self.appointment_id is None

    def is_booked(self) -> bool:
        return self.appointment_id is not None


@dataclass(frozen=True, slots=True)
class SlotDraft:
    slot_date: dt.date
    slot_time: dt.time
    is_available: bool = True


@dataclass(frozen=True, slots=True)
class SlotPatch:
    slot_date: Optional[dt.date] = None
    slot_time: Optional[dt.time] = None
    is_available: Optional[bool] = None

    def values(self) -> Dict[str, Any]:
        return {k: v for k, v in (
            ("slot_date", self.slot_date),
            ("slot_time", self.slot_time),
            ("is_available", self.is_available),
        ) if v is not None}

    def moves_slot(self) -> bool:
        return self.slot_date is not None or self.slot_time is not None
