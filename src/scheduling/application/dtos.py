from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional

from src.scheduling.domain.entities.appointment import AppointmentDraft
from src.scheduling.domain.value_objects.slot_key import SlotKey, normalize_time


@dataclass(frozen=True, slots=True)
class CreateAppointmentCommand:
    patient_id: int
    doctor_id: int
    appointment_date: dt.date
    appointment_time: dt.time
    reason: Optional[str] = None

    @property
    def slot_key(self) -> SlotKey:
        return SlotKey(self.doctor_id, self.appointment_date, normalize_time(self.appointment_time))

    def to_draft(self) -> AppointmentDraft:
        key = self.slot_key
        return AppointmentDraft(
            patient_id=self.patient_id,
            doctor_id=self.doctor_id,
            appointment_date=key.slot_date,
            appointment_time=key.slot_time,
            reason=self.reason,
        )
