from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from src.scheduling.domain.entities.appointment import AppointmentStatus
from src.scheduling.domain.value_objects.slot_key import normalize_time


class _CamelModel(BaseModel):
    """Wire names are camelCase; Python names stay snake_case."""
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class _CamelResponse(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _hhmm(value: Optional[dt.time]) -> Optional[str]:
    return value.strftime("%H:%M") if value is not None else None


# ---------- Appointments ----------

class AppointmentCreateRequest(_CamelModel):
    patient_id: Optional[int] = Field(default=None, ge=1)  # implied for patients
    doctor_id: int = Field(ge=1)
    appointment_date: dt.date
    appointment_time: dt.time
    reason: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("appointment_time")
    @classmethod
    def _minute_precision(cls, v: dt.time) -> dt.time:
        return normalize_time(v)


class AppointmentUpdateRequest(_CamelModel):
    appointment_date: Optional[dt.date] = None
    appointment_time: Optional[dt.time] = None
    status: Optional[AppointmentStatus] = None
    reason: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("appointment_time")
    @classmethod
    def _minute_precision(cls, v: Optional[dt.time]) -> Optional[dt.time]:
        return normalize_time(v) if v is not None else None


class RescheduleRequest(_CamelModel):
    new_date_time: str = Field(min_length=1, max_length=64)
    reason: Optional[str] = Field(default=None, max_length=1000)


class CancelRequest(_CamelModel):
    reason: Optional[str] = Field(default=None, max_length=1000)


class AppointmentResponse(_CamelResponse):
    id: int
    patient_id: int
    doctor_id: int
    appointment_date: dt.date
    appointment_time: dt.time
    status: AppointmentStatus
    reason: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime

    @field_serializer("appointment_time")
    def _ser_time(self, v: dt.time) -> str:
        return _hhmm(v)


# ---------- Availability ----------

class SlotCreateItem(_CamelModel):
    slot_date: dt.date = Field(alias="date")
    slot_time: dt.time = Field(alias="time")
    is_available: bool = True

    @field_validator("slot_time")
    @classmethod
    def _minute_precision(cls, v: dt.time) -> dt.time:
        return normalize_time(v)


class SlotUpdateRequest(_CamelModel):
    slot_date: Optional[dt.date] = Field(default=None, alias="date")
    slot_time: Optional[dt.time] = Field(default=None, alias="time")
    is_available: Optional[bool] = None

    @field_validator("slot_time")
    @classmethod
    def _minute_precision(cls, v: Optional[dt.time]) -> Optional[dt.time]:
        return normalize_time(v) if v is not None else None


class SlotResponse(_CamelResponse):
    id: int
    doctor_id: int
    slot_date: dt.date = Field(alias="date")
    slot_time: dt.time = Field(alias="time")
    is_available: bool
    appointment_id: Optional[int] = None
    created_at: dt.datetime
    updated_at: dt.datetime

    @field_serializer("slot_time")
    def _ser_time(self, v: dt.time) -> str:
        return _hhmm(v)
