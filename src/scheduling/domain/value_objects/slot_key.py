from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from typing import Union

from src.shared.exceptions import ValidationError

_TIME_RE = re.compile(r"^\d{2}:\d{2}(:\d{2}(\.\d{1,6})?)?$")


def normalize_time(value: dt.time) -> dt.time:
    """Slots and appointments are kept at minute granularity."""
    return value.replace(second=0, microsecond=0, tzinfo=None)


def parse_date(value: Union[str, dt.date]) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    try:
        return dt.date.fromisoformat(str(value).strip())
    except ValueError as e:
        raise ValidationError(
            f"Invalid date {value!r}, expected YYYY-MM-DD",
            details={"field": "date", "value": str(value)},
        ) from e


def parse_time(value: Union[str, dt.time]) -> dt.time:
    """Accepts ``HH:MM`` or ``HH:MM:SS``; seconds are dropped."""
    if isinstance(value, dt.time):
        return normalize_time(value)
    raw = str(value).strip()
    try:
        if not _TIME_RE.match(raw):
            raise ValueError(raw)
        return normalize_time(dt.time.fromisoformat(raw))
    except ValueError as e:
        raise ValidationError(
            f"Invalid time {value!r}, expected HH:MM",
            details={"field": "time", "value": raw},
        ) from e


@dataclass(frozen=True, slots=True, order=True)
class SlotKey:
    """Identity of a bookable unit: one doctor, one calendar day, one start minute."""
    doctor_id: int
    slot_date: dt.date
    slot_time: dt.time

    @classmethod
    def of(cls, doctor_id: int, slot_date: Union[str, dt.date], slot_time: Union[str, dt.time]) -> "SlotKey":
        return cls(doctor_id=doctor_id, slot_date=parse_date(slot_date), slot_time=parse_time(slot_time))

    def __str__(self) -> str:
        return f"doctor={self.doctor_id} {self.slot_date.isoformat()} {self.slot_time.strftime('%H:%M')}"
