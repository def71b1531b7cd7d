from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional, Tuple

from src.shared.exceptions import ValidationError
from src.scheduling.domain.value_objects.slot_key import parse_date, parse_time

DATE_TIME_SEPARATOR = "T"


@dataclass(frozen=True, slots=True)
class RescheduleTarget:
    """
    The (date, time) pair a reschedule request points at.

    Two input shapes are accepted:

    * a combined value such as ``2024-01-11T11:00`` or ``2024-01-11T11:00:00.000Z``;
      the part after ``T`` is cut to ``HH:MM``;
    * a bare value with no separator. That value is used as BOTH the date and
      the time, so it can never name a real slot and the reschedule ends up
      rejected as unavailable. This mirrors long-standing client behaviour and
      is kept on its own path (``from_bare_value``) until product decides
      what a date-only reschedule should mean.
    """
    raw_date: str
    raw_time: str
    from_bare_value: bool = False

    @classmethod
    def parse(cls, new_date_time: str) -> "RescheduleTarget":
        value = (new_date_time or "").strip()
        if not value:
            raise ValidationError("newDateTime is required", details={"field": "newDateTime"})
        if DATE_TIME_SEPARATOR in value:
            date_part, time_part = value.split(DATE_TIME_SEPARATOR, 1)
            return cls(raw_date=date_part, raw_time=time_part[:5])
        return cls.from_bare(value)

    @classmethod
    def from_bare(cls, value: str) -> "RescheduleTarget":
        return cls(raw_date=value, raw_time=value, from_bare_value=True)

    def resolve(self) -> Tuple[Optional[dt.date], Optional[dt.time]]:
        """
        Convert to typed values.

        Combined values must be well formed (ValidationError otherwise).
        For bare values, parts that do not parse resolve to None, which the
        scheduling engine treats as "no matching slot".
        """
        if not self.from_bare_value:
            return parse_date(self.raw_date), parse_time(self.raw_time)
        return _lenient(parse_date, self.raw_date), _lenient(parse_time, self.raw_time)


def _lenient(parser, raw: str):
    try:
        return parser(raw)
    except ValidationError:
        return None
