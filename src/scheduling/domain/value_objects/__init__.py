from .slot_key import SlotKey, normalize_time, parse_date, parse_time
from .reschedule_target import RescheduleTarget

__all__ = [
    "SlotKey",
    "RescheduleTarget",
    "normalize_time",
    "parse_date",
    "parse_time",
]
