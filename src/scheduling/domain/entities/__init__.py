from .appointment import (
    ACTIVE_STATUSES,
    Appointment,
    AppointmentDraft,
    AppointmentPatch,
    AppointmentStatus,
)
from .availability_slot import AvailabilitySlot, SlotDraft, SlotPatch

__all__ = [
    "ACTIVE_STATUSES",
    "Appointment",
    "AppointmentDraft",
    "AppointmentPatch",
    "AppointmentStatus",
    "AvailabilitySlot",
    "SlotDraft",
    "SlotPatch",
]
