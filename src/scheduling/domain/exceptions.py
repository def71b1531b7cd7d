"""Business-rule errors raised by the scheduling engine and its stores."""
from __future__ import annotations

from typing import Any, Dict, Optional

from src.shared.exceptions import ConflictError, NotFoundError


class AppointmentNotFoundError(NotFoundError):
    code = "appointment_not_found"

    def __init__(self, appointment_id: int) -> None:
        super().__init__("Appointment not found", details={"appointment_id": appointment_id})
        self.appointment_id = appointment_id


class SlotNotFoundError(NotFoundError):
    code = "slot_not_found"

    def __init__(self, slot_id: int) -> None:
        super().__init__("Availability slot not found", details={"slot_id": slot_id})
        self.slot_id = slot_id


class SlotUnavailableError(ConflictError):
    """No open slot matches, or the slot was taken by someone else."""
    code = "slot_unavailable"


class AlreadyCancelledError(ConflictError):
    code = "already_cancelled"

    def __init__(self, appointment_id: int) -> None:
        super().__init__(
            "Appointment is already cancelled",
            details={"appointment_id": appointment_id},
        )


class InvalidAppointmentStateError(ConflictError):
    code = "invalid_state"


class SlotBookedError(ConflictError):
    code = "slot_booked"

    def __init__(self, slot_id: int, message: str = "Slot is booked and cannot be changed") -> None:
        super().__init__(message, details={"slot_id": slot_id})


class DuplicateSlotError(ConflictError):
    code = "duplicate_slot"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details=details)
