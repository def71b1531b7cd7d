from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from src.scheduling.domain.entities.appointment import (
    Appointment,
    AppointmentDraft,
    AppointmentPatch,
    AppointmentStatus,
)


@dataclass(frozen=True, slots=True)
class AppointmentCriteria:
    """Listing filter; None means "any"."""
    patient_id: Optional[int] = None
    doctor_id: Optional[int] = None
    status: Optional[AppointmentStatus] = None


class AppointmentRepository(ABC):
    """
    Access to appointment records keyed by id.
    """

    @abstractmethod
    async def list(self, criteria: AppointmentCriteria) -> List[Appointment]:
        """Matching appointments, most recent first (date desc, time desc)."""

    @abstractmethod
    async def get(self, appointment_id: int) -> Optional[Appointment]:
        """Return the appointment, or None."""

    @abstractmethod
    async def insert(self, draft: AppointmentDraft) -> Appointment:
        """Persist a new appointment; status defaults to scheduled."""

    @abstractmethod
    async def patch(self, appointment_id: int, patch: AppointmentPatch) -> Optional[Appointment]:
        """
        Overwrite only the supplied fields. An empty patch returns the
        existing record unchanged. None if the id is unknown.
        """

    @abstractmethod
    async def remove(self, appointment_id: int) -> bool:
        """True iff a row was deleted."""
