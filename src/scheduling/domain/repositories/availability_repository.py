from __future__ import annotations

import datetime as dt
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from src.scheduling.domain.entities.availability_slot import AvailabilitySlot, SlotDraft, SlotPatch
from src.scheduling.domain.value_objects.slot_key import SlotKey


class AvailabilityRepository(ABC):
    """
    Per-doctor dated slots and their booked state.
    """

    @abstractmethod
    async def find_slots_for_doctor(
        self,
        doctor_id: int,
        on_date: Optional[dt.date] = None,
        *,
        until: Optional[dt.date] = None,
    ) -> List[AvailabilitySlot]:
        """
        Slots of the doctor ordered by date then time ascending.
        `on_date` alone selects one day; with `until` it is an inclusive range;
        neither returns everything.
        """

    @abstractmethod
    async def get(self, slot_id: int) -> Optional[AvailabilitySlot]:
        """Return the slot, or None."""

    @abstractmethod
    async def find_slot(self, key: SlotKey) -> Optional[AvailabilitySlot]:
        """Exact (doctor, date, time) lookup."""

    @abstractmethod
    async def set_slot_booked_state(
        self,
        key: SlotKey,
        is_available: bool,
        appointment_id: Optional[int] = None,
    ) -> None:
        """
        Flip the slot to free (True, back-reference cleared) or taken (False,
        back-reference set when given). Idempotent; no-op when no slot matches.
        """

    @abstractmethod
    async def claim_slot(self, key: SlotKey, appointment_id: Optional[int] = None) -> bool:
        """
        Atomically take the slot only if it is still free.
        True iff exactly one row changed.
        """

    @abstractmethod
    async def bulk_create_slots(
        self, doctor_id: int, drafts: Sequence[SlotDraft]
    ) -> List[AvailabilitySlot]:
        """Insert all slots or none; duplicates raise DuplicateSlotError."""

    @abstractmethod
    async def update_slot(self, slot_id: int, patch: SlotPatch) -> Optional[AvailabilitySlot]:
        """Apply the supplied fields, or None if the id is unknown."""

    @abstractmethod
    async def delete_slot(self, slot_id: int) -> bool:
        """True iff a row was deleted."""
