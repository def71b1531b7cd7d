from __future__ import annotations

import datetime as dt
from typing import Callable, List, Optional, Sequence

from src.scheduling.application.services.slot_locks import SlotLockRegistry
from src.scheduling.domain.entities.availability_slot import AvailabilitySlot, SlotDraft, SlotPatch
from src.scheduling.domain.exceptions import SlotBookedError
from src.scheduling.domain.value_objects.slot_key import SlotKey
from src.scheduling.infrastructure.unit_of_work import SchedulingUnitOfWork
from src.shared.exceptions import ValidationError
from src.shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


class AvailabilityService:
    """
    Slot management for doctors and admins.

    A booked slot (one carrying an appointment_id) can neither be moved,
    re-opened nor deleted here; cancel or reschedule the appointment first.
    """

    def __init__(
        self,
        uow_factory: Callable[[], SchedulingUnitOfWork],
        locks: Optional[SlotLockRegistry] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._locks = locks or SlotLockRegistry()

    async def get_doctor_availability(
        self,
        doctor_id: int,
        on_date: Optional[dt.date] = None,
        *,
        until: Optional[dt.date] = None,
    ) -> List[AvailabilitySlot]:
        async with self._uow_factory() as uow:
            return await uow.availability.find_slots_for_doctor(doctor_id, on_date, until=until)

    async def get_slot(self, slot_id: int) -> Optional[AvailabilitySlot]:
        async with self._uow_factory() as uow:
            return await uow.availability.get(slot_id)

    async def set_availability(self, doctor_id: int, drafts: Sequence[SlotDraft]) -> List[AvailabilitySlot]:
        if not drafts:
            raise ValidationError("At least one availability slot is required", details={"field": "slots"})

        async with self._uow_factory() as uow:
            created = await uow.availability.bulk_create_slots(doctor_id, drafts)
            await uow.commit()

        logger.info("availability_created", doctor_id=doctor_id, count=len(created))
        return created

    async def update_slot(self, slot_id: int, patch: SlotPatch) -> Optional[AvailabilitySlot]:
        current = await self.get_slot(slot_id)
        while current is not None:
            async with self._locks.hold(*_keys_touched(current, patch)):
                async with self._uow_factory() as uow:
                    fresh = await uow.availability.get(slot_id)
                    if fresh is None:
                        return None
                    if fresh.key != current.key:
                        # moved while we waited; lock the keys it has now
                        current = fresh
                        continue
                    if fresh.is_booked() and (patch.moves_slot() or patch.is_available):
                        raise SlotBookedError(slot_id)
                    updated = await uow.availability.update_slot(slot_id, patch)
                    await uow.commit()

            logger.info("availability_updated", slot_id=slot_id, fields=sorted(patch.values()))
            return updated
        return None

    async def delete_slot(self, slot_id: int) -> bool:
        current = await self.get_slot(slot_id)
        while current is not None:
            async with self._locks.hold(current.key):
                async with self._uow_factory() as uow:
                    fresh = await uow.availability.get(slot_id)
                    if fresh is None:
                        return False
                    if fresh.key != current.key:
                        current = fresh
                        continue
                    if fresh.is_booked():
                        raise SlotBookedError(slot_id, "Slot is booked and cannot be deleted")
                    deleted = await uow.availability.delete_slot(slot_id)
                    await uow.commit()

            if deleted:
                logger.info("availability_deleted", slot_id=slot_id, doctor_id=current.doctor_id)
            return deleted
        return False


def _keys_touched(slot: AvailabilitySlot, patch: SlotPatch) -> List[SlotKey]:
    keys = [slot.key]
    if patch.moves_slot():
        keys.append(
            SlotKey(
                slot.doctor_id,
                patch.slot_date or slot.slot_date,
                patch.slot_time or slot.slot_time,
            )
        )
    return keys
