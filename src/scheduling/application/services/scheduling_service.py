"""
Scheduling engine: books, moves and cancels appointments while keeping the
availability slots in step.

Every mutating call follows the same shape:

    lock slot key(s) -> open unit of work -> re-read -> validate
    -> write appointment + slot state -> commit -> release locks -> notify

Notifications go out after commit and can never undo a booking.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from src.notifications.domain.entities import NotificationMessage, NotificationType
from src.notifications.domain.sink import NotificationSink
from src.scheduling.application.dtos import CreateAppointmentCommand
from src.scheduling.application.services.slot_locks import SlotLockRegistry
from src.scheduling.domain.entities.appointment import (
    Appointment,
    AppointmentPatch,
    AppointmentStatus,
)
from src.scheduling.domain.entities.availability_slot import AvailabilitySlot
from src.scheduling.domain.exceptions import (
    AlreadyCancelledError,
    AppointmentNotFoundError,
    InvalidAppointmentStateError,
    SlotUnavailableError,
)
from src.scheduling.domain.repositories.appointment_repository import AppointmentCriteria
from src.scheduling.domain.value_objects.reschedule_target import RescheduleTarget
from src.scheduling.domain.value_objects.slot_key import SlotKey
from src.scheduling.infrastructure.unit_of_work import SchedulingUnitOfWork
from src.shared.exceptions import ConflictError
from src.shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)

NO_SLOT_MESSAGE = "No availability slot found for this date and time"
NEW_SLOT_UNAVAILABLE_MESSAGE = "New time slot is not available"


def pick_open_slot(slots: Sequence[AvailabilitySlot], key: SlotKey) -> Optional[AvailabilitySlot]:
    """The slot at exactly key.slot_time that is free and unclaimed, if any."""
    for slot in slots:
        if slot.slot_time == key.slot_time and slot.is_bookable():
            return slot
    return None


def _fmt(key: SlotKey) -> str:
    return f"{key.slot_date.isoformat()} at {key.slot_time.strftime('%H:%M')}"


class SchedulingService:
    """
    Appointment lifecycle over the appointment and availability stores.

    Args:
        uow_factory: builds a fresh SchedulingUnitOfWork per operation
        notifier: where patient notices go (failures are logged, never raised)
        locks: per-slot lock registry, shared with AvailabilityService
    """

    def __init__(
        self,
        uow_factory: Callable[[], SchedulingUnitOfWork],
        notifier: NotificationSink,
        locks: Optional[SlotLockRegistry] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._notifier = notifier
        self._locks = locks or SlotLockRegistry()

    # ---------- queries ----------

    async def get_appointments(self, criteria: AppointmentCriteria) -> List[Appointment]:
        async with self._uow_factory() as uow:
            return await uow.appointments.list(criteria)

    async def get_appointment_by_id(self, appointment_id: int) -> Optional[Appointment]:
        async with self._uow_factory() as uow:
            return await uow.appointments.get(appointment_id)

    async def _require(self, appointment_id: int) -> Appointment:
        found = await self.get_appointment_by_id(appointment_id)
        if found is None:
            raise AppointmentNotFoundError(appointment_id)
        return found

    # ---------- create ----------

    async def create_appointment(self, command: CreateAppointmentCommand) -> Appointment:
        key = command.slot_key
        async with self._locks.hold(key):
            async with self._uow_factory() as uow:
                slots = await uow.availability.find_slots_for_doctor(key.doctor_id, key.slot_date)
                if pick_open_slot(slots, key) is None:
                    logger.info("booking_rejected", slot=str(key), reason="no_open_slot")
                    raise SlotUnavailableError(NO_SLOT_MESSAGE, details=_slot_details(key))

                # conditional UPDATE; loses if another writer got there first
                if not await uow.availability.claim_slot(key):
                    logger.warning("booking_rejected", slot=str(key), reason="claim_lost")
                    raise SlotUnavailableError(NO_SLOT_MESSAGE, details=_slot_details(key))

                appointment = await uow.appointments.insert(command.to_draft())
                await uow.availability.set_slot_booked_state(key, False, appointment.id)
                await uow.commit()

        logger.info(
            "appointment_booked",
            appointment_id=appointment.id,
            patient_id=appointment.patient_id,
            slot=str(key),
        )
        await self._notify(
            NotificationMessage(
                user_id=appointment.patient_id,
                title="Appointment Scheduled",
                message=f"Your appointment has been scheduled for {_fmt(key)}.",
                type=NotificationType.APPOINTMENT,
            )
        )
        return appointment

    # ---------- reschedule ----------

    async def reschedule_appointment(
        self,
        appointment_id: int,
        new_date_time: str,
        reason: Optional[str] = None,
    ) -> Appointment:
        existing = await self._require(appointment_id)

        target = RescheduleTarget.parse(new_date_time)
        new_date, new_time = target.resolve()
        if new_date is None or new_time is None:
            logger.info(
                "reschedule_rejected",
                appointment_id=appointment_id,
                reason="unresolvable_target",
                bare_value=target.from_bare_value,
            )
            raise SlotUnavailableError(NEW_SLOT_UNAVAILABLE_MESSAGE)

        old_key = existing.slot_key
        new_key = SlotKey(existing.doctor_id, new_date, new_time)

        async with self._locks.hold(old_key, new_key):
            async with self._uow_factory() as uow:
                current = await uow.appointments.get(appointment_id)
                if current is None:
                    raise AppointmentNotFoundError(appointment_id)
                if current.slot_key != old_key:
                    raise ConflictError("Appointment was changed concurrently, retry")
                _ensure_movable(current)

                if new_key == old_key:
                    return current

                slots = await uow.availability.find_slots_for_doctor(new_key.doctor_id, new_key.slot_date)
                if pick_open_slot(slots, new_key) is None:
                    logger.info("reschedule_rejected", appointment_id=appointment_id, slot=str(new_key))
                    raise SlotUnavailableError(NEW_SLOT_UNAVAILABLE_MESSAGE, details=_slot_details(new_key))

                await uow.availability.set_slot_booked_state(old_key, True)
                if not await uow.availability.claim_slot(new_key, current.id):
                    logger.warning("reschedule_rejected", appointment_id=appointment_id, reason="claim_lost")
                    raise SlotUnavailableError(NEW_SLOT_UNAVAILABLE_MESSAGE, details=_slot_details(new_key))

                updated = await uow.appointments.patch(
                    appointment_id,
                    AppointmentPatch(appointment_date=new_date, appointment_time=new_time),
                )
                if updated is None:
                    raise AppointmentNotFoundError(appointment_id)
                await uow.commit()

        logger.info(
            "appointment_rescheduled",
            appointment_id=appointment_id,
            from_slot=str(old_key),
            to_slot=str(new_key),
        )
        message = f"Your appointment has been rescheduled to {_fmt(new_key)}."
        if reason:
            message += f" Reason: {reason}"
        await self._notify(
            NotificationMessage(
                user_id=updated.patient_id,
                title="Appointment Rescheduled",
                message=message,
                type=NotificationType.APPOINTMENT,
            )
        )
        return updated

    # ---------- cancel ----------

    async def cancel_appointment(self, appointment_id: int, reason: Optional[str] = None) -> Appointment:
        existing = await self._require(appointment_id)
        key = existing.slot_key

        async with self._locks.hold(key):
            async with self._uow_factory() as uow:
                current = await uow.appointments.get(appointment_id)
                if current is None:
                    raise AppointmentNotFoundError(appointment_id)
                if current.is_cancelled():
                    raise AlreadyCancelledError(appointment_id)
                if not current.is_active():
                    raise InvalidAppointmentStateError(
                        f"Appointment cannot be cancelled in status {current.status.value}",
                        details={"appointment_id": appointment_id, "status": current.status.value},
                    )
                if current.slot_key != key:
                    raise ConflictError("Appointment was changed concurrently, retry")

                updated = await uow.appointments.patch(
                    appointment_id, AppointmentPatch(status=AppointmentStatus.CANCELLED)
                )
                if updated is None:
                    raise AppointmentNotFoundError(appointment_id)
                await uow.availability.set_slot_booked_state(key, True)
                await uow.commit()

        logger.info("appointment_cancelled", appointment_id=appointment_id, slot=str(key))
        message = f"Your appointment on {_fmt(key)} has been cancelled."
        if reason:
            message += f" Reason: {reason}"
        await self._notify(
            NotificationMessage(
                user_id=updated.patient_id,
                title="Appointment Cancelled",
                message=message,
                type=NotificationType.APPOINTMENT,
            )
        )
        return updated

    # ---------- generic update ----------

    async def update_appointment(self, appointment_id: int, patch: AppointmentPatch) -> Appointment:
        """
        Plain field patch. A date/time change must land on an open slot, but no
        slot is consumed or released here; use reschedule/cancel for that.
        """
        existing = await self._require(appointment_id)
        if patch.status is AppointmentStatus.CANCELLED:
            raise InvalidAppointmentStateError("Use the cancel operation to cancel an appointment")

        keys: List[SlotKey] = []
        target: Optional[SlotKey] = None
        if patch.touches_schedule():
            target = SlotKey(
                existing.doctor_id,
                patch.appointment_date or existing.appointment_date,
                patch.appointment_time or existing.appointment_time,
            )
            keys.append(target)

        async with self._locks.hold(*keys):
            async with self._uow_factory() as uow:
                current = await uow.appointments.get(appointment_id)
                if current is None:
                    raise AppointmentNotFoundError(appointment_id)
                if patch.status is not None and not current.status.can_transition_to(patch.status):
                    raise InvalidAppointmentStateError(
                        f"Cannot change status from {current.status.value} to {patch.status.value}",
                        details={"appointment_id": appointment_id},
                    )
                if target is not None:
                    slots = await uow.availability.find_slots_for_doctor(target.doctor_id, target.slot_date)
                    if pick_open_slot(slots, target) is None:
                        raise SlotUnavailableError(NEW_SLOT_UNAVAILABLE_MESSAGE, details=_slot_details(target))

                updated = await uow.appointments.patch(appointment_id, patch)
                if updated is None:
                    raise AppointmentNotFoundError(appointment_id)
                await uow.commit()

        logger.info("appointment_updated", appointment_id=appointment_id, fields=sorted(patch.values()))
        return updated

    # ---------- delete ----------

    async def delete_appointment(self, appointment_id: int) -> bool:
        """Administrative hard delete. The slot is left as it is."""
        async with self._uow_factory() as uow:
            deleted = await uow.appointments.remove(appointment_id)
            await uow.commit()
        if deleted:
            logger.info("appointment_deleted", appointment_id=appointment_id)
        return deleted

    # ---------- notifications ----------

    async def _notify(self, message: NotificationMessage) -> None:
        try:
            await self._notifier.send(message)
        except Exception:
            logger.warning(
                "notification_failed",
                user_id=message.user_id,
                title=message.title,
                exc_info=True,
            )


def _ensure_movable(appointment: Appointment) -> None:
    if appointment.is_cancelled():
        raise AlreadyCancelledError(appointment.id)
    if not appointment.is_active():
        raise InvalidAppointmentStateError(
            f"Appointment cannot be rescheduled in status {appointment.status.value}",
            details={"appointment_id": appointment.id, "status": appointment.status.value},
        )


def _slot_details(key: SlotKey) -> dict:
    return {
        "doctor_id": key.doctor_id,
        "date": key.slot_date.isoformat(),
        "time": key.slot_time.strftime("%H:%M"),
    }
