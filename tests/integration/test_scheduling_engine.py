import datetime as dt

import pytest

from src.scheduling.application.dtos import CreateAppointmentCommand
from src.scheduling.domain.entities import AppointmentPatch, AppointmentStatus
from src.scheduling.domain.exceptions import (
    AlreadyCancelledError,
    AppointmentNotFoundError,
    InvalidAppointmentStateError,
    SlotUnavailableError,
)
from src.scheduling.domain.repositories import AppointmentCriteria
from src.scheduling.domain.value_objects import SlotKey
from src.shared.exceptions import ValidationError

DAY = dt.date(2024, 1, 10)
TEN = dt.time(10, 0)


def book(patient_id=1, doctor_id=7, day=DAY, at=TEN, reason=None):
    return CreateAppointmentCommand(
        patient_id=patient_id,
        doctor_id=doctor_id,
        appointment_date=day,
        appointment_time=at,
        reason=reason,
    )


async def slot_state(uow_factory, doctor_id, day, at):
    async with uow_factory() as uow:
        slot = await uow.availability.find_slot(SlotKey(doctor_id, day, at))
    return slot.is_available, slot.appointment_id


@pytest.mark.asyncio
async def test_booking_consumes_the_slot_and_second_booking_is_refused(scheduling, seed_slots, uow_factory):
    await seed_slots(7, ("2024-01-10", "10:00"))

    appointment = await scheduling.create_appointment(book(reason="checkup"))
    assert appointment.status is AppointmentStatus.SCHEDULED
    assert appointment.reason == "checkup"
    assert await slot_state(uow_factory, 7, DAY, TEN) == (False, appointment.id)

    with pytest.raises(SlotUnavailableError) as exc:
        await scheduling.create_appointment(book(patient_id=2))
    assert exc.value.code == "slot_unavailable"


@pytest.mark.asyncio
async def test_booking_without_declared_slot_is_refused(scheduling, seed_slots):
    await seed_slots(7, ("2024-01-10", "09:00"))

    with pytest.raises(SlotUnavailableError) as exc:
        await scheduling.create_appointment(book())
    assert exc.value.message == "No availability slot found for this date and time"
    assert exc.value.details == {"doctor_id": 7, "date": "2024-01-10", "time": "10:00"}


@pytest.mark.asyncio
async def test_booking_a_closed_slot_is_refused(scheduling, seed_slots, availability):
    from src.scheduling.domain.entities import SlotPatch

    (slot,) = await seed_slots(7, ("2024-01-10", "10:00"))
    await availability.update_slot(slot.id, SlotPatch(is_available=False))

    with pytest.raises(SlotUnavailableError):
        await scheduling.create_appointment(book())


@pytest.mark.asyncio
async def test_booking_time_is_matched_to_the_minute(scheduling, seed_slots):
    await seed_slots(7, ("2024-01-10", "10:00"))
    appointment = await scheduling.create_appointment(book(at=dt.time(10, 0, 42)))
    assert appointment.appointment_time == TEN


@pytest.mark.asyncio
async def test_cancel_releases_the_slot_for_rebooking(scheduling, seed_slots, uow_factory):
    await seed_slots(7, ("2024-01-10", "10:00"))
    first = await scheduling.create_appointment(book())

    cancelled = await scheduling.cancel_appointment(first.id)
    assert cancelled.status is AppointmentStatus.CANCELLED
    assert await slot_state(uow_factory, 7, DAY, TEN) == (True, None)

    second = await scheduling.create_appointment(book(patient_id=2))
    assert second.id != first.id
    assert await slot_state(uow_factory, 7, DAY, TEN) == (False, second.id)


@pytest.mark.asyncio
async def test_cancel_twice_is_refused(scheduling, seed_slots):
    await seed_slots(7, ("2024-01-10", "10:00"))
    appointment = await scheduling.create_appointment(book())
    await scheduling.cancel_appointment(appointment.id)

    with pytest.raises(AlreadyCancelledError) as exc:
        await scheduling.cancel_appointment(appointment.id)
    assert exc.value.code == "already_cancelled"


@pytest.mark.asyncio
async def test_cancel_completed_appointment_is_an_invalid_state(scheduling, seed_slots, uow_factory):
    await seed_slots(7, ("2024-01-10", "10:00"))
    appointment = await scheduling.create_appointment(book())
    await scheduling.update_appointment(appointment.id, AppointmentPatch(status=AppointmentStatus.CONFIRMED))
    await scheduling.update_appointment(appointment.id, AppointmentPatch(status=AppointmentStatus.COMPLETED))

    with pytest.raises(InvalidAppointmentStateError) as exc:
        await scheduling.cancel_appointment(appointment.id)
    assert exc.value.code == "invalid_state"
    # slot stays consumed by the completed visit
    assert await slot_state(uow_factory, 7, DAY, TEN) == (False, appointment.id)


@pytest.mark.asyncio
async def test_missing_appointment_is_not_found(scheduling):
    assert await scheduling.get_appointment_by_id(404) is None
    with pytest.raises(AppointmentNotFoundError):
        await scheduling.cancel_appointment(404)
    with pytest.raises(AppointmentNotFoundError):
        await scheduling.reschedule_appointment(404, "2024-01-11T11:00")
    with pytest.raises(AppointmentNotFoundError):
        await scheduling.update_appointment(404, AppointmentPatch(reason="x"))


@pytest.mark.asyncio
async def test_reschedule_moves_to_the_new_slot_and_frees_the_old_one(scheduling, seed_slots, uow_factory):
    await seed_slots(7, ("2024-01-10", "10:00"), ("2024-01-11", "11:00"))
    appointment = await scheduling.create_appointment(book())

    moved = await scheduling.reschedule_appointment(appointment.id, "2024-01-11T11:00:00.000Z")

    assert (moved.appointment_date, moved.appointment_time) == (dt.date(2024, 1, 11), dt.time(11, 0))
    assert moved.status is AppointmentStatus.SCHEDULED
    assert await slot_state(uow_factory, 7, DAY, TEN) == (True, None)
    assert await slot_state(uow_factory, 7, dt.date(2024, 1, 11), dt.time(11, 0)) == (False, appointment.id)

    # old slot can be booked by someone else
    await scheduling.create_appointment(book(patient_id=2))


@pytest.mark.asyncio
async def test_reschedule_to_taken_slot_changes_nothing(scheduling, seed_slots, uow_factory):
    await seed_slots(7, ("2024-01-10", "10:00"), ("2024-01-10", "11:00"))
    mine = await scheduling.create_appointment(book())
    theirs = await scheduling.create_appointment(book(patient_id=2, at=dt.time(11, 0)))

    with pytest.raises(SlotUnavailableError) as exc:
        await scheduling.reschedule_appointment(mine.id, "2024-01-10T11:00")
    assert exc.value.message == "New time slot is not available"

    assert await scheduling.get_appointment_by_id(mine.id) == mine
    assert await slot_state(uow_factory, 7, DAY, TEN) == (False, mine.id)
    assert await slot_state(uow_factory, 7, DAY, dt.time(11, 0)) == (False, theirs.id)


@pytest.mark.asyncio
async def test_reschedule_with_bare_value_is_refused_as_unavailable(scheduling, seed_slots):
    await seed_slots(7, ("2024-01-10", "10:00"), ("2024-01-11", "10:00"))
    appointment = await scheduling.create_appointment(book())

    with pytest.raises(SlotUnavailableError):
        await scheduling.reschedule_appointment(appointment.id, "2024-01-11")


@pytest.mark.asyncio
async def test_reschedule_with_malformed_combined_value_is_a_validation_error(scheduling, seed_slots):
    await seed_slots(7, ("2024-01-10", "10:00"))
    appointment = await scheduling.create_appointment(book())

    with pytest.raises(ValidationError):
        await scheduling.reschedule_appointment(appointment.id, "2024-01-11Tnoon")


@pytest.mark.asyncio
async def test_reschedule_to_the_same_slot_is_a_no_op(scheduling, seed_slots, notifier, uow_factory):
    await seed_slots(7, ("2024-01-10", "10:00"))
    appointment = await scheduling.create_appointment(book())
    sent = len(notifier.messages)

    same = await scheduling.reschedule_appointment(appointment.id, "2024-01-10T10:00")

    assert same == appointment
    assert len(notifier.messages) == sent
    assert await slot_state(uow_factory, 7, DAY, TEN) == (False, appointment.id)


@pytest.mark.asyncio
async def test_reschedule_cancelled_appointment_is_refused(scheduling, seed_slots):
    await seed_slots(7, ("2024-01-10", "10:00"), ("2024-01-11", "11:00"))
    appointment = await scheduling.create_appointment(book())
    await scheduling.cancel_appointment(appointment.id)

    with pytest.raises(AlreadyCancelledError):
        await scheduling.reschedule_appointment(appointment.id, "2024-01-11T11:00")


@pytest.mark.asyncio
async def test_update_follows_the_status_machine(scheduling, seed_slots):
    await seed_slots(7, ("2024-01-10", "10:00"))
    appointment = await scheduling.create_appointment(book())

    with pytest.raises(InvalidAppointmentStateError):
        await scheduling.update_appointment(appointment.id, AppointmentPatch(status=AppointmentStatus.COMPLETED))

    confirmed = await scheduling.update_appointment(
        appointment.id, AppointmentPatch(status=AppointmentStatus.CONFIRMED, reason="follow-up")
    )
    assert confirmed.status is AppointmentStatus.CONFIRMED
    assert confirmed.reason == "follow-up"

    with pytest.raises(InvalidAppointmentStateError):
        await scheduling.update_appointment(appointment.id, AppointmentPatch(status=AppointmentStatus.SCHEDULED))


@pytest.mark.asyncio
async def test_update_cannot_be_used_to_cancel(scheduling, seed_slots):
    await seed_slots(7, ("2024-01-10", "10:00"))
    appointment = await scheduling.create_appointment(book())

    with pytest.raises(InvalidAppointmentStateError):
        await scheduling.update_appointment(appointment.id, AppointmentPatch(status=AppointmentStatus.CANCELLED))


@pytest.mark.asyncio
async def test_update_of_date_time_requires_an_open_slot(scheduling, seed_slots):
    await seed_slots(7, ("2024-01-10", "10:00"), ("2024-01-10", "12:00"))
    appointment = await scheduling.create_appointment(book())

    with pytest.raises(SlotUnavailableError):
        await scheduling.update_appointment(appointment.id, AppointmentPatch(appointment_time=dt.time(11, 0)))

    updated = await scheduling.update_appointment(appointment.id, AppointmentPatch(appointment_time=dt.time(12, 0)))
    assert updated.appointment_time == dt.time(12, 0)


@pytest.mark.asyncio
async def test_delete_removes_the_row_but_leaves_the_slot(scheduling, seed_slots, uow_factory):
    await seed_slots(7, ("2024-01-10", "10:00"))
    appointment = await scheduling.create_appointment(book())

    assert await scheduling.delete_appointment(appointment.id) is True
    assert await scheduling.delete_appointment(appointment.id) is False
    assert await scheduling.get_appointment_by_id(appointment.id) is None
    assert await slot_state(uow_factory, 7, DAY, TEN) == (False, appointment.id)


@pytest.mark.asyncio
async def test_listing_filters_by_criteria(scheduling, seed_slots):
    await seed_slots(7, ("2024-01-10", "10:00"), ("2024-01-10", "11:00"))
    await seed_slots(8, ("2024-01-10", "10:00"))
    a = await scheduling.create_appointment(book())
    await scheduling.create_appointment(book(patient_id=2, at=dt.time(11, 0)))
    await scheduling.create_appointment(book(patient_id=1, doctor_id=8))
    await scheduling.cancel_appointment(a.id)

    assert len(await scheduling.get_appointments(AppointmentCriteria(patient_id=1))) == 2
    assert len(await scheduling.get_appointments(AppointmentCriteria(doctor_id=7))) == 2
    cancelled = await scheduling.get_appointments(AppointmentCriteria(status=AppointmentStatus.CANCELLED))
    assert [x.id for x in cancelled] == [a.id]


@pytest.mark.asyncio
async def test_patient_is_notified_at_each_step(scheduling, seed_slots, notifier):
    await seed_slots(7, ("2024-01-10", "10:00"), ("2024-01-11", "11:00"))
    appointment = await scheduling.create_appointment(book(patient_id=3))
    await scheduling.reschedule_appointment(appointment.id, "2024-01-11T11:00", reason="doctor away")
    await scheduling.cancel_appointment(appointment.id, reason="feeling better")

    assert [m.title for m in notifier.messages] == [
        "Appointment Scheduled",
        "Appointment Rescheduled",
        "Appointment Cancelled",
    ]
    assert {m.user_id for m in notifier.messages} == {3}
    assert notifier.messages[0].message == "Your appointment has been scheduled for 2024-01-10 at 10:00."
    assert notifier.messages[1].message.endswith("Reason: doctor away")
    assert "2024-01-11 at 11:00" in notifier.messages[2].message


@pytest.mark.asyncio
async def test_notification_failure_never_undoes_a_booking(failing_scheduling, seed_slots, uow_factory):
    await seed_slots(7, ("2024-01-10", "10:00"))

    appointment = await failing_scheduling.create_appointment(book())
    cancelled = await failing_scheduling.cancel_appointment(appointment.id)

    assert cancelled.status is AppointmentStatus.CANCELLED
    assert await slot_state(uow_factory, 7, DAY, TEN) == (True, None)
