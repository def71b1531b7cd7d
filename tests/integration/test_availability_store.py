import datetime as dt

import pytest

from src.scheduling.domain.entities import SlotDraft, SlotPatch
from src.scheduling.domain.exceptions import DuplicateSlotError, SlotBookedError
from src.scheduling.domain.value_objects import SlotKey

D = dt.date(2024, 1, 10)
KEY = SlotKey(7, D, dt.time(10, 0))


@pytest.mark.asyncio
async def test_find_slots_orders_by_time_and_filters_by_day(seed_slots, uow_factory):
    await seed_slots(7, ("2024-01-10", "11:00"), ("2024-01-10", "09:00"), ("2024-01-11", "08:00"))
    await seed_slots(8, ("2024-01-10", "09:00"))

    async with uow_factory() as uow:
        day = await uow.availability.find_slots_for_doctor(7, D)
        everything = await uow.availability.find_slots_for_doctor(7)
        ranged = await uow.availability.find_slots_for_doctor(7, D, until=dt.date(2024, 1, 11))
        nobody = await uow.availability.find_slots_for_doctor(99, D)

    assert [s.slot_time for s in day] == [dt.time(9, 0), dt.time(11, 0)]
    assert len(everything) == 3
    assert [s.slot_date for s in ranged] == [D, D, dt.date(2024, 1, 11)]
    assert nobody == []


@pytest.mark.asyncio
async def test_set_slot_booked_state_is_idempotent(seed_slots, uow_factory):
    await seed_slots(7, ("2024-01-10", "10:00"))

    for _ in range(2):
        async with uow_factory() as uow:
            await uow.availability.set_slot_booked_state(KEY, False, 42)
            await uow.commit()
        async with uow_factory() as uow:
            slot = await uow.availability.find_slot(KEY)
        assert (slot.is_available, slot.appointment_id) == (False, 42)

    for _ in range(2):
        async with uow_factory() as uow:
            await uow.availability.set_slot_booked_state(KEY, True)
            await uow.commit()
        async with uow_factory() as uow:
            slot = await uow.availability.find_slot(KEY)
        assert (slot.is_available, slot.appointment_id) == (True, None)


@pytest.mark.asyncio
async def test_set_slot_booked_state_without_matching_slot_is_a_no_op(uow_factory):
    async with uow_factory() as uow:
        await uow.availability.set_slot_booked_state(KEY, False)
        await uow.commit()
    async with uow_factory() as uow:
        assert await uow.availability.find_slot(KEY) is None


@pytest.mark.asyncio
async def test_claim_succeeds_exactly_once(seed_slots, uow_factory):
    await seed_slots(7, ("2024-01-10", "10:00"))

    async with uow_factory() as uow:
        assert await uow.availability.claim_slot(KEY, 1) is True
        assert await uow.availability.claim_slot(KEY, 2) is False
        await uow.commit()

    async with uow_factory() as uow:
        slot = await uow.availability.find_slot(KEY)
    assert slot.appointment_id == 1
    assert not slot.is_bookable()


@pytest.mark.asyncio
async def test_claim_of_closed_slot_fails(seed_slots, uow_factory, availability):
    (slot,) = await seed_slots(7, ("2024-01-10", "10:00"))
    await availability.update_slot(slot.id, SlotPatch(is_available=False))

    async with uow_factory() as uow:
        assert await uow.availability.claim_slot(KEY) is False


@pytest.mark.asyncio
async def test_bulk_create_rejects_duplicates_in_request_and_in_store(seed_slots, availability):
    with pytest.raises(DuplicateSlotError):
        await seed_slots(7, ("2024-01-10", "10:00"), ("2024-01-10", "10:00:30"))
    assert await availability.get_doctor_availability(7) == []

    await seed_slots(7, ("2024-01-10", "10:00"))
    with pytest.raises(DuplicateSlotError):
        await seed_slots(7, ("2024-01-10", "12:00"), ("2024-01-10", "10:00"))
    assert len(await availability.get_doctor_availability(7)) == 1

    # same time for another doctor is fine
    await seed_slots(8, ("2024-01-10", "10:00"))


@pytest.mark.asyncio
async def test_set_availability_requires_slots(availability):
    from src.shared.exceptions import ValidationError

    with pytest.raises(ValidationError):
        await availability.set_availability(7, [])


@pytest.mark.asyncio
async def test_update_and_delete_slot(seed_slots, availability):
    (slot,) = await seed_slots(7, ("2024-01-10", "10:00"))

    moved = await availability.update_slot(slot.id, SlotPatch(slot_time=dt.time(10, 30)))
    assert moved.slot_time == dt.time(10, 30)
    assert moved.doctor_id == 7

    unchanged = await availability.update_slot(slot.id, SlotPatch())
    assert unchanged.slot_time == dt.time(10, 30)

    assert await availability.update_slot(999, SlotPatch(is_available=False)) is None
    assert await availability.delete_slot(slot.id) is True
    assert await availability.delete_slot(slot.id) is False


@pytest.mark.asyncio
async def test_update_slot_cannot_collide_with_existing_slot(seed_slots, availability):
    first, _ = await seed_slots(7, ("2024-01-10", "10:00"), ("2024-01-10", "11:00"))
    with pytest.raises(DuplicateSlotError):
        await availability.update_slot(first.id, SlotPatch(slot_time=dt.time(11, 0)))


@pytest.mark.asyncio
async def test_booked_slot_cannot_be_moved_reopened_or_deleted(seed_slots, scheduling, availability):
    from src.scheduling.application.dtos import CreateAppointmentCommand

    (slot,) = await seed_slots(7, ("2024-01-10", "10:00"))
    await scheduling.create_appointment(
        CreateAppointmentCommand(patient_id=1, doctor_id=7, appointment_date=D, appointment_time=dt.time(10, 0))
    )

    with pytest.raises(SlotBookedError):
        await availability.update_slot(slot.id, SlotPatch(slot_time=dt.time(12, 0)))
    with pytest.raises(SlotBookedError):
        await availability.update_slot(slot.id, SlotPatch(is_available=True))
    with pytest.raises(SlotBookedError):
        await availability.delete_slot(slot.id)

    # closing an already closed slot is harmless
    still = await availability.update_slot(slot.id, SlotPatch(is_available=False))
    assert still.appointment_id is not None


@pytest.mark.asyncio
async def test_slot_draft_seconds_are_dropped(availability):
    (slot,) = await availability.set_availability(7, [SlotDraft(slot_date=D, slot_time=dt.time(10, 0, 45))])
    assert slot.slot_time == dt.time(10, 0)
