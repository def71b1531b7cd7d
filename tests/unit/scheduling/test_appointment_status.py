import datetime as dt

import pytest

from src.scheduling.domain.entities import (
    ACTIVE_STATUSES,
    AppointmentPatch,
    AppointmentStatus as S,
    SlotPatch,
)


@pytest.mark.parametrize(
    "current,target",
    [
        (S.SCHEDULED, S.CONFIRMED),
        (S.SCHEDULED, S.CANCELLED),
        (S.SCHEDULED, S.NO_SHOW),
        (S.CONFIRMED, S.COMPLETED),
        (S.CONFIRMED, S.CANCELLED),
    ],
)
def test_allowed_transitions(current, target):
    assert current.can_transition_to(target)


@pytest.mark.parametrize(
    "current,target",
    [
        (S.SCHEDULED, S.COMPLETED),
        (S.CONFIRMED, S.SCHEDULED),
        (S.CONFIRMED, S.NO_SHOW),
        (S.CANCELLED, S.SCHEDULED),
        (S.COMPLETED, S.CANCELLED),
        (S.NO_SHOW, S.CONFIRMED),
    ],
)
def test_rejected_transitions(current, target):
    assert not current.can_transition_to(target)


def test_terminal_states():
    assert {s for s in S if s.is_terminal} == {S.CANCELLED, S.COMPLETED, S.NO_SHOW}
    assert ACTIVE_STATUSES == {S.SCHEDULED, S.CONFIRMED}


def test_patch_only_carries_supplied_fields():
    assert AppointmentPatch().is_empty()
    patch = AppointmentPatch(appointment_time=dt.time(9, 0), status=S.CONFIRMED)
    assert patch.values() == {"appointment_time": dt.time(9, 0), "status": "confirmed"}
    assert patch.touches_schedule()
    assert not AppointmentPatch(reason="x").touches_schedule()


def test_slot_patch_moves_only_with_date_or_time():
    assert not SlotPatch(is_available=False).moves_slot()
    assert SlotPatch(slot_date=dt.date(2024, 1, 1)).moves_slot()
    assert SlotPatch(is_available=False).values() == {"is_available": False}
