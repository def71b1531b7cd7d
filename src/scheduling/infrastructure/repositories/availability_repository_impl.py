from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional, Sequence, Set

from sqlalchemy import and_, delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.scheduling.domain.entities.availability_slot import AvailabilitySlot, SlotDraft, SlotPatch
from src.scheduling.domain.exceptions import DuplicateSlotError
from src.scheduling.domain.repositories.availability_repository import AvailabilityRepository
from src.scheduling.domain.value_objects.slot_key import SlotKey, normalize_time
from src.scheduling.infrastructure.models import AvailabilitySlotORM
from src.shared.infrastructure.database.base_model import as_utc
from src.shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


def _to_domain(row: AvailabilitySlotORM) -> AvailabilitySlot:
    return AvailabilitySlot(
        id=row.id,
        doctor_id=row.doctor_id,
        slot_date=row.slot_date,
        slot_time=normalize_time(row.slot_time),
        is_available=bool(row.is_available),
        appointment_id=row.appointment_id,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def _matches(key: SlotKey):
    return and_(
        AvailabilitySlotORM.doctor_id == key.doctor_id,
        AvailabilitySlotORM.slot_date == key.slot_date,
        AvailabilitySlotORM.slot_time == key.slot_time,
    )


class AvailabilityRepositoryImpl(AvailabilityRepository):
    """
    SQLAlchemy 2.x async implementation. Slot state changes are single
    UPDATE statements so the "still free" test and the flip happen together.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_slots_for_doctor(
        self,
        doctor_id: int,
        on_date: Optional[dt.date] = None,
        *,
        until: Optional[dt.date] = None,
    ) -> List[AvailabilitySlot]:
        conds = [AvailabilitySlotORM.doctor_id == doctor_id]
        if on_date is not None and until is not None:
            conds.append(AvailabilitySlotORM.slot_date.between(on_date, until))
        elif on_date is not None:
            conds.append(AvailabilitySlotORM.slot_date == on_date)

        stmt = (
            select(AvailabilitySlotORM)
            .where(and_(*conds))
            .order_by(AvailabilitySlotORM.slot_date.asc(), AvailabilitySlotORM.slot_time.asc())
            .execution_options(populate_existing=True)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_to_domain(r) for r in rows]

    async def get(self, slot_id: int) -> Optional[AvailabilitySlot]:
        stmt = (
            select(AvailabilitySlotORM)
            .where(AvailabilitySlotORM.id == slot_id)
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).scalars().first()
        return _to_domain(row) if row else None

    async def find_slot(self, key: SlotKey) -> Optional[AvailabilitySlot]:
        stmt = (
            select(AvailabilitySlotORM)
            .where(_matches(key))
            .limit(1)
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).scalars().first()
        return _to_domain(row) if row else None

    async def set_slot_booked_state(
        self,
        key: SlotKey,
        is_available: bool,
        appointment_id: Optional[int] = None,
    ) -> None:
        values: Dict[str, Any] = {"is_available": is_available}
        if is_available:
            values["appointment_id"] = None
        elif appointment_id is not None:
            values["appointment_id"] = appointment_id

        stmt = (
            update(AvailabilitySlotORM)
            .where(_matches(key))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            logger.debug("slot_state_no_match", slot=str(key), is_available=is_available)

    async def claim_slot(self, key: SlotKey, appointment_id: Optional[int] = None) -> bool:
        stmt = (
            update(AvailabilitySlotORM)
            .where(
                _matches(key),
                AvailabilitySlotORM.is_available.is_(True),
                AvailabilitySlotORM.appointment_id.is_(None),
            )
            .values(is_available=False, appointment_id=appointment_id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def bulk_create_slots(
        self, doctor_id: int, drafts: Sequence[SlotDraft]
    ) -> List[AvailabilitySlot]:
        seen: Set[SlotKey] = set()
        for d in drafts:
            key = SlotKey(doctor_id, d.slot_date, normalize_time(d.slot_time))
            if key in seen:
                raise DuplicateSlotError(
                    f"Slot listed twice in request: {key}",
                    details={"date": key.slot_date.isoformat(), "time": key.slot_time.strftime("%H:%M")},
                )
            seen.add(key)

        if seen:
            existing = await self._session.execute(
                select(AvailabilitySlotORM.slot_date, AvailabilitySlotORM.slot_time).where(
                    AvailabilitySlotORM.doctor_id == doctor_id,
                    AvailabilitySlotORM.slot_date.in_(sorted({k.slot_date for k in seen})),
                )
            )
            for slot_date, slot_time in existing.all():
                key = SlotKey(doctor_id, slot_date, normalize_time(slot_time))
                if key in seen:
                    raise DuplicateSlotError(
                        f"Slot already exists: {key}",
                        details={"date": slot_date.isoformat(), "time": key.slot_time.strftime("%H:%M")},
                    )

        rows = [
            AvailabilitySlotORM(
                doctor_id=doctor_id,
                slot_date=d.slot_date,
                slot_time=normalize_time(d.slot_time),
                is_available=d.is_available,
            )
            for d in drafts
        ]
        self._session.add_all(rows)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise DuplicateSlotError("Slot already exists", details={"doctor_id": doctor_id}) from e
        return [_to_domain(r) for r in rows]

    async def update_slot(self, slot_id: int, patch: SlotPatch) -> Optional[AvailabilitySlot]:
        values = patch.values()
        if "slot_time" in values:
            values["slot_time"] = normalize_time(values["slot_time"])
        if not values:
            return await self.get(slot_id)

        stmt = (
            update(AvailabilitySlotORM)
            .where(AvailabilitySlotORM.id == slot_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
        except IntegrityError as e:
            raise DuplicateSlotError("Slot already exists", details={"slot_id": slot_id}) from e
        if result.rowcount == 0:
            return None
        return await self.get(slot_id)

    async def delete_slot(self, slot_id: int) -> bool:
        stmt = (
            delete(AvailabilitySlotORM)
            .where(AvailabilitySlotORM.id == slot_id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0
