from __future__ import annotations

from typing import List, Optional

from sqlalchemy import and_, delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.scheduling.domain.entities.appointment import (
    Appointment,
    AppointmentDraft,
    AppointmentPatch,
    AppointmentStatus,
)
from src.scheduling.domain.exceptions import SlotUnavailableError
from src.scheduling.domain.repositories.appointment_repository import (
    AppointmentCriteria,
    AppointmentRepository,
)
from src.scheduling.infrastructure.models import AppointmentORM
from src.shared.infrastructure.database.base_model import as_utc
from src.shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


def _to_domain(row: AppointmentORM) -> Appointment:
    return Appointment(
        id=row.id,
        patient_id=row.patient_id,
        doctor_id=row.doctor_id,
        appointment_date=row.appointment_date,
        appointment_time=row.appointment_time,
        status=AppointmentStatus(row.status),
        reason=row.reason,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


class AppointmentRepositoryImpl(AppointmentRepository):
    """
    SQLAlchemy 2.x async implementation. Runs inside the caller's transaction;
    never commits.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _load(self, appointment_id: int) -> Optional[AppointmentORM]:
        stmt = (
            select(AppointmentORM)
            .where(AppointmentORM.id == appointment_id)
            .execution_options(populate_existing=True)
        )
        return (await self._session.execute(stmt)).scalars().first()

    async def list(self, criteria: AppointmentCriteria) -> List[Appointment]:
        conds = []
        if criteria.patient_id is not None:
            conds.append(AppointmentORM.patient_id == criteria.patient_id)
        if criteria.doctor_id is not None:
            conds.append(AppointmentORM.doctor_id == criteria.doctor_id)
        if criteria.status is not None:
            conds.append(AppointmentORM.status == criteria.status.value)

        stmt = select(AppointmentORM)
        if conds:
            stmt = stmt.where(and_(*conds))
        stmt = stmt.order_by(
            AppointmentORM.appointment_date.desc(),
            AppointmentORM.appointment_time.desc(),
            AppointmentORM.id.desc(),
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_to_domain(r) for r in rows]

    async def get(self, appointment_id: int) -> Optional[Appointment]:
        row = await self._load(appointment_id)
        return _to_domain(row) if row else None

    async def insert(self, draft: AppointmentDraft) -> Appointment:
        row = AppointmentORM(
            patient_id=draft.patient_id,
            doctor_id=draft.doctor_id,
            appointment_date=draft.appointment_date,
            appointment_time=draft.appointment_time,
            status=draft.status.value,
            reason=draft.reason,
        )
        self._session.add(row)
        try:
            await self._session.flush()
        except IntegrityError as e:
            # live appointment already holds (doctor, date, time)
            logger.info("appointment_insert_conflict", slot=str(draft.slot_key))
            raise SlotUnavailableError(
                "Time slot is already booked",
                details={"doctor_id": draft.doctor_id},
            ) from e
        return _to_domain(row)

    async def patch(self, appointment_id: int, patch: AppointmentPatch) -> Optional[Appointment]:
        values = patch.values()
        if not values:
            return await self.get(appointment_id)

        stmt = (
            update(AppointmentORM)
            .where(AppointmentORM.id == appointment_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
        except IntegrityError as e:
            logger.info("appointment_patch_conflict", appointment_id=appointment_id)
            raise SlotUnavailableError(
                "Time slot is already booked",
                details={"appointment_id": appointment_id},
            ) from e
        if result.rowcount == 0:
            return None
        return await self.get(appointment_id)

    async def remove(self, appointment_id: int) -> bool:
        stmt = (
            delete(AppointmentORM)
            .where(AppointmentORM.id == appointment_id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0
