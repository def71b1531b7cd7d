"""
Scheduling unit of work: one transaction spanning both stores.
"""
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from src.scheduling.domain.repositories import AppointmentRepository, AvailabilityRepository
from src.scheduling.infrastructure.repositories import (
    AppointmentRepositoryImpl,
    AvailabilityRepositoryImpl,
)
from src.shared.infrastructure.database.sqlalchemy_unit_of_work import SQLAlchemyUnitOfWork


class SchedulingUnitOfWork(SQLAlchemyUnitOfWork):
    appointments: AppointmentRepository
    availability: AvailabilityRepository

    def _bind_repositories(self, session: AsyncSession) -> None:
        self.appointments = AppointmentRepositoryImpl(session)
        self.availability = AvailabilityRepositoryImpl(session)
