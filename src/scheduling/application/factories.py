# src/scheduling/application/factories.py
from __future__ import annotations

from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.notifications.domain.sink import NotificationSink
from src.scheduling.application.services.availability_service import AvailabilityService
from src.scheduling.application.services.scheduling_service import SchedulingService
from src.scheduling.application.services.slot_locks import SlotLockRegistry
from src.scheduling.infrastructure.unit_of_work import SchedulingUnitOfWork


# ---------- UoW factory ------------------------------------------------------

def make_uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SchedulingUnitOfWork]:
    """Each call yields a new unit of work (one transaction)."""
    def _uow_factory() -> SchedulingUnitOfWork:
        return SchedulingUnitOfWork(session_factory)

    return _uow_factory


# ---------- Service factories ------------------------------------------------

def make_scheduling_service(
    session_factory: async_sessionmaker[AsyncSession],
    notifier: NotificationSink,
    locks: SlotLockRegistry,
) -> SchedulingService:
    return SchedulingService(make_uow_factory(session_factory), notifier, locks)


def make_availability_service(
    session_factory: async_sessionmaker[AsyncSession],
    locks: SlotLockRegistry,
) -> AvailabilityService:
    return AvailabilityService(make_uow_factory(session_factory), locks)
