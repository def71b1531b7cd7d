from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from src.notifications.domain.repository import NotificationRepository
from src.notifications.infrastructure.repository import NotificationRepositoryImpl
from src.shared.infrastructure.database.sqlalchemy_unit_of_work import SQLAlchemyUnitOfWork


class NotificationsUnitOfWork(SQLAlchemyUnitOfWork):
    notifications: NotificationRepository

    def _bind_repositories(self, session: AsyncSession) -> None:
        self.notifications = NotificationRepositoryImpl(session)
