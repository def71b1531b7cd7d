from __future__ import annotations

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.notifications.domain.entities import Notification
from src.notifications.infrastructure.unit_of_work import NotificationsUnitOfWork
from src.shared.exceptions import ForbiddenError, NotFoundError
from src.shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


class NotificationService:
    """Inbox operations for the calling user."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    def _uow(self) -> NotificationsUnitOfWork:
        return NotificationsUnitOfWork(self._session_factory)

    async def get_user_notifications(self, user_id: int) -> List[Notification]:
        async with self._uow() as uow:
            return await uow.notifications.find_by_user(user_id)

    async def _get_owned(self, uow: NotificationsUnitOfWork, notification_id: int, user_id: int) -> Notification:
        found = await uow.notifications.get(notification_id)
        if found is None:
            raise NotFoundError("Notification not found", code="notification_not_found")
        if found.user_id != user_id:
            raise ForbiddenError("Notification belongs to another user")
        return found

    async def mark_as_read(self, notification_id: int, *, user_id: int) -> Notification:
        async with self._uow() as uow:
            await self._get_owned(uow, notification_id, user_id)
            updated = await uow.notifications.mark_as_read(notification_id)
            await uow.commit()
        if updated is None:
            raise NotFoundError("Notification not found", code="notification_not_found")
        return updated

    async def delete_notification(self, notification_id: int, *, user_id: int) -> bool:
        async with self._uow() as uow:
            await self._get_owned(uow, notification_id, user_id)
            deleted = await uow.notifications.delete(notification_id)
            await uow.commit()
        logger.info("notification_deleted", notification_id=notification_id, deleted=deleted)
        return deleted
