from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.notifications.domain.entities import Notification, NotificationMessage, NotificationType
from src.notifications.domain.repository import NotificationRepository
from src.notifications.infrastructure.models import NotificationORM
from src.shared.infrastructure.database.base_model import as_utc


def _to_domain(row: NotificationORM) -> Notification:
    return Notification(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        message=row.message,
        type=NotificationType(row.type),
        is_read=bool(row.is_read),
        created_at=as_utc(row.created_at),
    )


class NotificationRepositoryImpl(NotificationRepository):

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: NotificationMessage) -> Notification:
        row = NotificationORM(
            user_id=message.user_id,
            title=message.title,
            message=message.message,
            type=message.type.value,
            is_read=False,
        )
        self._session.add(row)
        await self._session.flush()
        return _to_domain(row)

    async def find_by_user(self, user_id: int) -> List[Notification]:
        stmt = (
            select(NotificationORM)
            .where(NotificationORM.user_id == user_id)
            .order_by(NotificationORM.created_at.desc(), NotificationORM.id.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_to_domain(r) for r in rows]

    async def get(self, notification_id: int) -> Optional[Notification]:
        stmt = (
            select(NotificationORM)
            .where(NotificationORM.id == notification_id)
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).scalars().first()
        return _to_domain(row) if row else None

    async def mark_as_read(self, notification_id: int) -> Optional[Notification]:
        result = await self._session.execute(
            update(NotificationORM)
            .where(NotificationORM.id == notification_id)
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None
        return await self.get(notification_id)

    async def delete(self, notification_id: int) -> bool:
        result = await self._session.execute(
            delete(NotificationORM)
            .where(NotificationORM.id == notification_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0
