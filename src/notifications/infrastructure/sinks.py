"""
NotificationSink implementations.

- DatabaseNotificationSink: stores an in-app notification row in its own
  short transaction (never the caller's)
- LoggingNotificationSink: only logs; for deployments without in-app inbox
"""
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.notifications.domain.entities import NotificationMessage
from src.notifications.infrastructure.repository import NotificationRepositoryImpl
from src.shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


class DatabaseNotificationSink:

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def send(self, message: NotificationMessage) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                stored = await NotificationRepositoryImpl(session).create(message)
        logger.debug(
            "notification_stored",
            notification_id=stored.id,
            user_id=message.user_id,
            type=message.type.value,
        )


class LoggingNotificationSink:

    async def send(self, message: NotificationMessage) -> None:
        logger.info(
            "notification",
            user_id=message.user_id,
            title=message.title,
            message=message.message,
            type=message.type.value,
        )


def make_notification_sink(
    kind: str,
    session_factory: async_sessionmaker[AsyncSession],
):
    """`database` (default) or `log`."""
    if kind == "log":
        return LoggingNotificationSink()
    if kind == "database":
        return DatabaseNotificationSink(session_factory)
    raise ValueError(f"Unknown NOTIFICATION_SINK {kind!r}")
