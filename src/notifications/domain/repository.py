from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from src.notifications.domain.entities import Notification, NotificationMessage


class NotificationRepository(ABC):

    @abstractmethod
    async def create(self, message: NotificationMessage) -> Notification:
        """Persist an unread notification."""

    @abstractmethod
    async def find_by_user(self, user_id: int) -> List[Notification]:
        """Newest first."""

    @abstractmethod
    async def get(self, notification_id: int) -> Optional[Notification]:
        ...

    @abstractmethod
    async def mark_as_read(self, notification_id: int) -> Optional[Notification]:
        """None if the id is unknown."""

    @abstractmethod
    async def delete(self, notification_id: int) -> bool:
        ...
