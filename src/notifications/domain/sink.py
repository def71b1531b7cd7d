from __future__ import annotations

from typing import Protocol, runtime_checkable

from src.notifications.domain.entities import NotificationMessage


@runtime_checkable
class NotificationSink(Protocol):
    """
    Fire-and-forget delivery of lifecycle notices.

    Callers must treat any exception from `send` as non-fatal.
    """

    async def send(self, message: NotificationMessage) -> None:
        ...
