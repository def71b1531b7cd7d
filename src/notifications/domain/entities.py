from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class NotificationType(str, Enum):
    """Mirrors the `notifications.type` check constraint."""
    APPOINTMENT = "appointment"
    REMINDER = "reminder"
    SYSTEM = "system"
    ALERT = "alert"
    INFO = "info"


@dataclass(frozen=True, slots=True)
class NotificationMessage:
    """What a sink is asked to deliver."""
    user_id: int
    title: str
    message: str
    type: NotificationType = NotificationType.INFO


@dataclass(frozen=True, slots=True)
class Notification:
    """A delivered notification as stored in `notifications`."""
    id: int
    user_id: int
    title: str
    message: str
    type: NotificationType
    is_read: bool
    created_at: datetime
