from .entities import Notification, NotificationMessage, NotificationType
from .repository import NotificationRepository
from .sink import NotificationSink

__all__ = [
    "Notification",
    "NotificationMessage",
    "NotificationRepository",
    "NotificationSink",
    "NotificationType",
]
