from .models import NotificationORM
from .repository import NotificationRepositoryImpl
from .sinks import DatabaseNotificationSink, LoggingNotificationSink, make_notification_sink

__all__ = [
    "DatabaseNotificationSink",
    "LoggingNotificationSink",
    "NotificationORM",
    "NotificationRepositoryImpl",
    "make_notification_sink",
]
