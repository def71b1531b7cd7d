# src/notifications/infrastructure/models.py
"""
Notification models.
Contains:
- NotificationORM (in-app notifications shown to a user)
"""
from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, Index, Integer, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from src.shared.infrastructure.database.base_model import Base


class NotificationORM(Base):
    """In-app notification addressed to one user."""
    __tablename__ = "notifications"

    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="info", server_default="info")
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())

    __table_args__ = (
        CheckConstraint(
            "type IN ('appointment', 'reminder', 'system', 'alert', 'info')",
            name="chk_notifications__type",
        ),
        Index("ix_notifications__user_created", "user_id", "created_at"),
    )


__all__ = ["NotificationORM"]
