# src/audit/infrastructure/models.py
"""
Audit models.
Contains:
- AuditLogORM (append-only record of mutations made through the API)
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.shared.infrastructure.database.base_model import Base


class AuditLogORM(Base):
    """One successful mutation by one caller."""
    __tablename__ = "audit_logs"

    user_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        Index("ix_audit_logs__user_created", "user_id", "created_at"),
        Index("ix_audit_logs__entity", "entity_type", "entity_id"),
    )


__all__ = ["AuditLogORM"]
