from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.audit.domain.entities import AuditLog, AuditLogCriteria
from src.audit.infrastructure.repository import AuditLogRepositoryImpl
from src.shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


class AuditLogService:
    """
    Persists audit rows in their own transaction, so a failed audit write
    never touches the mutation it describes.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def log_action(
        self,
        user_id: Optional[int],
        action: str,
        entity_type: str,
        entity_id: Optional[int] = None,
    ) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await AuditLogRepositoryImpl(session).create(user_id, action, entity_type, entity_id)
        except Exception:
            logger.error(
                "audit_log_failed",
                user_id=user_id,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                exc_info=True,
            )

    # AuditSink
    record = log_action

    async def get_audit_logs(self, criteria: AuditLogCriteria) -> List[AuditLog]:
        async with self._session_factory() as session:
            return await AuditLogRepositoryImpl(session).find_all(criteria)

    async def get_audit_log_by_id(self, audit_log_id: int) -> Optional[AuditLog]:
        async with self._session_factory() as session:
            return await AuditLogRepositoryImpl(session).get(audit_log_id)
