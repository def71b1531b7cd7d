from __future__ import annotations

from typing import List, Optional

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.audit.domain.entities import AuditLog, AuditLogCriteria
from src.audit.infrastructure.models import AuditLogORM
from src.shared.infrastructure.database.base_model import as_utc


def _to_domain(row: AuditLogORM) -> AuditLog:
    return AuditLog(
        id=row.id,
        user_id=row.user_id,
        action=row.action,
        entity_type=row.entity_type,
        entity_id=row.entity_id,
        created_at=as_utc(row.created_at),
    )


class AuditLogRepositoryImpl:

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        user_id: Optional[int],
        action: str,
        entity_type: str,
        entity_id: Optional[int],
    ) -> AuditLog:
        row = AuditLogORM(user_id=user_id, action=action, entity_type=entity_type, entity_id=entity_id)
        self._session.add(row)
        await self._session.flush()
        return _to_domain(row)

    async def find_all(self, criteria: AuditLogCriteria) -> List[AuditLog]:
        conds = []
        if criteria.user_id is not None:
            conds.append(AuditLogORM.user_id == criteria.user_id)
        if criteria.action:
            conds.append(AuditLogORM.action == criteria.action)
        if criteria.entity_type:
            conds.append(AuditLogORM.entity_type == criteria.entity_type)
        if criteria.start is not None:
            conds.append(AuditLogORM.created_at >= criteria.start)
        if criteria.end is not None:
            conds.append(AuditLogORM.created_at <= criteria.end)

        stmt = select(AuditLogORM)
        if conds:
            stmt = stmt.where(and_(*conds))
        stmt = stmt.order_by(AuditLogORM.created_at.desc(), AuditLogORM.id.desc())
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_to_domain(r) for r in rows]

    async def get(self, audit_log_id: int) -> Optional[AuditLog]:
        row = await self._session.get(AuditLogORM, audit_log_id)
        return _to_domain(row) if row else None
