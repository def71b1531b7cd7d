from __future__ import annotations

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from src.audit.api.schemas import AuditLogResponse
from src.audit.application.audit_log_service import AuditLogService
from src.audit.domain.entities import AuditLogCriteria
from src.dependencies import get_audit_log_service, require_roles
from src.shared.exceptions import NotFoundError
from src.shared.roles import Role

router = APIRouter(
    prefix="/audit-logs",
    tags=["audit"],
    dependencies=[Depends(require_roles(Role.ADMIN))],
)


@router.get("", response_model=List[AuditLogResponse])
async def list_audit_logs(
    user_id: Optional[int] = Query(default=None, alias="userId"),
    action: Optional[str] = Query(default=None),
    entity_type: Optional[str] = Query(default=None, alias="entityType"),
    start: Optional[dt.datetime] = Query(default=None, alias="startDate"),
    end: Optional[dt.datetime] = Query(default=None, alias="endDate"),
    svc: AuditLogService = Depends(get_audit_log_service),
):
    criteria = AuditLogCriteria(
        user_id=user_id, action=action, entity_type=entity_type, start=start, end=end
    )
    return await svc.get_audit_logs(criteria)


@router.get("/{audit_log_id}", response_model=AuditLogResponse)
async def get_audit_log(
    audit_log_id: int,
    svc: AuditLogService = Depends(get_audit_log_service),
):
    found = await svc.get_audit_log_by_id(audit_log_id)
    if found is None:
        raise NotFoundError("Audit log not found")
    return found
