from __future__ import annotations

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from src.audit.application.audit_log_service import AuditLogService
from src.audit.domain.entities import AuditAction, AuditEntityType
from src.dependencies import get_audit_log_service, get_availability_service, require_roles
from src.scheduling.api.routes.access import doctor_id_for_slots, ensure_can_manage_slot
from src.scheduling.api.schemas import SlotCreateItem, SlotResponse, SlotUpdateRequest
from src.scheduling.application.services.availability_service import AvailabilityService
from src.scheduling.domain.entities.availability_slot import AvailabilitySlot, SlotDraft, SlotPatch
from src.scheduling.domain.exceptions import SlotNotFoundError
from src.shared.roles import Role
from src.shared.security import Principal

router = APIRouter(prefix="/availability", tags=["availability"])

_ENTITY = AuditEntityType.AVAILABILITY.value
_manage = require_roles(Role.DOCTOR, Role.ADMIN)


async def _load_manageable(slot_id: int, principal: Principal, svc: AvailabilityService) -> AvailabilitySlot:
    slot = await svc.get_slot(slot_id)
    if slot is None:
        raise SlotNotFoundError(slot_id)
    ensure_can_manage_slot(principal, slot)
    return slot


@router.get("/doctors/{doctor_id}", response_model=List[SlotResponse])
async def get_doctor_availability(
    doctor_id: int,
    on_date: Optional[dt.date] = Query(default=None, alias="date"),
    until: Optional[dt.date] = Query(default=None, alias="endDate"),
    svc: AvailabilityService = Depends(get_availability_service),
):
    return await svc.get_doctor_availability(doctor_id, on_date, until=until)


@router.post("", response_model=List[SlotResponse], status_code=status.HTTP_201_CREATED)
async def create_availability(
    slots: List[SlotCreateItem],
    doctor_id: Optional[int] = Query(default=None, alias="doctorId"),
    principal: Principal = Depends(_manage),
    svc: AvailabilityService = Depends(get_availability_service),
    audit: AuditLogService = Depends(get_audit_log_service),
):
    owner = doctor_id_for_slots(principal, doctor_id)
    drafts = [SlotDraft(slot_date=s.slot_date, slot_time=s.slot_time, is_available=s.is_available) for s in slots]
    created = await svc.set_availability(owner, drafts)
    for slot in created:
        await audit.log_action(principal.user_id, AuditAction.CREATE.value, _ENTITY, slot.id)
    return created


@router.put("/{slot_id}", response_model=SlotResponse)
async def update_slot(
    slot_id: int,
    payload: SlotUpdateRequest,
    principal: Principal = Depends(_manage),
    svc: AvailabilityService = Depends(get_availability_service),
    audit: AuditLogService = Depends(get_audit_log_service),
):
    await _load_manageable(slot_id, principal, svc)
    updated = await svc.update_slot(
        slot_id,
        SlotPatch(slot_date=payload.slot_date, slot_time=payload.slot_time, is_available=payload.is_available),
    )
    if updated is None:
        raise SlotNotFoundError(slot_id)
    await audit.log_action(principal.user_id, AuditAction.UPDATE.value, _ENTITY, slot_id)
    return updated


@router.delete("/{slot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_slot(
    slot_id: int,
    principal: Principal = Depends(_manage),
    svc: AvailabilityService = Depends(get_availability_service),
    audit: AuditLogService = Depends(get_audit_log_service),
):
    await _load_manageable(slot_id, principal, svc)
    if not await svc.delete_slot(slot_id):
        raise SlotNotFoundError(slot_id)
    await audit.log_action(principal.user_id, AuditAction.DELETE.value, _ENTITY, slot_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
