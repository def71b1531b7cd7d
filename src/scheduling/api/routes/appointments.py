from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status

from src.audit.application.audit_log_service import AuditLogService
from src.audit.domain.entities import AuditAction, AuditEntityType
from src.dependencies import (
    get_audit_log_service,
    get_current_principal,
    get_scheduling_service,
    require_roles,
)
from src.scheduling.api.routes.access import appointment_criteria_for, ensure_can_access, patient_id_for_booking
from src.scheduling.api.schemas import (
    AppointmentCreateRequest,
    AppointmentResponse,
    AppointmentUpdateRequest,
    CancelRequest,
    RescheduleRequest,
)
from src.scheduling.application.dtos import CreateAppointmentCommand
from src.scheduling.application.services.scheduling_service import SchedulingService
from src.scheduling.domain.entities.appointment import Appointment, AppointmentPatch, AppointmentStatus
from src.scheduling.domain.exceptions import AppointmentNotFoundError
from src.shared.roles import Role
from src.shared.security import Principal

router = APIRouter(prefix="/appointments", tags=["appointments"])

_ENTITY = AuditEntityType.APPOINTMENT.value


async def _load_accessible(
    appointment_id: int,
    principal: Principal,
    svc: SchedulingService,
) -> Appointment:
    appointment = await svc.get_appointment_by_id(appointment_id)
    if appointment is None:
        raise AppointmentNotFoundError(appointment_id)
    ensure_can_access(principal, appointment)
    return appointment


@router.get("", response_model=List[AppointmentResponse])
async def list_appointments(
    patient_id: Optional[int] = Query(default=None, alias="patientId"),
    doctor_id: Optional[int] = Query(default=None, alias="doctorId"),
    status_filter: Optional[AppointmentStatus] = Query(default=None, alias="status"),
    principal: Principal = Depends(get_current_principal),
    svc: SchedulingService = Depends(get_scheduling_service),
):
    criteria = appointment_criteria_for(
        principal, patient_id=patient_id, doctor_id=doctor_id, status=status_filter
    )
    return await svc.get_appointments(criteria)


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    payload: AppointmentCreateRequest,
    principal: Principal = Depends(get_current_principal),
    svc: SchedulingService = Depends(get_scheduling_service),
    audit: AuditLogService = Depends(get_audit_log_service),
):
    command = CreateAppointmentCommand(
        patient_id=patient_id_for_booking(principal, payload.patient_id),
        doctor_id=payload.doctor_id,
        appointment_date=payload.appointment_date,
        appointment_time=payload.appointment_time,
        reason=payload.reason,
    )
    appointment = await svc.create_appointment(command)
    await audit.log_action(principal.user_id, AuditAction.CREATE.value, _ENTITY, appointment.id)
    return appointment


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    principal: Principal = Depends(get_current_principal),
    svc: SchedulingService = Depends(get_scheduling_service),
):
    return await _load_accessible(appointment_id, principal, svc)


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    payload: AppointmentUpdateRequest,
    principal: Principal = Depends(require_roles(Role.DOCTOR, Role.ADMIN)),
    svc: SchedulingService = Depends(get_scheduling_service),
    audit: AuditLogService = Depends(get_audit_log_service),
):
    await _load_accessible(appointment_id, principal, svc)
    patch = AppointmentPatch(
        appointment_date=payload.appointment_date,
        appointment_time=payload.appointment_time,
        status=payload.status,
        reason=payload.reason,
    )
    updated = await svc.update_appointment(appointment_id, patch)
    await audit.log_action(principal.user_id, AuditAction.UPDATE.value, _ENTITY, appointment_id)
    return updated


@router.patch("/{appointment_id}/reschedule", response_model=AppointmentResponse)
async def reschedule_appointment(
    appointment_id: int,
    payload: RescheduleRequest,
    principal: Principal = Depends(get_current_principal),
    svc: SchedulingService = Depends(get_scheduling_service),
    audit: AuditLogService = Depends(get_audit_log_service),
):
    await _load_accessible(appointment_id, principal, svc)
    updated = await svc.reschedule_appointment(appointment_id, payload.new_date_time, payload.reason)
    await audit.log_action(principal.user_id, AuditAction.RESCHEDULE.value, _ENTITY, appointment_id)
    return updated


@router.patch("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: int,
    payload: Optional[CancelRequest] = Body(default=None),
    principal: Principal = Depends(get_current_principal),
    svc: SchedulingService = Depends(get_scheduling_service),
    audit: AuditLogService = Depends(get_audit_log_service),
):
    await _load_accessible(appointment_id, principal, svc)
    reason = payload.reason if payload else None
    cancelled = await svc.cancel_appointment(appointment_id, reason)
    await audit.log_action(principal.user_id, AuditAction.CANCEL.value, _ENTITY, appointment_id)
    return cancelled


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appointment(
    appointment_id: int,
    principal: Principal = Depends(require_roles(Role.ADMIN)),
    svc: SchedulingService = Depends(get_scheduling_service),
    audit: AuditLogService = Depends(get_audit_log_service),
):
    if not await svc.delete_appointment(appointment_id):
        raise AppointmentNotFoundError(appointment_id)
    await audit.log_action(principal.user_id, AuditAction.DELETE.value, _ENTITY, appointment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
