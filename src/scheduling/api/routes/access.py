"""
Caller-based narrowing for the scheduling routes.

- patients: only their own appointments, always book for themselves
- doctors: only their own appointments and slots
- admins: anything, but must name the patient/doctor explicitly
"""
from __future__ import annotations

from typing import Optional

from src.scheduling.domain.entities.appointment import Appointment, AppointmentStatus
from src.scheduling.domain.entities.availability_slot import AvailabilitySlot
from src.scheduling.domain.repositories.appointment_repository import AppointmentCriteria
from src.shared.exceptions import ForbiddenError, NotFoundError, ValidationError
from src.shared.roles import Role
from src.shared.security import Principal


def own_patient_id(principal: Principal) -> int:
    if principal.patient_id is None:
        raise NotFoundError("Patient profile not found for this user")
    return principal.patient_id


def own_doctor_id(principal: Principal) -> int:
    if principal.doctor_id is None:
        raise NotFoundError("Doctor profile not found for this user")
    return principal.doctor_id


def appointment_criteria_for(
    principal: Principal,
    *,
    patient_id: Optional[int] = None,
    doctor_id: Optional[int] = None,
    status: Optional[AppointmentStatus] = None,
) -> AppointmentCriteria:
    if principal.role is Role.PATIENT:
        patient_id = own_patient_id(principal)
    elif principal.role is Role.DOCTOR:
        doctor_id = own_doctor_id(principal)
    return AppointmentCriteria(patient_id=patient_id, doctor_id=doctor_id, status=status)


def patient_id_for_booking(principal: Principal, requested: Optional[int]) -> int:
    if principal.role is Role.PATIENT:
        return own_patient_id(principal)
    if requested is None:
        raise ValidationError(
            "patientId is required for admin/doctor",
            details={"field": "patientId"},
        )
    return requested


def ensure_can_access(principal: Principal, appointment: Appointment) -> None:
    if principal.role is Role.PATIENT and appointment.patient_id != principal.patient_id:
        raise ForbiddenError("Access denied: not your appointment")
    if principal.role is Role.DOCTOR and appointment.doctor_id != principal.doctor_id:
        raise ForbiddenError("Access denied: not your appointment")


def doctor_id_for_slots(principal: Principal, requested: Optional[int]) -> int:
    if principal.role is Role.DOCTOR:
        own = own_doctor_id(principal)
        if requested is not None and requested != own:
            raise ForbiddenError("Access denied: You can only manage your own availability")
        return own
    if requested is None:
        raise ValidationError("doctorId is required for admin", details={"field": "doctorId"})
    return requested


def ensure_can_manage_slot(principal: Principal, slot: AvailabilitySlot) -> None:
    if principal.role is Role.DOCTOR and slot.doctor_id != principal.doctor_id:
        raise ForbiddenError("Access denied: You can only manage your own availability")
