from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from src.dependencies import get_current_principal, get_notification_service
from src.notifications.api.schemas import NotificationResponse
from src.notifications.application.notification_service import NotificationService
from src.shared.exceptions import NotFoundError
from src.shared.roles import Role
from src.shared.security import Principal

router = APIRouter(prefix="/notifications", tags=["notifications"])


def recipient_id(principal: Principal) -> int:
    """
    Appointment notices are addressed to the patient id, so a patient's inbox
    is keyed by patient_id; everyone else reads by user id.
    """
    if principal.role is Role.PATIENT and principal.patient_id is not None:
        return principal.patient_id
    return principal.user_id


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    principal: Principal = Depends(get_current_principal),
    svc: NotificationService = Depends(get_notification_service),
):
    return await svc.get_user_notifications(recipient_id(principal))


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_as_read(
    notification_id: int,
    principal: Principal = Depends(get_current_principal),
    svc: NotificationService = Depends(get_notification_service),
):
    return await svc.mark_as_read(notification_id, user_id=recipient_id(principal))


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: int,
    principal: Principal = Depends(get_current_principal),
    svc: NotificationService = Depends(get_notification_service),
):
    if not await svc.delete_notification(notification_id, user_id=recipient_id(principal)):
        raise NotFoundError("Notification not found", code="notification_not_found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
