# src/dependencies.py
"""
FastAPI dependencies: caller identity, role guards and the services
built once per app in `create_app` (see app.state).
"""
from __future__ import annotations

from typing import Callable

from fastapi import Depends, Request

from src.audit.application.audit_log_service import AuditLogService
from src.notifications.application.notification_service import NotificationService
from src.scheduling.application.services.availability_service import AvailabilityService
from src.scheduling.application.services.scheduling_service import SchedulingService
from src.shared.exceptions import ForbiddenError, UnauthorizedError
from src.shared.roles import Role, has_any_role
from src.shared.security import Principal


# --- Services (constructed in create_app) ---
def get_scheduling_service(request: Request) -> SchedulingService:
    return request.app.state.scheduling_service


def get_availability_service(request: Request) -> AvailabilityService:
    return request.app.state.availability_service


def get_notification_service(request: Request) -> NotificationService:
    return request.app.state.notification_service


def get_audit_log_service(request: Request) -> AuditLogService:
    return request.app.state.audit_log_service


# --- Current caller & role guard ---
async def get_current_principal(request: Request) -> Principal:
    """
    Caller resolved by JwtContextMiddleware.
    401 `unauthorized` without a token, 401 `invalid_token` for a bad one.
    """
    principal = getattr(request.state, "principal", None)
    if principal is not None:
        return principal
    auth_error = getattr(request.state, "auth_error", None)
    if auth_error is not None:
        raise auth_error
    raise UnauthorizedError("Authentication required")


def require_roles(*roles: Role) -> Callable:
    """
    FastAPI dependency generator that enforces the caller holds one of `roles`.

    Usage:
        @router.delete("/{id}", dependencies=[Depends(require_roles(Role.ADMIN))])
    """
    async def _enforce(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not has_any_role(principal.role, roles):
            raise ForbiddenError(
                "Insufficient permissions",
                details={"required": [r.value for r in roles], "role": principal.role.value},
            )
        return principal

    return _enforce
