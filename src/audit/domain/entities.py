from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    RESCHEDULE = "RESCHEDULE"
    CANCEL = "CANCEL"


class AuditEntityType(str, Enum):
    APPOINTMENT = "appointment"
    AVAILABILITY = "availability"


@dataclass(frozen=True, slots=True)
class AuditLog:
    id: int
    user_id: Optional[int]
    action: str
    entity_type: str
    entity_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True, slots=True)
class AuditLogCriteria:
    """Listing filter; None means "any". Dates bound created_at inclusively."""
    user_id: Optional[int] = None
    action: Optional[str] = None
    entity_type: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
