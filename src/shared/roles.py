# src/shared/roles.py

from enum import Enum
from typing import Iterable, Optional


class Role(str, Enum):
    """
    Caller roles of the clinic API.

    - ADMIN: clinic administrator, unrestricted
    - DOCTOR: manages own availability and sees own appointments
    - PATIENT: books for self and sees own appointments
    """
    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"


def parse_role(value: Optional[str]) -> Optional[Role]:
    """Map a raw claim value (any case) to a Role, or None if unknown."""
    if not value:
        return None
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        return None


def has_any_role(actual_role: Optional[Role], allowed: Iterable[Role]) -> bool:
    return actual_role is not None and actual_role in set(allowed)
