# src/shared/security.py
"""
Caller identity resolved from a Bearer JWT.

Tokens are issued elsewhere; this module only verifies them and maps the
claims onto a Principal:

    sub         -> user_id
    role        -> "patient" | "doctor" | "admin"
    patient_id  -> patient profile id (patients)
    doctor_id   -> doctor profile id (doctors)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import jwt

from src.config import Settings
from src.shared.exceptions import UnauthorizedError
from src.shared.roles import Role, parse_role


@dataclass(frozen=True, slots=True)
class Principal:
    user_id: int
    role: Role
    patient_id: Optional[int] = None
    doctor_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def decode_token(token: str, settings: Settings) -> Dict[str, Any]:
    """
    Decode and verify a JWT token.

    Raises:
        UnauthorizedError: If token is invalid, expired, or malformed
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_exp": True},
        )
    except jwt.ExpiredSignatureError as e:
        raise UnauthorizedError("Token has expired", code="invalid_token") from e
    except jwt.InvalidTokenError as e:
        raise UnauthorizedError(f"Invalid token: {e}", code="invalid_token") from e


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def principal_from_claims(claims: Dict[str, Any]) -> Principal:
    role = parse_role(claims.get("role"))
    if role is None:
        raise UnauthorizedError("Token carries no known role", code="invalid_token")
    try:
        return Principal(
            user_id=int(claims["sub"]),
            role=role,
            patient_id=_optional_int(claims.get("patient_id")),
            doctor_id=_optional_int(claims.get("doctor_id")),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise UnauthorizedError("Invalid subject claims in token", code="invalid_token") from e


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    return authorization.split(" ", 1)[1].strip() or None
