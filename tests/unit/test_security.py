import datetime as dt

import jwt
import pytest

from src.shared.exceptions import UnauthorizedError
from src.shared.roles import Role, has_any_role, parse_role
from src.shared.security import decode_token, extract_bearer_token, principal_from_claims


def _encode(settings, **claims):
    return jwt.encode(claims, settings.JWT_SECRET, algorithm="HS256")


def test_decode_and_map_claims(settings):
    token = _encode(settings, sub="20", role="Doctor", doctor_id=7)
    principal = principal_from_claims(decode_token(token, settings))
    assert principal.user_id == 20
    assert principal.role is Role.DOCTOR
    assert principal.doctor_id == 7
    assert principal.patient_id is None
    assert not principal.is_admin


def test_expired_token_is_rejected(settings):
    past = dt.datetime.now(dt.timezone.utc) - dt.timedelta(minutes=5)
    token = _encode(settings, sub="1", role="admin", exp=past)
    with pytest.raises(UnauthorizedError) as exc:
        decode_token(token, settings)
    assert exc.value.code == "invalid_token"
    assert exc.value.status_code == 401


def test_wrong_signature_is_rejected(settings):
    token = jwt.encode({"sub": "1", "role": "admin"}, "x" * 64, algorithm="HS256")
    with pytest.raises(UnauthorizedError):
        decode_token(token, settings)


@pytest.mark.parametrize(
    "claims",
    [
        {"sub": "1", "role": "nurse"},
        {"sub": "1"},
        {"role": "admin"},
        {"sub": "abc", "role": "admin"},
    ],
)
def test_unusable_claims(claims):
    with pytest.raises(UnauthorizedError):
        principal_from_claims(claims)


def test_bearer_extraction():
    assert extract_bearer_token("Bearer abc.def") == "abc.def"
    assert extract_bearer_token("bearer   abc ") == "abc"
    assert extract_bearer_token("Basic xyz") is None
    assert extract_bearer_token(None) is None


def test_role_helpers():
    assert parse_role(" ADMIN ") is Role.ADMIN
    assert parse_role("") is None
    assert has_any_role(Role.DOCTOR, [Role.DOCTOR, Role.ADMIN])
    assert not has_any_role(None, [Role.ADMIN])
