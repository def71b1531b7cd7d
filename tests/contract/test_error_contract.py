import datetime as dt

import pytest

API = "/api/v1"


@pytest.mark.asyncio
async def test_missing_token_is_unauthorized(app_client):
    r = await app_client.get(f"{API}/appointments")
    assert r.status_code == 401
    data = r.json()
    assert {"code", "message"} <= set(data.keys())
    assert data["code"] == "unauthorized"


@pytest.mark.asyncio
async def test_bad_tokens_are_invalid_token(app_client, token_factory):
    expired = token_factory(user_id=10, role="patient", patient_id=1, expires_in=dt.timedelta(seconds=-30))
    forged = token_factory(user_id=10, role="patient", patient_id=1, secret="x" * 48)
    unknown_role = token_factory(user_id=10, role="janitor")

    for headers in (expired, forged, unknown_role, {"Authorization": "Bearer not-a-jwt"}):
        r = await app_client.get(f"{API}/appointments", headers=headers)
        assert r.status_code == 401
        assert r.json()["code"] == "invalid_token"


@pytest.mark.asyncio
async def test_public_route_ignores_a_bad_token(app_client):
    r = await app_client.get(f"{API}/availability/doctors/7", headers={"Authorization": "Bearer junk"})
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_error_body_carries_the_request_id(app_client, patient_headers):
    r = await app_client.get(
        f"{API}/appointments/1",
        headers={**patient_headers, "X-Request-ID": "req-123"},
    )
    assert r.status_code == 404
    body = r.json()
    assert body == {
        "code": "appointment_not_found",
        "message": "Appointment not found",
        "details": {"appointment_id": 1},
        "correlation_id": "req-123",
    }
    assert r.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_request_id_is_generated_when_missing(app_client):
    r = await app_client.get("/health")
    assert r.headers.get("X-Request-ID")


@pytest.mark.asyncio
async def test_request_validation_uses_the_contract_shape(app_client, patient_headers):
    r = await app_client.post(
        f"{API}/appointments",
        json={"doctorId": "seven", "appointmentDate": "2024-01-10"},
        headers=patient_headers,
    )
    assert r.status_code == 422
    body = r.json()
    assert body["code"] == "validation_error"
    assert body["details"]["errors"]


@pytest.mark.asyncio
async def test_profile_less_patient_cannot_list(app_client, token_factory):
    r = await app_client.get(f"{API}/appointments", headers=token_factory(user_id=12, role="patient"))
    assert r.status_code == 404
    assert r.json()["message"] == "Patient profile not found for this user"
