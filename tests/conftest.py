import datetime as dt
from typing import List, Optional, Tuple

import jwt
import pytest
from httpx import ASGITransport, AsyncClient

from src.config import Settings
from src.main import create_app
from src.notifications.domain.entities import NotificationMessage
from src.scheduling.application.factories import (
    make_availability_service,
    make_scheduling_service,
    make_uow_factory,
)
from src.scheduling.application.services.slot_locks import SlotLockRegistry
from src.scheduling.domain.entities.availability_slot import AvailabilitySlot, SlotDraft
from src.scheduling.domain.value_objects.slot_key import parse_date, parse_time
from src.shared.database import Database

TEST_JWT_SECRET = "test-only-secret-with-enough-bytes-for-hs256-0123456789"


class RecordingSink:
    """NotificationSink that keeps every message in memory."""

    def __init__(self) -> None:
        self.messages: List[NotificationMessage] = []

    async def send(self, message: NotificationMessage) -> None:
        self.messages.append(message)


class FailingSink:
    async def send(self, message: NotificationMessage) -> None:
        raise RuntimeError("notification backend down")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        DATABASE_CREATE_ALL=False,
        JWT_SECRET=TEST_JWT_SECRET,
        JWT_ALGORITHM="HS256",
        NOTIFICATION_SINK="database",
        LOG_LEVEL="WARNING",
        JSON_LOGS=False,
        TESTING=True,
    )


@pytest.fixture
async def database():
    db = Database("sqlite+aiosqlite://")
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def locks() -> SlotLockRegistry:
    return SlotLockRegistry()


@pytest.fixture
def notifier() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def uow_factory(database):
    return make_uow_factory(database.session_factory)


@pytest.fixture
def scheduling(database, notifier, locks):
    return make_scheduling_service(database.session_factory, notifier, locks)


@pytest.fixture
def availability(database, locks):
    return make_availability_service(database.session_factory, locks)


@pytest.fixture
def seed_slots(availability):
    """await seed_slots(doctor_id, ("2024-01-10", "10:00"), ...)"""
    async def _seed(doctor_id: int, *slots: Tuple[str, str]) -> List[AvailabilitySlot]:
        drafts = [SlotDraft(slot_date=parse_date(d), slot_time=parse_time(t)) for d, t in slots]
        return await availability.set_availability(doctor_id, drafts)

    return _seed


# ---------- HTTP ----------

@pytest.fixture
def app(settings, database):
    return create_app(settings=settings, database=database)


@pytest.fixture
async def app_client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


def make_token(
    *,
    user_id: int,
    role: str,
    patient_id: Optional[int] = None,
    doctor_id: Optional[int] = None,
    secret: str = TEST_JWT_SECRET,
    expires_in: dt.timedelta = dt.timedelta(hours=1),
) -> str:
    claims = {
        "sub": str(user_id),
        "role": role,
        "exp": dt.datetime.now(dt.timezone.utc) + expires_in,
    }
    if patient_id is not None:
        claims["patient_id"] = patient_id
    if doctor_id is not None:
        claims["doctor_id"] = doctor_id
    return jwt.encode(claims, secret, algorithm="HS256")


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def patient_headers() -> dict:
    """user 10 is patient 1"""
    return bearer(make_token(user_id=10, role="patient", patient_id=1))


@pytest.fixture
def other_patient_headers() -> dict:
    return bearer(make_token(user_id=11, role="patient", patient_id=2))


@pytest.fixture
def doctor_headers() -> dict:
    """user 20 is doctor 7"""
    return bearer(make_token(user_id=20, role="doctor", doctor_id=7))


@pytest.fixture
def other_doctor_headers() -> dict:
    return bearer(make_token(user_id=21, role="doctor", doctor_id=8))


@pytest.fixture
def admin_headers() -> dict:
    return bearer(make_token(user_id=1, role="admin"))


@pytest.fixture
def failing_scheduling(database, locks):
    """SchedulingService whose notification backend always raises."""
    return make_scheduling_service(database.session_factory, FailingSink(), locks)


@pytest.fixture
def token_factory():
    """token_factory(user_id=.., role=.., ...) -> Authorization headers"""
    def _headers(**kwargs) -> dict:
        return bearer(make_token(**kwargs))

    return _headers
