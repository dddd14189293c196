import datetime as dt
import os

os.environ.setdefault("DATABASE_URI", "sqlite://:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["CLINIC_TIMEZONE"] = "UTC"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from controllers.auth_controller import issue_token, ph
from helpers.tortoise_config import MODEL_MODULES
from helpers.validators import clinic_today
from models.doctor_profile import DoctorProfile
from models.user import User, UserRole


@pytest_asyncio.fixture
async def db(tmp_path):
    await Tortoise.init(
        db_url=f"sqlite://{tmp_path / 'test.sqlite3'}",
        modules={"models": MODEL_MODULES},
    )
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


async def make_user(name: str, email: str, role: UserRole = UserRole.PATIENT) -> User:
    return await User.create(name=name, email=email, password=ph.hash("secret123"), role=role)


async def make_doctor(name: str, email: str, specialization: str = "Cardiology") -> User:
    doctor = await make_user(name, email, UserRole.DOCTOR)
    await DoctorProfile.create(
        user=doctor,
        specialization=specialization,
        experience=10,
        phone="555-0100",
        bio="Experienced physician",
        registration_id=f"MD-{doctor.id:06d}",
    )
    return doctor


@pytest_asyncio.fixture
async def patient(db) -> User:
    return await make_user("Alice Patient", "alice@example.com")


@pytest_asyncio.fixture
async def other_patient(db) -> User:
    return await make_user("Bob Patient", "bob@example.com")


@pytest_asyncio.fixture
async def doctor(db) -> User:
    return await make_doctor("Gregory House", "house@example.com", "Diagnostics")


@pytest_asyncio.fixture
async def other_doctor(db) -> User:
    return await make_doctor("Lisa Cuddy", "cuddy@example.com", "Endocrinology")


@pytest_asyncio.fixture
async def admin(db) -> User:
    return await make_user("Site Admin", "admin@example.com", UserRole.ADMIN)


@pytest.fixture
def future_day() -> dt.date:
    return clinic_today() + dt.timedelta(days=30)


@pytest.fixture
def future_date(future_day: dt.date) -> str:
    return future_day.isoformat()


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {issue_token(user)}"}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest_asyncio.fixture
async def client(db):
    from main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def sent_emails(monkeypatch) -> list:
    """Records background email sends instead of talking to SMTP."""
    calls = []

    def record(*args):
        calls.append(args)
        return True

    monkeypatch.setattr("controllers.appointment_controller.send_status_update_email", record)
    monkeypatch.setattr("controllers.prescription_controller.send_prescription_email", record)
    return calls
