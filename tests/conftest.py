import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("LOG_LEVEL", "warning")

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from clinic_api.auth.auth_service import hash_password, issue_token_for
from clinic_api.common.config import settings
from clinic_api.common.database.database import get_db_session
from clinic_api.main import app
from clinic_api.models.models import Base, Doctor, Patient, User, UserRole

TEST_PASSWORD = "Password123!"
_password_hash = None


def _hashed_password() -> str:
    # bcrypt is slow; hash the shared test password once
    global _password_hash
    if _password_hash is None:
        _password_hash = hash_password(TEST_PASSWORD)
    return _password_hash


@dataclass
class Actor:
    user: User
    profile: Optional[Any]
    headers: dict

    @property
    def profile_id(self) -> str:
        return str(self.profile.id)


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    target = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(target))
    return target


@pytest.fixture
async def client(session_factory):
    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def create_actor(
    session: AsyncSession,
    role: UserRole,
    name: str,
    email: str,
    **profile_fields
) -> Actor:
    user = User(name=name, email=email, password_hash=_hashed_password(), role=role)
    session.add(user)
    await session.flush()

    profile = None
    if role == UserRole.PATIENT:
        profile = Patient(user_id=user.id, **profile_fields)
    elif role == UserRole.DOCTOR:
        defaults = {
            "specialization": "Cardiology",
            "license_number": f"LIC-{email}",
            "experience": 10,
            "education": [],
            "qualifications": [],
            "consultation_fee": Decimal("100.00"),
            "department": "Cardiology",
        }
        defaults.update(profile_fields)
        profile = Doctor(user_id=user.id, **defaults)
    if profile is not None:
        session.add(profile)

    await session.commit()
    return Actor(user=user, profile=profile, headers={"Authorization": f"Bearer {issue_token_for(user)}"})


@pytest.fixture
async def admin(db_session):
    return await create_actor(db_session, UserRole.ADMIN, "Alice Admin", "admin@clinic.com")


@pytest.fixture
async def patient(db_session):
    return await create_actor(db_session, UserRole.PATIENT, "John Smith", "john@clinic.com")


@pytest.fixture
async def other_patient(db_session):
    return await create_actor(db_session, UserRole.PATIENT, "Emily Davis", "emily@clinic.com")


@pytest.fixture
async def doctor(db_session):
    return await create_actor(db_session, UserRole.DOCTOR, "Sarah Johnson", "sarah@clinic.com")


@pytest.fixture
async def other_doctor(db_session):
    return await create_actor(
        db_session, UserRole.DOCTOR, "Michael Chen", "michael@clinic.com",
        specialization="Pediatrics", department="Pediatrics"
    )
