"""Pytest fixtures.

Every test gets its own in-memory SQLite database with the full schema, seeded
with a small school: one admin, two pembina, three students and one
extracurricular with a weekly schedule.
"""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "warning")

from types import SimpleNamespace
from typing import Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from sixkul.core.database import get_db
from sixkul.core.security import create_access_token, hash_password
from sixkul.main import app
from sixkul.models import (
    Base, User, Role, StudentProfile, PembinaProfile, Extracurricular, ExtracurricularStatus,
    Schedule, Enrollment, EnrollmentStatus,
)

PASSWORD = "rahasia123"
ACADEMIC_YEAR = "2025/2026"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


def _user(email: str, name: str, role: Role, password_hash: str) -> User:
    return User(
        username=email.split("@")[0],
        email=email,
        full_name=name,
        role=role.value,
        password_hash=password_hash,
        is_active=True,
        student_profile=None,
        pembina_profile=None,
    )


async def _load(db: AsyncSession, model, id):
    result = await db.execute(select(model).where(model.id == id))
    return result.scalar_one()


@pytest_asyncio.fixture
async def seed(db: AsyncSession) -> SimpleNamespace:
    """Seeded school. Objects are reloaded so every relationship is populated."""
    password_hash = hash_password(PASSWORD)

    admin = _user("admin@sixkul.sch.id", "Admin Sekolah", Role.ADMIN, password_hash)

    pembina_user = _user("budi@sixkul.sch.id", "Budi Santoso", Role.PEMBINA, password_hash)
    pembina_user.pembina_profile = PembinaProfile(nip="198501012010011001", expertise="Pramuka")
    other_pembina_user = _user("sari@sixkul.sch.id", "Sari Dewi", Role.PEMBINA, password_hash)
    other_pembina_user.pembina_profile = PembinaProfile(nip="198702022011012002", expertise="Musik")

    students = []
    for index, (name, class_name) in enumerate(
        [("Andi Pratama", "XI IPA 1"), ("Citra Lestari", "XI IPA 2"), ("Dodi Saputra", "X IPS 1")], start=1
    ):
        user = _user(f"siswa{index}@sixkul.sch.id", name, Role.SISWA, password_hash)
        user.student_profile = StudentProfile(nis=f"2024{index:04d}", class_name=class_name, major="IPA")
        students.append(user)

    ekskul = Extracurricular(
        name="Pramuka",
        category="Kepanduan",
        description="Latihan kepanduan rutin",
        status=ExtracurricularStatus.ACTIVE.value,
        pembina=pembina_user.pembina_profile,
    )
    other_ekskul = Extracurricular(
        name="Paduan Suara",
        category="Seni",
        status=ExtracurricularStatus.ACTIVE.value,
        pembina=other_pembina_user.pembina_profile,
    )
    schedule = Schedule(
        extracurricular=ekskul,
        day_of_week="MONDAY",
        start_time="15:00",
        end_time="17:00",
        location="Lapangan Utama",
    )
    enrollments = [
        Enrollment(
            student=students[0].student_profile, extracurricular=ekskul,
            status=EnrollmentStatus.ACTIVE.value, academic_year=ACADEMIC_YEAR,
        ),
        Enrollment(
            student=students[1].student_profile, extracurricular=ekskul,
            status=EnrollmentStatus.ACTIVE.value, academic_year=ACADEMIC_YEAR,
        ),
        Enrollment(
            student=students[2].student_profile, extracurricular=ekskul,
            status=EnrollmentStatus.PENDING.value, academic_year=ACADEMIC_YEAR,
        ),
    ]
    db.add_all([admin, pembina_user, other_pembina_user, *students, ekskul, other_ekskul, schedule, *enrollments])
    await db.commit()

    ids = SimpleNamespace(
        admin=admin.id,
        pembina_user=pembina_user.id,
        other_pembina_user=other_pembina_user.id,
        students=[s.id for s in students],
        ekskul=ekskul.id,
        other_ekskul=other_ekskul.id,
        schedule=schedule.id,
        enrollments=[e.id for e in enrollments],
    )
    db.expunge_all()

    student_users = [await _load(db, User, uid) for uid in ids.students]
    pembina = await _load(db, User, ids.pembina_user)
    other_pembina = await _load(db, User, ids.other_pembina_user)
    return SimpleNamespace(
        admin=await _load(db, User, ids.admin),
        pembina_user=pembina,
        pembina=pembina.pembina_profile,
        other_pembina_user=other_pembina,
        other_pembina=other_pembina.pembina_profile,
        student_users=student_users,
        students=[u.student_profile for u in student_users],
        ekskul=await _load(db, Extracurricular, ids.ekskul),
        other_ekskul=await _load(db, Extracurricular, ids.other_ekskul),
        schedule=await _load(db, Schedule, ids.schedule),
        active_enrollments=[await _load(db, Enrollment, eid) for eid in ids.enrollments[:2]],
        pending_enrollment=await _load(db, Enrollment, ids.enrollments[2]),
    )


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as http:
        yield http
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build a Bearer header for a seeded user."""
    def _headers(user: User) -> Dict[str, str]:
        token = create_access_token({"sub": str(user.id), "role": user.role, "email": user.email})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest_asyncio.fixture
async def fresh_db(session_factory):
    """Second session for reading back what another session committed."""
    async with session_factory() as session:
        yield session
