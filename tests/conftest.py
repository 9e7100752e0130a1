from types import SimpleNamespace
from typing import AsyncGenerator
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.enums import UserRole
from app.core.models import SchoolClass, Student, Teacher
from app.db.session import Base, get_db
from app.main import app

from tests.helpers import OTHER_SCHOOL_ID, SCHOOL_ID


@pytest.fixture()
async def engine(tmp_path):
    """One SQLite file per test, so separate sessions really are separate connections."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False, future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
def admin_user() -> CurrentUser:
    return CurrentUser(id=uuid4(), school_id=SCHOOL_ID, role=UserRole.ADMIN)


@pytest.fixture()
def login_as():
    """Switch the identity the API sees for the rest of the test."""

    def _login(user: CurrentUser) -> CurrentUser:
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    return _login


@pytest.fixture()
async def client(session_factory, admin_user, login_as) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app, a fresh DB session per request, logged in as admin."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    login_as(admin_user)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
async def school(db_session: AsyncSession) -> SimpleNamespace:
    """Two classes, three teachers (one in another school) and a handful of students."""
    class_a = SchoolClass(school_id=SCHOOL_ID, name="Class 5", grade="5", section="A")
    class_b = SchoolClass(school_id=SCHOOL_ID, name="Class 6", grade="6", section="B")
    math_teacher = Teacher(school_id=SCHOOL_ID, name="Asha Rao", email="asha@school.test")
    science_teacher = Teacher(school_id=SCHOOL_ID, name="Ben Okafor", email="ben@school.test")
    outside_teacher = Teacher(school_id=OTHER_SCHOOL_ID, name="Cam Lee", email="cam@other.test")
    db_session.add_all([class_a, class_b, math_teacher, science_teacher, outside_teacher])
    await db_session.flush()

    students = [
        Student(school_id=SCHOOL_ID, name="Dev", email="dev@school.test", roll_number="1", assigned_class_id=class_a.id),
        Student(school_id=SCHOOL_ID, name="Eli", email="eli@school.test", roll_number="2", assigned_class_id=class_a.id),
    ]
    inactive = Student(
        school_id=SCHOOL_ID, name="Fay", email="fay@school.test", roll_number="3",
        assigned_class_id=class_a.id, is_active=False,
    )
    other_class = Student(
        school_id=SCHOOL_ID, name="Gus", email="gus@school.test", roll_number="4", assigned_class_id=class_b.id
    )
    other_school = Student(
        school_id=OTHER_SCHOOL_ID, name="Hal", email="hal@other.test", roll_number="5", assigned_class_id=class_a.id
    )
    db_session.add_all(students + [inactive, other_class, other_school])
    await db_session.commit()

    return SimpleNamespace(
        class_a=class_a,
        class_b=class_b,
        math_teacher=math_teacher,
        science_teacher=science_teacher,
        outside_teacher=outside_teacher,
        students=students,
        inactive_student=inactive,
        other_class_student=other_class,
        other_school_student=other_school,
    )