"""Pytest configuration and fixtures."""
import os

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ.setdefault("LOG_FORMAT", "text")

from fieldops.main import app  # noqa: E402
from fieldops.database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from fieldops.core.security import RoleName  # noqa: E402
from fieldops.config import settings  # noqa: E402
from fieldops.crud.user import role as role_crud, user as user_crud  # noqa: E402
from fieldops.models.user import User  # noqa: E402
from fieldops.services.auth_service import AuthService  # noqa: E402
from fieldops.services.bootstrap_service import bootstrap  # noqa: E402

PASSWORD = "testpassword"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine):
    """Create a test database session with roles and the superadmin seeded."""
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        await bootstrap(session)
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession):
    """Create a test client overriding database dependency."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()


async def make_user(db: AsyncSession, email: str, role_name: str, name: str = None, **fields) -> User:
    """Create a user holding one built-in role."""
    role_obj = await role_crud.get_by_name(db, name=role_name)
    user = User(
        name=name or email.split("@")[0].title(),
        email=email,
        password_hash=AuthService.hash_password(PASSWORD),
        **fields,
    )
    user.roles = [role_obj]
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def bearer(db: AsyncSession, user: User) -> dict:
    tokens = await AuthService.issue_token(db, user)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest_asyncio.fixture
async def superadmin(db_session: AsyncSession):
    return await user_crud.get_by_email(db_session, email=settings.DEFAULT_ADMIN_EMAIL)


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession):
    return await make_user(db_session, "admin@example.com", RoleName.ADMIN.value, name="Admin User")


@pytest_asyncio.fixture
async def employee(db_session: AsyncSession):
    return await make_user(
        db_session,
        "employee@example.com",
        RoleName.EMPLOYEE.value,
        name="Field Employee",
        department="Operations",
    )


@pytest_asyncio.fixture
async def other_employee(db_session: AsyncSession):
    return await make_user(
        db_session,
        "other@example.com",
        RoleName.EMPLOYEE.value,
        name="Other Employee",
        department="Logistics",
    )


@pytest_asyncio.fixture
async def superadmin_headers(db_session, superadmin):
    return await bearer(db_session, superadmin)


@pytest_asyncio.fixture
async def admin_headers(db_session, admin):
    return await bearer(db_session, admin)


@pytest_asyncio.fixture
async def employee_headers(db_session, employee):
    return await bearer(db_session, employee)


@pytest_asyncio.fixture
async def other_headers(db_session, other_employee):
    return await bearer(db_session, other_employee)
