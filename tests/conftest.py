"""Pytest configuration and shared fixtures."""

import shutil
import tempfile
from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from warden.core.database import create_session_factory, create_tables, get_db
from warden.core.errors import register_exception_handlers
from warden.rbac.services import RoleAssignmentService
from warden.rbac.subjects import StoredSubject
from warden.sync import ConfigSynchronizer, RolesConfig, SyncReport


# SQLite in-memory; StaticPool keeps every session on the same connection
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

EXAMPLE_CONFIG = {
    "roles": {
        "admin": {
            "name": "Administrator",
            "permissions": ["create", "read", "update", "delete"],
        },
        "viewer": {
            "name": "Viewer",
            "permissions": ["read"],
        },
    }
}


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for tests.

    The session uses the same factory settings as the package
    (no autoflush, no expiry on commit).
    """
    async with create_session_factory(engine)() as session:
        yield session
        await session.rollback()


@pytest.fixture
def roles_config() -> RolesConfig:
    """admin -> [create, read, update, delete], viewer -> [read]."""
    return RolesConfig.model_validate(EXAMPLE_CONFIG)


@pytest.fixture
async def seeded(db: AsyncSession, roles_config: RolesConfig) -> SyncReport:
    """Seed the example roles and permissions."""
    return await ConfigSynchronizer(db, roles_config).seed_roles()


@pytest.fixture
async def admin_user(db: AsyncSession, seeded: SyncReport) -> StoredSubject:
    """User 1 holding the admin role."""
    await RoleAssignmentService(db).give_role(1, "admin")
    return StoredSubject(db, 1)


@pytest.fixture
async def viewer_user(db: AsyncSession, seeded: SyncReport) -> StoredSubject:
    """User 2 holding the viewer role."""
    await RoleAssignmentService(db).give_role(2, "viewer")
    return StoredSubject(db, 2)


@pytest.fixture
async def app(db: AsyncSession) -> AsyncGenerator[FastAPI, None]:
    """Create a test application.

    A request carrying ``X-User-Id`` is authenticated as that user;
    any other request has no principal.
    """
    application = FastAPI()
    register_exception_handlers(application)

    @application.middleware("http")
    async def attach_subject(request: Request, call_next):
        user_id = request.headers.get("X-User-Id")
        if user_id:
            request.state.subject = StoredSubject(db, user_id)
        return await call_next(request)

    # Override database dependency
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test operations.

    Yields:
        Path to the temporary directory
    """
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)
