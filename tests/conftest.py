"""
Pytest fixtures for TaskTrack tests.
"""

import asyncio
import os
import tempfile
from datetime import timedelta
from typing import Any, Optional
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Ensure test config is set before importing tasktrack modules.
_TEST_DIR = tempfile.mkdtemp(prefix="tasktrack-test-")
os.environ.setdefault("TASKTRACK_ENV", "development")
os.environ.setdefault(
    "TASKTRACK_DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(_TEST_DIR, 'tasktrack.db')}",
)
os.environ.setdefault("TASKTRACK_JWT_SECRET", "test-secret-for-tasktrack")
os.environ.setdefault("TASKTRACK_BCRYPT_ROUNDS", "4")

from tasktrack.auth import hash_password, identity_service
from tasktrack.db import base as db_base
from tasktrack.db.base import Base
from tasktrack.db.repositories import UserRepository
from tasktrack.models import Priority, TaskCreate, User
from tasktrack.notify import ChangeNotifier, ConnectionRegistry
from tasktrack.utils.time import utc_now
import tasktrack.db.tables  # noqa: F401

pytest_plugins = ("pytest_asyncio",)


class FakeConnection:
    """In-memory stand-in for a live client connection."""

    def __init__(self, user_id: str, fail: bool = False, delay: float = 0.0):
        self.connection_id = str(uuid4())
        self.user_id = user_id
        self.fail = fail
        self.delay = delay
        self.frames: list[dict[str, Any]] = []
        self.closed_with: Optional[int] = None

    async def send_json(self, data: Any) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise ConnectionError("client went away")
        self.frames.append(data)

    async def close(self, code: int = 1000) -> None:
        self.closed_with = code

    def events(self) -> list[str]:
        return [frame["event"] for frame in self.frames]


@pytest.fixture
async def engine(tmp_path):
    """Create a per-test SQLite engine and wire it into tasktrack.db.base."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'tasktrack.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Override global engine/session factory for dependency injection.
    original_engine = db_base.engine
    original_factory = db_base.async_session_factory
    db_base.engine = engine
    db_base.async_session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    yield engine

    db_base.engine = original_engine
    db_base.async_session_factory = original_factory
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    """Provide a database session per test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def users(session) -> dict[str, User]:
    """Three committed users: alice, bob and carol."""
    repo = UserRepository(session)
    password_hash = hash_password("secret123")
    created = {}
    for name in ("Alice", "Bob", "Carol"):
        created[name.lower()] = await repo.create(
            email=f"{name.lower()}@example.com",
            name=name,
            password_hash=password_hash,
        )
    await session.commit()
    return created


@pytest.fixture
def make_task_input():
    """Build a TaskCreate with sensible defaults."""

    def _make(**overrides) -> TaskCreate:
        values = {
            "title": "Write release notes",
            "description": "Summarize the changes since the last release",
            "due_date": utc_now() + timedelta(days=3),
            "priority": Priority.MEDIUM,
        }
        values.update(overrides)
        return TaskCreate(**values)

    return _make


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def notifier(registry) -> ChangeNotifier:
    return ChangeNotifier(registry, queue_size=100, send_timeout=1.0)


@pytest.fixture
def make_connection(registry):
    """Register a FakeConnection for a user."""

    def _make(user_id: str, **kwargs) -> FakeConnection:
        connection = FakeConnection(user_id, **kwargs)
        registry.register(user_id, connection)
        return connection

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {identity_service.issue(user.id, user.email)}"}

    return _headers


@pytest.fixture
async def client(session, session_factory, notifier):
    """Async test client with overridden dependencies."""
    from tasktrack.api.deps import get_db_session, get_notifier, get_session_factory
    from tasktrack.main import app

    async def override_get_db_session():
        yield session
        await session.commit()

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_notifier] = lambda: notifier

    # ASGITransport never runs the lifespan; app.state stays empty and the
    # notifier comes from the override above.
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
