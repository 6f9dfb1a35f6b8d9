"""
UserHub Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock async session (service unit tests, no DB)
    ├── sample_user: Attribute object shaped like a loaded User row
    ├── db_engine: Async SQLite engine on a temp file with the schema created
    └── test_client: HTTPX AsyncClient bound to the app and db_engine
"""

import os

# Override settings BEFORE any userhub import reads them
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./userhub_test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["CREATE_SCHEMA_ON_STARTUP"] = "false"
os.environ["API_PREFIX"] = ""
os.environ["CORS_ORIGINS"] = "*"

from datetime import date, datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from userhub import database
from userhub.database import Base, build_engine
from userhub.models.user import User  # noqa: F401  (registers the table)


def years_since(born: date) -> int:
    """Reference age calculation used to check the store's derived age."""
    today = datetime.now(timezone.utc).date()
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


@pytest.fixture
def expected_age():
    """The reference age function, for comparing with the store's value."""
    return years_since


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_user(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = user
            result = await user_service.get_user(mock_db_session, "1")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_user():
    """A loaded-row stand-in accepted by UserResponse.model_validate."""
    return SimpleNamespace(
        id=7,
        name="Alice Liddell",
        email="alice@example.com",
        role="admin",
        birth=date(1990, 5, 17),
        age=years_since(date(1990, 5, 17)),
        timestamp=datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc),
    )


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Fresh SQLite database file per test, with the users table created."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'userhub.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def test_client(db_engine, monkeypatch):
    """
    Provides an async HTTP client talking to the app in-process.

    get_db_session is used unchanged; only its session factory is pointed
    at the per-test engine. The lifespan is not run by ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/healthdb")
            assert response.status_code == 200
    """
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(database, "async_session_factory", factory)

    from userhub.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def create_user(test_client):
    """Factory fixture: POST a user and return the `data` of the envelope."""

    async def _create(name, email, birth="1990-01-01", role=None):
        body = {"name": name, "email": email, "birth": birth}
        if role is not None:
            body["role"] = role
        response = await test_client.post("/users", json=body)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create
