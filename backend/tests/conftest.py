"""Pytest fixtures for ChannelSignal.

Provides:
- An in-memory fake repository and a routable test user for unit tests
- A SQLite (aiosqlite) database per test for repository and API tests
- A FastAPI TestClient wired to that database

Usage:
    @pytest.mark.asyncio
    async def test_something(fake_repo, fake_user):
        ...
"""

import sys
import os
from pathlib import Path

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("INBOUND_EMAIL_DOMAIN", "in.example.com")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.pop("RESEND_API_KEY", None)
os.environ.pop("INBOUND_EMAIL_WEBHOOK_SECRET", None)

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))
sys.path.insert(0, str(Path(__file__).parent))

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from channelsignal.database import build_engine, build_session_factory, get_db
from channelsignal.infrastructure.repositories import SqlAlchemyIngestionRepository
from channelsignal.models import Base, User
from fixtures.fake_repository import FakeIngestionRepository


ROUTING_ADDRESS = "u_abc123@in.example.com"


@pytest.fixture
def fake_repo() -> FakeIngestionRepository:
    return FakeIngestionRepository()


@pytest.fixture
def fake_user(fake_repo):
    """A user owning ROUTING_ADDRESS in the fake repository."""
    return fake_repo.add_user("rep@mycompany.com", ROUTING_ADDRESS, name="Rep")


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Fresh SQLite database file per test with all tables created."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'channelsignal.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def repository(db_session) -> SqlAlchemyIngestionRepository:
    return SqlAlchemyIngestionRepository(db_session)


@pytest_asyncio.fixture
async def db_user(db_session) -> User:
    """A persisted user owning ROUTING_ADDRESS."""
    user = User(email="rep@mycompany.com", name="Rep", bcc_address=ROUTING_ADDRESS)
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
def client(db_engine):
    """TestClient whose requests each get a session on the test database.

    The app runs on its own event loop, so it gets a separate unpooled engine
    on the same database file.
    """
    from channelsignal.main import app

    app_engine = create_async_engine(db_engine.url, poolclass=NullPool)
    app_sessions = build_session_factory(app_engine)

    async def override_get_db():
        async with app_sessions() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
