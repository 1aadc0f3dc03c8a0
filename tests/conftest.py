"""Shared pytest fixtures.

Environment must be populated before `app` is imported: settings are
read (and JWT_SECRET_KEY required) at import time.
"""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import timedelta  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.database import get_db  # noqa: E402
from app.core.security import hash_password  # noqa: E402
from app.main import create_app  # noqa: E402
from app.models import Base, User  # noqa: E402
from app.services.session_service import SessionConfig, SessionManager  # noqa: E402

TEST_SECRET = "test-secret-key"
TEST_PASSWORD = "password123"


@pytest.fixture
def session_config() -> SessionConfig:
    return SessionConfig(secret=TEST_SECRET, ttl=timedelta(hours=24))


@pytest.fixture
def session_manager(session_config) -> SessionManager:
    return SessionManager(session_config)


@pytest.fixture
async def engine():
    # One shared in-memory connection so every session sees the same schema.
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def test_user(db) -> User:
    user = User(email="test@example.com", password_hash=hash_password(TEST_PASSWORD))
    db.add(user)
    await db.commit()
    return user


def _build_app(session_factory, config: SessionConfig):
    application = create_app(config)

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest.fixture
def app_factory(session_factory):
    """Build the app around the test database with a given SessionConfig."""
    return lambda config: _build_app(session_factory, config)


@pytest.fixture
def app(app_factory, session_config):
    return app_factory(session_config)


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
