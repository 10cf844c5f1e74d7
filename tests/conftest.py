import os
from collections.abc import AsyncIterator, Iterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from resident_scheduler.core.config import get_settings
from resident_scheduler.db import models  # noqa: F401  # register every table on Base.metadata
from resident_scheduler.db import session as db_session
from resident_scheduler.db.base import Base
from resident_scheduler.main import create_application

SETTINGS_ENV = (
    "RESIDENT_DEFAULT_WORK_LIMITS",
    "RESIDENT_FALLBACK_WORK_LIMIT",
    "RESIDENT_LOG_LEVEL",
    "RESIDENT_PROJECT_NAME",
)


@pytest.fixture(autouse=True)
def _default_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Resolve work limits against the built-in defaults, whatever the host environment says."""
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def database_url() -> str:
    return os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest_asyncio.fixture()
async def async_engine(database_url: str) -> AsyncIterator[AsyncEngine]:
    """Provide a per-test async engine with a freshly created schema."""
    engine = create_async_engine(database_url, future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
def session_factory(async_engine: AsyncEngine) -> Iterator[async_sessionmaker[AsyncSession]]:
    yield async_sessionmaker(async_engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture(autouse=True)
def _swap_db_engine(async_engine: AsyncEngine, session_factory: async_sessionmaker[AsyncSession]) -> Iterator[None]:
    original = (db_session.engine, db_session.async_session_factory)
    db_session.engine = async_engine
    db_session.async_session_factory = session_factory
    try:
        yield
    finally:
        db_session.engine, db_session.async_session_factory = original


@pytest.fixture()
async def api_client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncClient]:
    app = create_application()

    async def _get_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[db_session.get_db_session] = _get_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"
