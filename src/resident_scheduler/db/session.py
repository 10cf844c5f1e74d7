from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from resident_scheduler.core.config import get_settings

settings = get_settings()
engine = create_async_engine(settings.database_url, echo=settings.database_echo, pool_pre_ping=True)
async_session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session. Routes commit explicitly; anything left uncommitted is rolled back on close."""
    async with async_session_factory() as session:
        yield session
