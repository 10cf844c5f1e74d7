from __future__ import annotations

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from resident_scheduler.core.config import get_settings
from resident_scheduler.db.base import Base
from resident_scheduler.db import models  # noqa: F401  # register every table on Base.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# Offline SQL generation needs the synchronous driver for each async one.
SYNC_DRIVERS = {"postgresql+asyncpg": "postgresql", "sqlite+aiosqlite": "sqlite"}


def _database_url(*, async_driver: bool) -> str:
    url = make_url(get_settings().database_url)
    if not async_driver:
        url = url.set(drivername=SYNC_DRIVERS.get(url.drivername, url.drivername))
    return url.render_as_string(hide_password=False)


def _configure_options(url: str) -> dict:
    # SQLite cannot ALTER most constraints in place.
    return {"compare_type": True, "render_as_batch": url.startswith("sqlite")}


def run_migrations_offline() -> None:
    """Emit the migration SQL without connecting to the database."""
    url = _database_url(async_driver=False)
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(url),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        **_configure_options(connection.engine.url.drivername),
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine: AsyncEngine = create_async_engine(
        _database_url(async_driver=True), poolclass=pool.NullPool
    )

    async with engine.begin() as connection:
        await connection.run_sync(do_run_migrations)

    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
