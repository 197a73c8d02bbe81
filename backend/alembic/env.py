import asyncio
import sys
from pathlib import Path

from alembic import context
from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

# ensure backend/src is on sys.path so we can import the app metadata
backend_root = Path(__file__).resolve().parents[1]  # backend directory
src_path = str(backend_root / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

# Settings read DATABASE_URL from the environment or .env
from notu.config import get_settings  # noqa: E402
from notu.core import models  # noqa: E402,F401
from notu.core.models.base import BaseModel  # noqa: E402

target_metadata = BaseModel.metadata


def _database_url() -> str:
    """sqlalchemy.url from alembic.ini wins over the app settings."""
    cfg = context.config.get_section(context.config.config_ini_section) or {}
    url = cfg.get("sqlalchemy.url") or get_settings().database_url
    if not url.startswith("postgresql"):
        raise ValueError(f"Only PostgreSQL is supported. Got: {url}")
    return url


def do_run_migrations(connection: Connection) -> None:
    """Run migrations with a bound connection (sync)."""
    context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations(url: str) -> None:
    """Run migrations for an async engine."""
    connectable: AsyncEngine = create_async_engine(url, poolclass=pool.NullPool)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


def run_migrations_online() -> None:
    """Entry point used by alembic - PostgreSQL only."""
    url = _database_url()

    if url.startswith("postgresql+asyncpg"):
        asyncio.run(run_async_migrations(url))
    else:
        # sync drivers such as psycopg
        connectable = engine_from_config(
            {"sqlalchemy.url": url},
            prefix="sqlalchemy.",
            poolclass=pool.NullPool,
        )
        with connectable.connect() as connection:
            do_run_migrations(connection)


def run_migrations_offline() -> None:
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        compare_server_default=True,
    )
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
