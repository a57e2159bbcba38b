"""
Async engine and sessions for the generations database (Supabase PostgreSQL).

Environment variables:
  DATABASE_URL      - postgres:// or postgresql:// URL; storage is disabled without it
  DB_POOL_SIZE      - connection pool size (default: 5)
  DB_MAX_OVERFLOW   - extra connections above the pool size (default: 10)
"""

import os
import logging
from typing import AsyncGenerator, Optional
from urllib.parse import urlsplit

from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
    AsyncEngine,
)

logger = logging.getLogger(__name__)

# Supabase's transaction-mode pooler (pgbouncer) listens here
POOLER_PORT = 6543

_engine: Optional[AsyncEngine] = None
_async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def to_async_url(database_url: str) -> str:
    """Rewrite a plain Postgres URL to use the asyncpg driver."""
    for prefix in ("postgres://", "postgresql://"):
        if database_url.startswith(prefix):
            return database_url.replace(prefix, "postgresql+asyncpg://", 1)
    return database_url


def connect_args_for(database_url: str) -> dict:
    """asyncpg's prepared-statement cache breaks behind a transaction pooler."""
    if urlsplit(database_url).port == POOLER_PORT:
        return {"statement_cache_size": 0}
    return {}


async def init_db() -> None:
    """Create the engine and session factory. Called from the app lifespan."""
    global _engine, _async_session_factory

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        logger.warning("DATABASE_URL not set, generation storage disabled")
        return

    _engine = create_async_engine(
        to_async_url(database_url),
        pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
        max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "10")),
        pool_pre_ping=True,
        pool_recycle=300,
        connect_args=connect_args_for(database_url),
    )
    _async_session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    logger.info(f"Database engine initialized (host={urlsplit(database_url).hostname})")


async def close_db() -> None:
    global _engine, _async_session_factory
    if _engine:
        await _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _async_session_factory = None


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield one session per request."""
    if _async_session_factory is None:
        raise RuntimeError("Database not initialized. Is DATABASE_URL set?")
    async with _async_session_factory() as session:
        yield session


def is_db_configured() -> bool:
    return _async_session_factory is not None
