from __future__ import annotations

"""
Asynchronous Database Utilities Module

This module provides the asynchronous database engine and session helpers used
by the repositories. Production runs on PostgreSQL through asyncpg. The test
suite points DATABASE_URL at an in-memory aiosqlite database.

**Security Note**: asyncpg does not understand 'sslmode' in connect_args, SSL
must be requested through the URL. Never log the assembled URL, it carries the
database password.

Key Components:
    - engine: The asynchronous SQLAlchemy engine.
    - AsyncSessionFactory: A factory for creating asynchronous database sessions.
    - get_async_db: FastAPI dependency yielding one session per request.
    - check_database_health: Startup probe with retry.
    - create_async_db_and_tables: Utility to create tables using the async engine.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy import text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from structlog import get_logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.core.config.settings import settings
from src.domain import entities  # noqa: F401  registers the tables on SQLModel.metadata

logger = get_logger(__name__)


def _build_async_url(raw_url: str) -> URL:
    """
    Build the asynchronous database URL.

    Strips `sslmode` from PostgreSQL URLs, asyncpg handles SSL differently.
    Other URLs, including host-less sqlite ones, pass through unchanged.

    Args:
        raw_url: The configured DATABASE_URL.

    Returns:
        URL: The cleaned asynchronous database URL.
    """
    url = make_url(raw_url)
    if url.get_backend_name() == "postgresql":
        url = url.difference_update_query(["sslmode"])
    return url


def _engine_options(url: URL) -> Dict[str, Any]:
    if url.get_backend_name() == "sqlite":
        return {}
    return {
        "pool_size": settings.POSTGRES_POOL_SIZE,
        "max_overflow": settings.POSTGRES_MAX_OVERFLOW,
        "pool_timeout": settings.POSTGRES_POOL_TIMEOUT,
        "pool_pre_ping": True,
    }


_url = _build_async_url(settings.DATABASE_URL)
engine = create_async_engine(_url, echo=False, future=True, **_engine_options(_url))

AsyncSessionFactory: sessionmaker[AsyncSession] = sessionmaker(  # type: ignore[type-arg]
    bind=engine, class_=AsyncSession, expire_on_commit=False
)


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:  # noqa: D401
    """
    FastAPI dependency that yields an AsyncSession.

    Rolls back the transaction if the request raised and always closes the
    session.

    Yields:
        AsyncSession: An asynchronous database session for use in FastAPI routes.
    """
    async with AsyncSessionFactory() as session:
        logger.debug("Async database session created")
        try:
            yield session
        except Exception:  # noqa: BLE001 – Any DB error must trigger rollback
            await session.rollback()
            logger.error("Async database session rollback due to error")
            raise
        finally:
            await session.close()


@retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((OperationalError, OSError)),
    reraise=True,
)
async def _ping() -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def check_database_health() -> bool:
    """
    Performs a health check on the database connection.

    Retries with exponential backoff while the database is still starting.

    Returns:
        bool: True if database is healthy and responsive, False otherwise
    """
    try:
        await _ping()
        return True
    except (OperationalError, OSError) as e:
        logger.error("database_health_check_failed", error=str(e))
        return False


async def create_async_db_and_tables() -> None:  # noqa: D401
    """
    Create tables using the async engine (local development and test suites).

    Deployed environments use the alembic migrations instead.
    """
    logger.info("Creating async database tables")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Async database tables created")


async def dispose_engine() -> None:
    await engine.dispose()
