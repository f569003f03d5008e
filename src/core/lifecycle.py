"""Application lifecycle management.

This module handles application startup and shutdown events, ensuring proper
initialization and cleanup of application resources.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from structlog import get_logger

from src.core.config.settings import settings
from src.infrastructure.database import check_database_health, dispose_engine

logger = get_logger(__name__)


def create_lifespan_manager():
    """Create the application lifespan manager.

    Returns:
        AsyncContextManager: The lifespan manager for the FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Checks the database on startup and releases the pool on shutdown.

        Schema creation is left to alembic.

        Raises:
            RuntimeError: If database is unavailable during startup
        """
        if not await check_database_health():
            logger.error("database_unavailable_on_startup")
            raise RuntimeError("Database unavailable")
        logger.info("application_startup", env=settings.APP_ENV, version=settings.VERSION)

        yield

        await dispose_engine()
        logger.info("application_shutdown", env=settings.APP_ENV)

    return lifespan
