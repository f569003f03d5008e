"""Health check endpoint reporting the status of Redis and the database."""

import asyncio
from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter
from pydantic import BaseModel
from structlog import get_logger

from src.core.config.settings import settings
from src.infrastructure.database import check_database_health
from src.infrastructure.redis import check_redis_health

logger = get_logger(__name__)
router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    env: str
    version: str
    services: Dict[str, str]
    timestamp: datetime


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Verify every backing service concurrently.

    Redis is needed by every login (states), so the service is degraded when
    either dependency is down.
    """
    redis_ok, db_ok = await asyncio.gather(check_redis_health(), check_database_health())

    services = {
        "redis": "healthy" if redis_ok else "unhealthy",
        "database": "healthy" if db_ok else "unhealthy",
    }
    overall = "ok" if redis_ok and db_ok else "degraded"
    if overall != "ok":
        logger.warning("health_check_degraded", **services)

    return HealthResponse(
        status=overall,
        env=settings.APP_ENV,
        version=settings.VERSION,
        services=services,
        timestamp=datetime.now(timezone.utc),
    )
