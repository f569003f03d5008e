"""Redis-backed access-token blocklist.

Revoked access tokens are remembered by their ``jti`` under
``blacklist:<jti>`` until the token would have expired on its own.
"""

from redis.asyncio import Redis
from structlog import get_logger

from src.domain.interfaces.token_management import ITokenBlocklist

logger = get_logger(__name__)


class RedisTokenBlocklist(ITokenBlocklist):
    def __init__(self, redis_client: Redis):
        self.redis_client = redis_client

    async def block(self, jti: str, ttl_seconds: int) -> None:
        await self.redis_client.setex(self._key(jti), max(ttl_seconds, 1), "revoked")
        logger.info("Access token revoked", jti=f"{jti[:8]}***", ttl=ttl_seconds)

    async def is_blocked(self, jti: str) -> bool:
        return await self.redis_client.get(self._key(jti)) == "revoked"

    @staticmethod
    def _key(jti: str) -> str:
        return f"blacklist:{jti}"
