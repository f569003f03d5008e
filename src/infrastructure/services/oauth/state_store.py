"""Redis-backed OAuth state store.

Each state is a key ``oauth_state:<hex>`` with a fixed 600 second expiry and
a placeholder value, existence is the signal. Consumption uses GETDEL, so of
two callbacks racing on the same state at most one observes it.
"""

from redis.asyncio import Redis
from structlog import get_logger

from src.domain.interfaces.oauth import IStateStore
from src.domain.value_objects.oauth_state import OAuthState

logger = get_logger(__name__)

STATE_KEY_PREFIX = "oauth_state:"


class RedisStateStore(IStateStore):
    """`IStateStore` implementation on top of a TTL-capable Redis."""

    def __init__(self, redis_client: Redis):
        self.redis_client = redis_client

    async def issue(self) -> OAuthState:
        state = OAuthState.generate()
        # NX: never overwrite a live state.
        created = await self.redis_client.set(
            self._key(state.value), "1", ex=state.ttl_seconds, nx=True
        )
        if not created:
            state = OAuthState.generate()
            await self.redis_client.set(self._key(state.value), "1", ex=state.ttl_seconds)
        logger.debug("OAuth state issued", state=state.mask_for_logging(), ttl=state.ttl_seconds)
        return state

    async def exists(self, state: str) -> bool:
        if not OAuthState.is_well_formed(state):
            return False
        return bool(await self.redis_client.exists(self._key(state)))

    async def consume(self, state: str) -> bool:
        if not OAuthState.is_well_formed(state):
            return False
        removed = await self.redis_client.getdel(self._key(state))
        logger.debug("OAuth state consumed", state=f"{state[:8]}***", removed=removed is not None)
        return removed is not None

    @staticmethod
    def _key(state: str) -> str:
        return f"{STATE_KEY_PREFIX}{state}"
