"""Rate limiting for the authentication routes.

A single slowapi `Limiter` shared by every route module. Limits are keyed by
client address and counted in Redis so that all workers share one budget.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from src.core.config.settings import settings


def get_limiter() -> Limiter:
    """Build the limiter from settings.

    When rate limiting is disabled the limiter keeps an in-process store, so
    no Redis connection is ever attempted.
    """
    enabled = settings.RATE_LIMIT_ENABLED
    return Limiter(
        key_func=get_remote_address,
        enabled=enabled,
        default_limits=[],
        storage_uri=settings.RATE_LIMIT_STORAGE_URL if enabled else "memory://",
    )


limiter = get_limiter()

# Applied to every route under /api/v1/auth.
AUTH_RATE_LIMIT = settings.RATE_LIMIT_AUTH
