"""Infrastructure Services.

Concrete implementations of the domain interfaces that talk to external
systems: the identity providers, Google's key set and Redis.

Service Categories:
- OAuth: provider adapters, the Google ID token verifier, the Telegram
  verifier and the Redis-backed state store
- Tokens: the Redis access-token blocklist
"""

from .oauth import (
    FacebookAdapter,
    GoogleAdapter,
    GoogleIdTokenVerifier,
    InstagramAdapter,
    RedisStateStore,
    TelegramVerifier,
)
from .token_blocklist import RedisTokenBlocklist

__all__ = [
    "FacebookAdapter",
    "GoogleAdapter",
    "GoogleIdTokenVerifier",
    "InstagramAdapter",
    "RedisStateStore",
    "TelegramVerifier",
    "RedisTokenBlocklist",
]
