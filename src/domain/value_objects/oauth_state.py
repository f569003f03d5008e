"""OAuth State Value Object.

A state is the single-use anti-CSRF token bound to one authorization
redirect. It is minted when the authorization URL is built and consumed on
the callback.
"""

import re
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

STATE_TTL_SECONDS = 600
STATE_ENTROPY_BYTES = 32

_STATE_PATTERN = re.compile(r"^[0-9a-f]{64}$")


@dataclass(frozen=True)
class OAuthState:
    """Immutable OAuth state.

    Attributes:
        value: 64 lowercase hex characters (32 bytes of entropy).
        created_at: Mint time, UTC.
        ttl_seconds: Lifetime in the store, fixed at 600 seconds.
    """

    value: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    ttl_seconds: int = STATE_TTL_SECONDS

    @classmethod
    def generate(cls) -> "OAuthState":
        return cls(value=secrets.token_hex(STATE_ENTROPY_BYTES))

    @staticmethod
    def is_well_formed(value: str) -> bool:
        """Cheap syntactic check before any store lookup."""
        return bool(value) and bool(_STATE_PATTERN.match(value))

    @property
    def expires_at(self) -> datetime:
        return self.created_at + timedelta(seconds=self.ttl_seconds)

    def mask_for_logging(self) -> str:
        return f"{self.value[:8]}***"

    def __str__(self) -> str:
        return self.value
