"""Credential Pair Value Object."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CredentialPair:
    """Access and refresh credentials issued for one login.

    `refresh_token` is the raw opaque value. It must only ever reach the
    client through the refresh cookie, never through a JSON body.
    """

    access_token: str
    expires_in: int
    refresh_token: str = field(repr=False)
    refresh_expires_in: int
    token_type: str = "bearer"
