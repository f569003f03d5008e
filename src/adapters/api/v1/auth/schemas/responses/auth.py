from __future__ import annotations

"""Composite response Pydantic models for authentication endpoints."""

from pydantic import BaseModel

from src.adapters.api.v1.auth.schemas.responses.user import UserOut
from src.domain.entities.user import User
from src.domain.value_objects.credentials import CredentialPair


class AuthResponse(BaseModel):
    """Response returned by the login callbacks and the refresh endpoint.

    The refresh token is never part of the body, it travels in a cookie.
    """

    user: UserOut
    token: str
    token_type: str = "bearer"
    expires_in: int

    @classmethod
    def build(cls, user: User, credentials: CredentialPair) -> "AuthResponse":
        return cls(
            user=UserOut.from_entity(user),
            token=credentials.access_token,
            token_type=credentials.token_type,
            expires_in=credentials.expires_in,
        )
