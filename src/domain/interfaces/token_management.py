"""Token management interfaces: access-token blocklist and credential issuing."""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Tuple

from src.domain.entities.user import User
from src.domain.value_objects.credentials import CredentialPair


class ITokenBlocklist(ABC):
    """Revoked access-token ids, kept until the token would have expired anyway."""

    @abstractmethod
    async def block(self, jti: str, ttl_seconds: int) -> None:
        raise NotImplementedError

    @abstractmethod
    async def is_blocked(self, jti: str) -> bool:
        raise NotImplementedError


class ICredentialIssuer(ABC):
    """Mints and revokes the application's own session credentials."""

    @abstractmethod
    async def issue(self, user: User) -> CredentialPair:
        raise NotImplementedError

    @abstractmethod
    async def rotate(self, raw_refresh_token: str) -> Tuple[User, CredentialPair]:
        raise NotImplementedError

    @abstractmethod
    async def authenticate(self, access_token: str) -> Tuple[User, Mapping[str, Any]]:
        """Validate a bearer token and load its account."""
        raise NotImplementedError

    @abstractmethod
    async def revoke_all(self, user: User, claims: Mapping[str, Any]) -> None:
        """Block the presented access token and delete every refresh token of the account."""
        raise NotImplementedError
