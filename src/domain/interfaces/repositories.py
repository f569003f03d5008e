"""Repository interfaces for abstracting data persistence in the domain layer.

The domain layer uses these interfaces to interact with persistence without
being coupled to a specific technology. The concrete implementations reside
in the `infrastructure` layer.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from src.domain.entities.oauth_link import OAuthLink
from src.domain.entities.refresh_token import RefreshToken
from src.domain.entities.user import User
from src.domain.value_objects.oauth_provider import OAuthProviderType


class IUserRepository(ABC):
    """Persistence contract for accounts and their identity links.

    Implementations must enforce uniqueness of the account email and of every
    `(provider, provider_id)` pair at the store level, and report a lost
    uniqueness race as `AccountCreationConflictError`.
    """

    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def find_by_provider_id(
        self, provider: OAuthProviderType, provider_id: str
    ) -> Optional[User]:
        """Retrieves the account whose link carries the provider identifier.

        Args:
            provider: The provider the identifier belongs to.
            provider_id: Provider-scoped subject identifier.

        Returns:
            The linked `User`, or `None` if no account carries the identifier.
        """
        raise NotImplementedError

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Retrieves a user by exact (case-insensitive) email address."""
        raise NotImplementedError

    @abstractmethod
    async def get_link(self, user_id: int) -> Optional[OAuthLink]:
        """Retrieves the identity link owned by an account, if any."""
        raise NotImplementedError

    @abstractmethod
    async def save(self, user: User, link: Optional[OAuthLink] = None) -> User:
        """Persists an account and optionally its identity link in one transaction.

        Args:
            user: The account to insert or update.
            link: The account's link. Its `user_id` is filled in when the
                account is new.

        Returns:
            The persisted `User` with database-generated fields populated.

        Raises:
            AccountCreationConflictError: A unique constraint was violated by a
                concurrent writer.
            DatabaseError: For any other persistence failure.
        """
        raise NotImplementedError


class IRefreshTokenRepository(ABC):
    """Server-side store of opaque refresh tokens."""

    @abstractmethod
    async def create(self, user: User, ttl_seconds: int) -> str:
        """Mint and persist a refresh token, returning the raw opaque value."""
        raise NotImplementedError

    @abstractmethod
    async def get_valid(self, raw_token: str, now: Optional[datetime] = None) -> Optional[RefreshToken]:
        """Return the record of an unexpired token, or `None`."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, raw_token: str) -> bool:
        """Delete a single token. Returns whether it existed."""
        raise NotImplementedError

    @abstractmethod
    async def delete_all_for(self, user: User) -> int:
        """Delete every token issued to the account. Returns the count removed."""
        raise NotImplementedError
