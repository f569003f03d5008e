"""Interfaces of the identity federation collaborators.

The orchestrator depends only on these contracts, each provider or store
is plugged in behind them.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping

from src.domain.value_objects.external_profile import ExternalProfile
from src.domain.value_objects.oauth_provider import OAuthProviderType
from src.domain.value_objects.oauth_state import OAuthState


class IStateStore(ABC):
    """Short-lived, single-use anti-CSRF states backing every redirect."""

    @abstractmethod
    async def issue(self) -> OAuthState:
        """Mint and persist a fresh state with the fixed TTL."""
        raise NotImplementedError

    @abstractmethod
    async def exists(self, state: str) -> bool:
        """Side-effect free membership check."""
        raise NotImplementedError

    @abstractmethod
    async def consume(self, state: str) -> bool:
        """Atomically delete the state.

        Returns:
            True when this caller removed the state, False when it was already
            gone. Of several concurrent callers at most one sees True.
        """
        raise NotImplementedError


class IProviderAdapter(ABC):
    """One external provider running the authorization-code flow."""

    provider: OAuthProviderType

    @abstractmethod
    async def authorization_url(self, state: str) -> str:
        """Fully qualified provider authorization URL carrying `state`."""
        raise NotImplementedError

    @abstractmethod
    async def exchange_code(self, code: str) -> Mapping[str, Any]:
        """Exchange an authorization code for the provider's token response.

        Raises:
            ProviderExchangeError: The code was rejected or the provider was
                unreachable.
        """
        raise NotImplementedError

    @abstractmethod
    async def fetch_profile(self, tokens: Mapping[str, Any]) -> ExternalProfile:
        """Build the normalized profile from the token response.

        Raises:
            ProviderProfileError: The profile could not be fetched.
            InvalidIdentityAssertionError: A signed assertion failed verification.
        """
        raise NotImplementedError


class IIdentityVerifier(ABC):
    """Validates a signed identity assertion against the issuer's key set."""

    @abstractmethod
    async def verify(self, id_token: str) -> ExternalProfile:
        raise NotImplementedError


class ITelegramVerifier(ABC):
    """Confirms a Telegram identity through the bot API."""

    provider: OAuthProviderType = OAuthProviderType.TELEGRAM

    @abstractmethod
    async def verify(self, telegram_id: int, payload: Mapping[str, Any]) -> ExternalProfile:
        """
        Raises:
            TelegramUserNotFoundError: The bot API does not know the chat.
        """
        raise NotImplementedError
