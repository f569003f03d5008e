"""OAuth Provider Value Object.

Defines the set of external identity providers the service federates with.
The enum value doubles as the route segment (``/auth/{provider}/...``) and as
the prefix of synthetic email addresses.
"""

from enum import Enum

import structlog

logger = structlog.get_logger(__name__)


class OAuthProviderType(str, Enum):
    """Supported identity providers."""

    GOOGLE = "google"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    TELEGRAM = "telegram"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid provider values."""
        return [provider.value for provider in cls]

    @classmethod
    def parse(cls, provider: str) -> "OAuthProviderType":
        """Validate a provider name coming from the outside world.

        Args:
            provider: Provider name, case-insensitive.

        Returns:
            OAuthProviderType: The matching provider.

        Raises:
            ValueError: If the provider is empty or unsupported.
        """
        if not provider:
            raise ValueError("OAuth provider cannot be empty")
        normalized = provider.strip().lower()
        if normalized not in cls.values():
            logger.debug("Unsupported OAuth provider requested", provider=provider[:20])
            raise ValueError(
                f"Unsupported OAuth provider: {provider}. "
                f"Supported providers: {', '.join(cls.values())}"
            )
        return cls(normalized)

    @property
    def uses_authorization_code(self) -> bool:
        """Telegram asserts identity through its bot API instead of a code exchange."""
        return self is not OAuthProviderType.TELEGRAM

    def mask_for_logging(self) -> str:
        return self.value
