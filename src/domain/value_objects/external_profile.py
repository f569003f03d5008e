"""Normalized External Profile Value Object.

Provider adapters translate whatever their provider returns (an ID token, a
Graph API document, a bot callback) into this provider-agnostic record. The
reconciliation engine only ever sees this type.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from src.domain.value_objects.oauth_provider import OAuthProviderType


@dataclass(frozen=True)
class ExternalProfile:
    """Immutable identity asserted by an external provider.

    Attributes:
        provider: The provider that asserted the identity.
        provider_id: Provider-scoped subject identifier. Required.
        email: Provider-asserted email, lowercased. None when not asserted.
        email_verified: None when the provider does not expose verification.
        first_name, last_name, username, avatar_url, bio: Display data.
        gender: Raw provider gender string, normalized by the account layer.
        birthday: Date of birth when shared by the user.
        phone: Phone number when shared by the user.
    """

    provider: OAuthProviderType
    provider_id: str
    email: Optional[str] = None
    email_verified: Optional[bool] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    gender: Optional[str] = None
    birthday: Optional[date] = None
    phone: Optional[str] = None

    def __post_init__(self) -> None:
        provider_id = str(self.provider_id).strip() if self.provider_id is not None else ""
        if not provider_id:
            raise ValueError("External profile requires a provider identifier")
        object.__setattr__(self, "provider_id", provider_id)

        email = (self.email or "").strip().lower()
        object.__setattr__(self, "email", email or None)

    def mask_for_logging(self) -> dict:
        """Loggable view without personal data."""
        masked_email = None
        if self.email:
            local, _, domain = self.email.partition("@")
            masked_email = f"{local[:2]}***@{domain}"
        return {
            "provider": self.provider.value,
            "provider_id": f"{self.provider_id[:4]}***",
            "email": masked_email,
            "email_verified": self.email_verified,
        }
