"""Provider configuration objects.

Built once from the application settings at process start and injected into
the adapters. Adapters never read settings themselves.
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from src.domain.value_objects.oauth_provider import OAuthProviderType

GOOGLE_SCOPES = (
    "openid",
    "profile",
    "email",
    "https://www.googleapis.com/auth/user.phonenumbers.read",
    "https://www.googleapis.com/auth/user.gender.read",
    "https://www.googleapis.com/auth/user.birthday.read",
)
FACEBOOK_SCOPES = (
    "email",
    "user_birthday",
    "user_link",
    "user_age_range",
    "user_gender",
    "public_profile",
)
INSTAGRAM_SCOPES = ("instagram_business_basic",)

GOOGLE_ISSUERS = ("https://accounts.google.com", "accounts.google.com")


@dataclass(frozen=True)
class ProviderConfig:
    """Client registration and endpoints of one authorization-code provider."""

    provider: OAuthProviderType
    client_id: str
    client_secret: str = field(repr=False)
    redirect_uri: str
    authorize_url: str
    token_url: str
    profile_url: str = ""
    scopes: Tuple[str, ...] = ()
    extra_authorize_params: Mapping[str, str] = field(default_factory=dict)
    timeout: float = 10.0

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.redirect_uri)


@dataclass(frozen=True)
class GoogleVerifierConfig:
    client_id: str
    certs_url: str
    issuers: Tuple[str, ...] = GOOGLE_ISSUERS
    timeout: float = 10.0


@dataclass(frozen=True)
class TelegramConfig:
    bot_token: str = field(repr=False)
    api_url: str = "https://api.telegram.org"
    timeout: float = 10.0

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token)


def build_provider_configs(settings) -> Dict[OAuthProviderType, ProviderConfig]:
    """Assemble the code-flow provider configs from settings.

    Providers without a client id are left out, their routes answer 404.
    """
    timeout = settings.PROVIDER_HTTP_TIMEOUT
    configs = [
        ProviderConfig(
            provider=OAuthProviderType.GOOGLE,
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET.get_secret_value(),
            redirect_uri=settings.GOOGLE_REDIRECT_URI,
            authorize_url=settings.GOOGLE_AUTHORIZE_URL,
            token_url=settings.GOOGLE_TOKEN_URL,
            profile_url=settings.GOOGLE_PEOPLE_URL,
            scopes=GOOGLE_SCOPES,
            extra_authorize_params={"access_type": "offline"},
            timeout=timeout,
        ),
        ProviderConfig(
            provider=OAuthProviderType.FACEBOOK,
            client_id=settings.FACEBOOK_CLIENT_ID,
            client_secret=settings.FACEBOOK_CLIENT_SECRET.get_secret_value(),
            redirect_uri=settings.FACEBOOK_REDIRECT_URI,
            authorize_url=settings.FACEBOOK_AUTHORIZE_URL,
            token_url=settings.FACEBOOK_TOKEN_URL,
            profile_url=settings.FACEBOOK_PROFILE_URL,
            scopes=FACEBOOK_SCOPES,
            timeout=timeout,
        ),
        ProviderConfig(
            provider=OAuthProviderType.INSTAGRAM,
            client_id=settings.INSTAGRAM_CLIENT_ID,
            client_secret=settings.INSTAGRAM_CLIENT_SECRET.get_secret_value(),
            redirect_uri=settings.INSTAGRAM_REDIRECT_URI,
            authorize_url=settings.INSTAGRAM_AUTHORIZE_URL,
            token_url=settings.INSTAGRAM_TOKEN_URL,
            profile_url=settings.INSTAGRAM_PROFILE_URL,
            scopes=INSTAGRAM_SCOPES,
            extra_authorize_params={"force_reauth": "true"},
            timeout=timeout,
        ),
    ]
    return {config.provider: config for config in configs if config.is_configured}


def build_google_verifier_config(settings) -> GoogleVerifierConfig:
    return GoogleVerifierConfig(
        client_id=settings.GOOGLE_CLIENT_ID,
        certs_url=settings.GOOGLE_CERTS_URL,
        timeout=settings.PROVIDER_HTTP_TIMEOUT,
    )


def build_telegram_config(settings) -> Optional[TelegramConfig]:
    config = TelegramConfig(
        bot_token=settings.TELEGRAM_BOT_TOKEN.get_secret_value(),
        api_url=settings.TELEGRAM_API_URL,
        timeout=settings.PROVIDER_HTTP_TIMEOUT,
    )
    return config if config.is_configured else None
