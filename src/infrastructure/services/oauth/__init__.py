from src.infrastructure.services.oauth.base import BaseProviderAdapter
from src.infrastructure.services.oauth.config import (
    GoogleVerifierConfig,
    ProviderConfig,
    TelegramConfig,
    build_google_verifier_config,
    build_provider_configs,
    build_telegram_config,
)
from src.infrastructure.services.oauth.facebook import FacebookAdapter
from src.infrastructure.services.oauth.google import GoogleAdapter
from src.infrastructure.services.oauth.google_verifier import GoogleIdTokenVerifier
from src.infrastructure.services.oauth.instagram import InstagramAdapter
from src.infrastructure.services.oauth.state_store import RedisStateStore
from src.infrastructure.services.oauth.telegram import TelegramVerifier

__all__ = [
    "BaseProviderAdapter",
    "FacebookAdapter",
    "GoogleAdapter",
    "GoogleIdTokenVerifier",
    "GoogleVerifierConfig",
    "InstagramAdapter",
    "ProviderConfig",
    "RedisStateStore",
    "TelegramConfig",
    "TelegramVerifier",
    "build_google_verifier_config",
    "build_provider_configs",
    "build_telegram_config",
]
