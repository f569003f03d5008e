"""Dependency injection for the identity federation services.

Request-scoped collaborators (database session, Redis client, repositories)
are built per request by FastAPI. Provider configuration and the Google
verifier, whose key-set cache must outlive a request, are process-wide
singletons built once from settings.

Tests replace any of these factories through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import settings
from src.core.exceptions import AuthenticationError
from src.domain.entities.user import User
from src.domain.interfaces.oauth import (
    IIdentityVerifier,
    IProviderAdapter,
    IStateStore,
    ITelegramVerifier,
)
from src.domain.interfaces.repositories import IRefreshTokenRepository, IUserRepository
from src.domain.interfaces.token_management import ITokenBlocklist
from src.domain.services.auth.credentials import CredentialIssuer, TokenConfig
from src.domain.services.oauth.orchestrator import OAuthOrchestrator
from src.domain.services.oauth.reconciliation import IdentityReconciler
from src.domain.value_objects.oauth_provider import OAuthProviderType
from src.infrastructure.database.async_db import get_async_db
from src.infrastructure.redis import get_redis
from src.infrastructure.repositories.refresh_token_repository import RefreshTokenRepository
from src.infrastructure.repositories.user_repository import UserRepository
from src.infrastructure.services.oauth import (
    FacebookAdapter,
    GoogleAdapter,
    GoogleIdTokenVerifier,
    InstagramAdapter,
    RedisStateStore,
    TelegramVerifier,
    build_google_verifier_config,
    build_provider_configs,
    build_telegram_config,
)
from src.infrastructure.services.token_blocklist import RedisTokenBlocklist

# ---------------------------------------------------------------------------
# Type aliases for dependency injection
# ---------------------------------------------------------------------------

AsyncDB = Annotated[AsyncSession, Depends(get_async_db)]
RedisClient = Annotated[Redis, Depends(get_redis)]

bearer_scheme = HTTPBearer(auto_error=False)

# ---------------------------------------------------------------------------
# Process-wide singletons
# ---------------------------------------------------------------------------


@lru_cache
def get_google_verifier() -> IIdentityVerifier:
    return GoogleIdTokenVerifier(build_google_verifier_config(settings))


@lru_cache
def get_token_config() -> TokenConfig:
    return TokenConfig.from_settings(settings)


def get_provider_adapters(
    verifier: Annotated[IIdentityVerifier, Depends(get_google_verifier)],
) -> Dict[OAuthProviderType, IProviderAdapter]:
    """Adapters for every configured authorization-code provider.

    Adapters are stateless besides their config; the verifier carries the
    cached key set and is shared.
    """
    configs = build_provider_configs(settings)
    adapters: Dict[OAuthProviderType, IProviderAdapter] = {}
    for provider, config in configs.items():
        if provider is OAuthProviderType.GOOGLE:
            adapters[provider] = GoogleAdapter(config, verifier)
        elif provider is OAuthProviderType.FACEBOOK:
            adapters[provider] = FacebookAdapter(config)
        elif provider is OAuthProviderType.INSTAGRAM:
            adapters[provider] = InstagramAdapter(config)
    return adapters


def get_telegram_verifier() -> Optional[ITelegramVerifier]:
    config = build_telegram_config(settings)
    return TelegramVerifier(config) if config is not None else None


# ---------------------------------------------------------------------------
# Request-scoped factories
# ---------------------------------------------------------------------------


def get_user_repository(db: AsyncDB) -> IUserRepository:
    return UserRepository(db)


def get_refresh_token_repository(db: AsyncDB) -> IRefreshTokenRepository:
    return RefreshTokenRepository(db)


def get_state_store(redis: RedisClient) -> IStateStore:
    return RedisStateStore(redis)


def get_token_blocklist(redis: RedisClient) -> ITokenBlocklist:
    return RedisTokenBlocklist(redis)


def get_credential_issuer(
    user_repository: Annotated[IUserRepository, Depends(get_user_repository)],
    refresh_repository: Annotated[IRefreshTokenRepository, Depends(get_refresh_token_repository)],
    blocklist: Annotated[ITokenBlocklist, Depends(get_token_blocklist)],
    config: Annotated[TokenConfig, Depends(get_token_config)],
) -> CredentialIssuer:
    """Factory that returns the credential issuer.

    The user and refresh repositories share the request's database session.
    """
    return CredentialIssuer(user_repository, refresh_repository, blocklist, config)


def get_identity_reconciler(
    user_repository: Annotated[IUserRepository, Depends(get_user_repository)],
) -> IdentityReconciler:
    return IdentityReconciler(user_repository, settings.synthetic_email_domain)


def get_oauth_orchestrator(
    state_store: Annotated[IStateStore, Depends(get_state_store)],
    adapters: Annotated[Dict[OAuthProviderType, IProviderAdapter], Depends(get_provider_adapters)],
    reconciler: Annotated[IdentityReconciler, Depends(get_identity_reconciler)],
    issuer: Annotated[CredentialIssuer, Depends(get_credential_issuer)],
    telegram_verifier: Annotated[Optional[ITelegramVerifier], Depends(get_telegram_verifier)],
) -> OAuthOrchestrator:
    return OAuthOrchestrator(state_store, adapters, reconciler, issuer, telegram_verifier)


async def get_current_user(
    issuer: Annotated[CredentialIssuer, Depends(get_credential_issuer)],
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> tuple[User, dict]:
    """Authenticate the bearer token.

    Returns:
        The account and the token claims, the latter being needed to revoke
        the token on logout.

    Raises:
        AuthenticationError: Missing, invalid, expired or revoked token.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Not authenticated")
    user, claims = await issuer.authenticate(credentials.credentials)
    return user, dict(claims)


# ---------------------------------------------------------------------------
# Annotated shortcuts for routes
# ---------------------------------------------------------------------------

Orchestrator = Annotated[OAuthOrchestrator, Depends(get_oauth_orchestrator)]
Issuer = Annotated[CredentialIssuer, Depends(get_credential_issuer)]
CurrentUser = Annotated[tuple[User, dict], Depends(get_current_user)]
