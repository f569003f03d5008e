"""Fixtures for end-to-end API tests.

The application runs in-process behind `httpx.ASGITransport`. Database,
Redis and every identity provider are replaced through
``app.dependency_overrides``; provider HTTP traffic goes to `FakeProviders`.
"""

from typing import Any, Dict, Optional, Set

import httpx
import pytest
import pytest_asyncio

from src.core.config.settings import settings
from src.domain.value_objects.oauth_provider import OAuthProviderType
from src.infrastructure.database.async_db import get_async_db
from src.infrastructure.dependency_injection.auth_dependencies import (
    get_provider_adapters,
    get_telegram_verifier,
)
from src.infrastructure.redis import get_redis
from src.infrastructure.services.oauth import (
    FacebookAdapter,
    GoogleAdapter,
    GoogleIdTokenVerifier,
    InstagramAdapter,
    TelegramVerifier,
)
from src.main import app
from tests.factories import (
    create_fake_facebook_me,
    create_fake_instagram_me,
    create_fake_people_me,
    create_fake_token_response,
)
from tests.utils.keys import GoogleSigner
from tests.utils.provider_stub import ProviderStub


class FakeProviders:
    """Scriptable Google, Facebook, Instagram and Telegram endpoints.

    Tests set the identity the next login asserts (`google_identity`,
    `facebook_me`, `instagram_me`), the audience of Google ID tokens and
    which Telegram chats exist.
    """

    def __init__(self, provider_configs, google_verifier_config, telegram_config, signer: GoogleSigner):
        self.signer = signer
        self.configs = provider_configs
        self.google_identity: Dict[str, Any] = {"sub": "g-1", "email": "bob@y.com"}
        self.facebook_me: Dict[str, Any] = create_fake_facebook_me()
        self.instagram_me: Dict[str, Any] = create_fake_instagram_me()
        self.known_telegram_ids: Set[int] = set()
        self.token_status: Optional[int] = None
        self.google_audience: Optional[str] = None

        google = provider_configs[OAuthProviderType.GOOGLE]
        facebook = provider_configs[OAuthProviderType.FACEBOOK]
        instagram = provider_configs[OAuthProviderType.INSTAGRAM]
        self.google_verifier_config = google_verifier_config
        self.telegram_config = telegram_config
        self.stub = ProviderStub(
            {
                ("GET", google_verifier_config.certs_url): lambda r: httpx.Response(200, json=signer.jwks()),
                ("POST", google.token_url): self._google_token,
                ("GET", google.profile_url): lambda r: httpx.Response(200, json=create_fake_people_me()),
                ("GET", facebook.token_url): self._plain_token,
                ("GET", facebook.profile_url): lambda r: httpx.Response(200, json=self.facebook_me),
                ("POST", instagram.token_url): self._plain_token,
                ("GET", instagram.profile_url): lambda r: httpx.Response(200, json=self.instagram_me),
                (
                    "GET",
                    f"{telegram_config.api_url}/bot{telegram_config.bot_token}/getChat",
                ): self._get_chat,
            }
        )

    def _google_token(self, request: httpx.Request) -> httpx.Response:
        if self.token_status is not None:
            return httpx.Response(self.token_status, json={"error": "invalid_grant"})
        audience = self.google_audience or self.google_verifier_config.client_id
        claims = GoogleSigner.claims(audience, **self.google_identity)
        return httpx.Response(200, json=create_fake_token_response(id_token=self.signer.sign(claims)))

    def _plain_token(self, request: httpx.Request) -> httpx.Response:
        if self.token_status is not None:
            return httpx.Response(self.token_status, json={"error": "invalid_grant"})
        return httpx.Response(200, json=create_fake_token_response())

    def _get_chat(self, request: httpx.Request) -> httpx.Response:
        chat_id = int(request.url.params["chat_id"])
        if chat_id in self.known_telegram_ids:
            return httpx.Response(200, json={"ok": True, "result": {"id": chat_id}})
        return httpx.Response(400, json={"ok": False, "description": "Bad Request: chat not found"})

    def adapters(self):
        transport = self.stub.transport
        verifier = GoogleIdTokenVerifier(self.google_verifier_config, transport=transport)
        return {
            OAuthProviderType.GOOGLE: GoogleAdapter(self.configs[OAuthProviderType.GOOGLE], verifier, transport=transport),
            OAuthProviderType.FACEBOOK: FacebookAdapter(self.configs[OAuthProviderType.FACEBOOK], transport=transport),
            OAuthProviderType.INSTAGRAM: InstagramAdapter(self.configs[OAuthProviderType.INSTAGRAM], transport=transport),
        }

    def telegram_verifier(self):
        return TelegramVerifier(self.telegram_config, transport=self.stub.transport)


@pytest.fixture
def providers(provider_configs, google_verifier_config, telegram_config, google_signer):
    return FakeProviders(provider_configs, google_verifier_config, telegram_config, google_signer)


@pytest_asyncio.fixture
async def client(db_session, redis_client, providers):
    """Provides an API client wired to the test database, Redis and providers."""

    async def override_get_async_db():
        yield db_session

    adapters = providers.adapters()
    telegram_verifier = providers.telegram_verifier()

    app.dependency_overrides[get_async_db] = override_get_async_db
    app.dependency_overrides[get_redis] = lambda: redis_client
    app.dependency_overrides[get_provider_adapters] = lambda: adapters
    app.dependency_overrides[get_telegram_verifier] = lambda: telegram_verifier

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def refresh_cookie_name():
    return settings.REFRESH_COOKIE_NAME
