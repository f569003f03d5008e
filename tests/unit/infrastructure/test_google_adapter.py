"""Unit tests for the Google provider adapter."""

from datetime import date
from unittest.mock import AsyncMock
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from src.core.exceptions import InvalidIdentityAssertionError, ProviderExchangeError, ProviderProfileError
from src.domain.interfaces.oauth import IIdentityVerifier
from src.domain.value_objects.external_profile import ExternalProfile
from src.domain.value_objects.oauth_provider import OAuthProviderType
from src.infrastructure.services.oauth import GoogleAdapter, GoogleIdTokenVerifier
from tests.factories import create_fake_people_me, create_fake_token_response
from tests.utils.keys import GoogleSigner
from tests.utils.provider_stub import ProviderStub, raising

STATE = "cd" * 32


@pytest.fixture
def config(provider_configs):
    return provider_configs[OAuthProviderType.GOOGLE]


@pytest.fixture
def verifier():
    verifier = AsyncMock(spec=IIdentityVerifier)
    verifier.verify.return_value = ExternalProfile(
        provider=OAuthProviderType.GOOGLE,
        provider_id="g-1",
        email="bob@y.com",
        email_verified=True,
        first_name="Bob",
    )
    return verifier


def _adapter(config, verifier, routes):
    stub = ProviderStub(routes)
    return GoogleAdapter(config, verifier, transport=stub.transport), stub


class TestAuthorizationUrl:
    @pytest.mark.asyncio
    async def test_url_carries_client_scopes_and_state(self, config, verifier):
        adapter, _ = _adapter(config, verifier, {})

        url = await adapter.authorization_url(STATE)

        parsed = urlparse(url)
        query = parse_qs(parsed.query)
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == config.authorize_url
        assert query["client_id"] == [config.client_id]
        assert query["redirect_uri"] == [config.redirect_uri]
        assert query["response_type"] == ["code"]
        assert query["state"] == [STATE]
        assert query["access_type"] == ["offline"]
        scopes = query["scope"][0].split(" ")
        assert {"openid", "email", "profile"} <= set(scopes)
        assert "https://www.googleapis.com/auth/user.birthday.read" in scopes


class TestExchangeCode:
    @pytest.mark.asyncio
    async def test_successful_exchange_posts_client_credentials(self, config, verifier):
        # Arrange
        token_response = create_fake_token_response(id_token="id.token.value")
        adapter, stub = _adapter(
            config, verifier, {("POST", config.token_url): httpx.Response(200, json=token_response)}
        )

        # Act
        tokens = await adapter.exchange_code("4/0AX-code")

        # Assert
        assert tokens["access_token"] == token_response["access_token"]
        assert tokens["id_token"] == "id.token.value"
        form = parse_qs(stub.requests[0].content.decode())
        assert form["code"] == ["4/0AX-code"]
        assert form["grant_type"] == ["authorization_code"]
        assert form["client_id"] == [config.client_id]
        assert form["client_secret"] == [config.client_secret]
        assert form["redirect_uri"] == [config.redirect_uri]

    @pytest.mark.asyncio
    async def test_rejected_code_maps_to_400(self, config, verifier):
        adapter, _ = _adapter(
            config,
            verifier,
            {("POST", config.token_url): httpx.Response(400, json={"error": "invalid_grant"})},
        )

        with pytest.raises(ProviderExchangeError) as exc_info:
            await adapter.exchange_code("expired-code")

        assert exc_info.value.status_code == 400
        assert exc_info.value.provider == "google"
        assert "Google" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_provider_outage_keeps_its_status(self, config, verifier):
        adapter, _ = _adapter(config, verifier, {("POST", config.token_url): httpx.Response(503)})

        with pytest.raises(ProviderExchangeError) as exc_info:
            await adapter.exchange_code("code")

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_unreachable_provider_has_no_status(self, config, verifier):
        adapter, _ = _adapter(
            config, verifier, {("POST", config.token_url): raising(httpx.ConnectTimeout("timeout"))}
        )

        with pytest.raises(ProviderExchangeError) as exc_info:
            await adapter.exchange_code("code")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_missing_access_token_is_an_error(self, config, verifier):
        adapter, _ = _adapter(
            config, verifier, {("POST", config.token_url): httpx.Response(200, json={"token_type": "Bearer"})}
        )

        with pytest.raises(ProviderExchangeError, match="No access token"):
            await adapter.exchange_code("code")

    @pytest.mark.asyncio
    async def test_empty_code_is_rejected_locally(self, config, verifier):
        adapter, stub = _adapter(config, verifier, {})

        with pytest.raises(ProviderExchangeError):
            await adapter.exchange_code("")

        assert stub.requests == []


class TestFetchProfile:
    @pytest.mark.asyncio
    async def test_profile_is_built_from_the_verified_id_token_and_people_api(self, config, verifier):
        adapter, stub = _adapter(
            config,
            verifier,
            {("GET", config.profile_url): httpx.Response(200, json=create_fake_people_me())},
        )

        profile = await adapter.fetch_profile({"access_token": "at-1", "id_token": "idt"})

        verifier.verify.assert_awaited_once_with("idt")
        assert profile.provider_id == "g-1"
        assert profile.email == "bob@y.com"
        assert profile.phone == "+15550100"
        assert profile.gender == "male"
        assert profile.birthday == date(1990, 4, 23)
        people_request = stub.calls_to("GET", config.profile_url)[0]
        assert people_request.headers["Authorization"] == "Bearer at-1"
        assert people_request.url.params["personFields"] == "phoneNumbers,genders,birthdays"

    @pytest.mark.asyncio
    async def test_missing_id_token_is_a_profile_error(self, config, verifier):
        adapter, _ = _adapter(config, verifier, {})

        with pytest.raises(ProviderProfileError, match="id_token"):
            await adapter.fetch_profile({"access_token": "at-1"})

        verifier.verify.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_people_api_failure_is_not_fatal(self, config, verifier):
        """Test that the login continues with ID token data when People API refuses."""
        adapter, _ = _adapter(
            config,
            verifier,
            {("GET", config.profile_url): httpx.Response(403, json={"error": {"status": "PERMISSION_DENIED"}})},
        )

        profile = await adapter.fetch_profile({"access_token": "at-1", "id_token": "idt"})

        assert profile.provider_id == "g-1"
        assert profile.phone is None
        assert profile.birthday is None

    @pytest.mark.asyncio
    async def test_birthday_without_year_is_ignored(self, config, verifier):
        people = {"birthdays": [{"date": {"month": 4, "day": 23}}]}
        adapter, _ = _adapter(config, verifier, {("GET", config.profile_url): httpx.Response(200, json=people)})

        profile = await adapter.fetch_profile({"access_token": "at-1", "id_token": "idt"})

        assert profile.birthday is None

    @pytest.mark.asyncio
    async def test_invalid_id_token_propagates(self, config, google_verifier_config):
        """Test the adapter with the real verifier and a token for another client."""
        signer = GoogleSigner()
        stub = ProviderStub(
            {("GET", google_verifier_config.certs_url): httpx.Response(200, json=signer.jwks())}
        )
        adapter = GoogleAdapter(
            config,
            GoogleIdTokenVerifier(google_verifier_config, transport=stub.transport),
            transport=stub.transport,
        )
        id_token = signer.sign(GoogleSigner.claims("someone-else", sub="1", email="bob@y.com"))

        with pytest.raises(InvalidIdentityAssertionError):
            await adapter.fetch_profile({"access_token": "at-1", "id_token": id_token})


def test_adapter_refuses_a_foreign_config(provider_configs, verifier):
    with pytest.raises(ValueError):
        GoogleAdapter(provider_configs[OAuthProviderType.FACEBOOK], verifier)
