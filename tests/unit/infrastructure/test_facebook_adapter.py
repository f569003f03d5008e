"""Unit tests for the Facebook provider adapter."""

from datetime import date
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from src.core.exceptions import ProviderExchangeError, ProviderProfileError
from src.domain.value_objects.oauth_provider import OAuthProviderType
from src.infrastructure.services.oauth import FacebookAdapter
from src.infrastructure.services.oauth.facebook import GRAPH_FIELDS, parse_birthday, split_name
from tests.factories import create_fake_facebook_me, create_fake_token_response
from tests.utils.provider_stub import ProviderStub


@pytest.fixture
def config(provider_configs):
    return provider_configs[OAuthProviderType.FACEBOOK]


def _adapter(config, routes):
    stub = ProviderStub(routes)
    return FacebookAdapter(config, transport=stub.transport), stub


@pytest.mark.asyncio
async def test_authorization_url_uses_comma_separated_scopes(config):
    adapter, _ = _adapter(config, {})

    url = await adapter.authorization_url("ef" * 32)

    query = parse_qs(urlparse(url).query)
    assert query["scope"] == ["email,user_birthday,user_link,user_age_range,user_gender,public_profile"]
    assert query["client_id"] == ["fb-client"]
    assert query["state"] == ["ef" * 32]


class TestExchangeCode:
    @pytest.mark.asyncio
    async def test_code_is_exchanged_with_a_get(self, config):
        adapter, stub = _adapter(
            config, {("GET", config.token_url): httpx.Response(200, json=create_fake_token_response())}
        )

        tokens = await adapter.exchange_code("AQD-code")

        assert tokens["access_token"]
        params = stub.requests[0].url.params
        assert params["code"] == "AQD-code"
        assert params["client_id"] == "fb-client"
        assert params["client_secret"] == "fb-secret"
        assert params["redirect_uri"] == config.redirect_uri

    @pytest.mark.asyncio
    async def test_graph_error_body_maps_to_exchange_error(self, config):
        """Test that a Graph API OAuthException keeps the provider's 4xx status."""
        body = {"error": {"message": "This authorization code has expired.", "type": "OAuthException", "code": 100}}
        adapter, _ = _adapter(config, {("GET", config.token_url): httpx.Response(400, json=body)})

        with pytest.raises(ProviderExchangeError) as exc_info:
            await adapter.exchange_code("expired")

        assert exc_info.value.status_code == 400
        assert "Facebook" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_error_in_200_body_is_still_an_error(self, config):
        adapter, _ = _adapter(
            config, {("GET", config.token_url): httpx.Response(200, json={"error": "invalid_code"})}
        )

        with pytest.raises(ProviderExchangeError) as exc_info:
            await adapter.exchange_code("code")

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_server_error_is_passed_on(self, config):
        adapter, _ = _adapter(config, {("GET", config.token_url): httpx.Response(500)})

        with pytest.raises(ProviderExchangeError) as exc_info:
            await adapter.exchange_code("code")

        assert exc_info.value.status_code == 500


class TestFetchProfile:
    @pytest.mark.asyncio
    async def test_graph_document_is_normalized(self, config):
        # Arrange
        me = create_fake_facebook_me(id="10158", name="Bob Van Dyke", email="Bob@Y.com")
        adapter, stub = _adapter(config, {("GET", config.profile_url): httpx.Response(200, json=me)})

        # Act
        profile = await adapter.fetch_profile({"access_token": "fb-at"})

        # Assert
        assert profile.provider is OAuthProviderType.FACEBOOK
        assert profile.provider_id == "10158"
        assert profile.email == "bob@y.com"
        assert profile.email_verified is None
        assert profile.first_name == "Bob"
        assert profile.last_name == "Van Dyke"
        assert profile.avatar_url == me["picture"]["data"]["url"]
        assert profile.bio == me["link"]
        assert profile.gender == "female"
        assert profile.birthday == date(1990, 4, 23)
        params = stub.requests[0].url.params
        assert params["fields"] == GRAPH_FIELDS
        assert params["access_token"] == "fb-at"

    @pytest.mark.asyncio
    async def test_profile_without_email(self, config):
        me = create_fake_facebook_me(id="10158")
        del me["email"]
        adapter, _ = _adapter(config, {("GET", config.profile_url): httpx.Response(200, json=me)})

        profile = await adapter.fetch_profile({"access_token": "fb-at"})

        assert profile.email is None

    @pytest.mark.asyncio
    async def test_profile_without_id_is_rejected(self, config):
        adapter, _ = _adapter(config, {("GET", config.profile_url): httpx.Response(200, json={"name": "x"})})

        with pytest.raises(ProviderProfileError):
            await adapter.fetch_profile({"access_token": "fb-at"})

    @pytest.mark.asyncio
    async def test_graph_failure_is_a_profile_error(self, config):
        adapter, _ = _adapter(config, {("GET", config.profile_url): httpx.Response(401, json={"error": {}})})

        with pytest.raises(ProviderProfileError) as exc_info:
            await adapter.fetch_profile({"access_token": "fb-at"})

        assert exc_info.value.status_code == 401


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Bob", ("Bob", None)),
        ("Bob Y", ("Bob", "Y")),
        ("  Mary Ann Smith ", ("Mary", "Ann Smith")),
        ("", (None, None)),
        (None, (None, None)),
    ],
)
def test_split_name(name, expected):
    assert split_name(name) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [("04/23/1990", date(1990, 4, 23)), ("04/23", None), ("1990", None), (None, None)],
)
def test_parse_birthday(raw, expected):
    assert parse_birthday(raw) == expected
