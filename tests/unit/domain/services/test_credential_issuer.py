"""Unit tests for the CredentialIssuer."""

import dataclasses
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import jwt
import pytest

from src.core.exceptions import AuthenticationError, InvalidRefreshTokenError
from src.domain.entities.refresh_token import RefreshToken
from src.domain.entities.user import Role
from src.domain.interfaces.repositories import IRefreshTokenRepository, IUserRepository
from src.domain.interfaces.token_management import ITokenBlocklist
from src.domain.services.auth.credentials import (
    CredentialIssuer,
    attach_refresh_cookie,
    clear_refresh_cookie,
)
from src.domain.value_objects.credentials import CredentialPair
from tests.factories import create_fake_user


@pytest.fixture
def user():
    return create_fake_user(id=12, email="bob@y.com", role=Role.MASTER)


@pytest.fixture
def user_repository(user):
    repository = AsyncMock(spec=IUserRepository)
    repository.get_by_id.return_value = user
    return repository


@pytest.fixture
def refresh_repository():
    repository = AsyncMock(spec=IRefreshTokenRepository)
    repository.create.return_value = "raw-refresh-token"
    repository.get_valid.return_value = RefreshToken(
        id=1, user_id=12, token_hash="x" * 64, expires_at=datetime(2100, 1, 1)
    )
    repository.delete.return_value = True
    repository.delete_all_for.return_value = 2
    return repository


@pytest.fixture
def blocklist():
    blocklist = AsyncMock(spec=ITokenBlocklist)
    blocklist.is_blocked.return_value = False
    return blocklist


@pytest.fixture
def issuer(user_repository, refresh_repository, blocklist, token_config):
    return CredentialIssuer(user_repository, refresh_repository, blocklist, token_config)


class TestIssue:
    @pytest.mark.asyncio
    async def test_issue_returns_signed_access_token_and_raw_refresh(self, issuer, user, token_config, refresh_repository):
        # Act
        credentials = await issuer.issue(user)

        # Assert
        claims = jwt.decode(
            credentials.access_token,
            token_config.public_key,
            algorithms=["RS256"],
            audience=token_config.audience,
            issuer=token_config.issuer,
        )
        assert claims["sub"] == "12"
        assert claims["email"] == "bob@y.com"
        assert claims["role"] == "master"
        assert claims["exp"] - claims["iat"] == token_config.access_ttl_minutes * 60
        assert credentials.expires_in == token_config.access_ttl_minutes * 60
        assert credentials.refresh_token == "raw-refresh-token"
        assert credentials.token_type == "bearer"
        refresh_repository.create.assert_awaited_once_with(user, token_config.refresh_ttl_seconds)

    def test_every_access_token_has_a_distinct_jti(self, issuer, token_config, user):
        first = issuer.decode_access_token(issuer.create_access_token(user))
        second = issuer.decode_access_token(issuer.create_access_token(user))
        assert first["jti"] != second["jti"]

    def test_refresh_token_is_hidden_from_repr(self):
        pair = CredentialPair(access_token="a", expires_in=1, refresh_token="secret", refresh_expires_in=2)
        assert "secret" not in repr(pair)


class TestRotate:
    @pytest.mark.asyncio
    async def test_rotation_deletes_old_token_and_issues_new_pair(self, issuer, refresh_repository, user):
        returned_user, credentials = await issuer.rotate("raw-old")

        assert returned_user is user
        refresh_repository.delete.assert_awaited_once_with("raw-old")
        assert credentials.refresh_token == "raw-refresh-token"

    @pytest.mark.asyncio
    async def test_unknown_token_is_rejected(self, issuer, refresh_repository):
        refresh_repository.get_valid.return_value = None

        with pytest.raises(InvalidRefreshTokenError):
            await issuer.rotate("raw-unknown")

        refresh_repository.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_rotation_loses(self, issuer, refresh_repository):
        """Test that only the caller that deleted the row gets a new pair."""
        refresh_repository.delete.return_value = False

        with pytest.raises(InvalidRefreshTokenError):
            await issuer.rotate("raw-old")

        refresh_repository.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_inactive_account_cannot_refresh(self, issuer, user_repository):
        user_repository.get_by_id.return_value = create_fake_user(id=12, is_active=False)

        with pytest.raises(InvalidRefreshTokenError):
            await issuer.rotate("raw-old")


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_valid_token_resolves_the_user(self, issuer, user):
        token = issuer.create_access_token(user)

        resolved, claims = await issuer.authenticate(token)

        assert resolved is user
        assert claims["sub"] == "12"

    @pytest.mark.asyncio
    async def test_revoked_token_is_rejected(self, issuer, user, blocklist):
        blocklist.is_blocked.return_value = True

        with pytest.raises(AuthenticationError, match="revoked"):
            await issuer.authenticate(issuer.create_access_token(user))

    @pytest.mark.asyncio
    async def test_expired_token_is_rejected(self, issuer, user):
        expired = CredentialIssuer(
            issuer.user_repository,
            issuer.refresh_repository,
            issuer.blocklist,
            dataclasses.replace(issuer.config, access_ttl_minutes=-1),
        )

        with pytest.raises(AuthenticationError, match="Invalid or expired"):
            await issuer.authenticate(expired.create_access_token(user))

    @pytest.mark.asyncio
    async def test_foreign_audience_is_rejected(self, issuer, user):
        other = CredentialIssuer(
            issuer.user_repository,
            issuer.refresh_repository,
            issuer.blocklist,
            dataclasses.replace(issuer.config, audience="someone-else"),
        )

        with pytest.raises(AuthenticationError):
            await issuer.authenticate(other.create_access_token(user))

    @pytest.mark.asyncio
    async def test_garbage_is_rejected(self, issuer):
        with pytest.raises(AuthenticationError):
            await issuer.authenticate("not-a-jwt")


class TestRevokeAll:
    @pytest.mark.asyncio
    async def test_blocks_the_jti_for_its_remaining_lifetime(self, issuer, user, blocklist, refresh_repository):
        claims = {
            "jti": "jti-1",
            "exp": (datetime.now(timezone.utc) + timedelta(minutes=10)).timestamp(),
        }

        await issuer.revoke_all(user, claims)

        jti, ttl = blocklist.block.await_args.args
        assert jti == "jti-1"
        assert 590 <= ttl <= 600
        refresh_repository.delete_all_for.assert_awaited_once_with(user)


class TestRefreshCookie:
    def test_attach_sets_http_only_cookie(self):
        response = MagicMock()
        settings = MagicMock(
            REFRESH_COOKIE_NAME="refresh_token",
            REFRESH_COOKIE_PATH="/api/v1/auth/token/refresh",
            REFRESH_COOKIE_DOMAIN=None,
            REFRESH_COOKIE_SECURE=True,
            REFRESH_COOKIE_SAMESITE="strict",
        )
        pair = CredentialPair(access_token="a", expires_in=900, refresh_token="raw", refresh_expires_in=3600)

        attach_refresh_cookie(response, pair, app_settings=settings)

        response.set_cookie.assert_called_once_with(
            key="refresh_token",
            value="raw",
            max_age=3600,
            path="/api/v1/auth/token/refresh",
            domain=None,
            secure=True,
            httponly=True,
            samesite="strict",
        )

    def test_clear_deletes_the_cookie(self):
        response = MagicMock()
        clear_refresh_cookie(response)
        assert response.delete_cookie.call_args.kwargs["key"] == "refresh_token"
