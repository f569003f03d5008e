"""Credential Issuer.

Mints the application's own session credentials after a successful login:
a short-lived RS256 access token for the response body and an opaque,
server-tracked refresh token delivered only as an HttpOnly cookie.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Tuple

from fastapi import Response
from jwt import PyJWTError, decode as jwt_decode, encode as jwt_encode
from structlog import get_logger

from src.core.config.settings import settings
from src.core.exceptions import AuthenticationError, InvalidRefreshTokenError
from src.domain.entities.user import User
from src.domain.interfaces.repositories import IRefreshTokenRepository, IUserRepository
from src.domain.interfaces.token_management import ICredentialIssuer, ITokenBlocklist
from src.domain.value_objects.credentials import CredentialPair

logger = get_logger(__name__)

ALGORITHM = "RS256"
REQUIRED_CLAIMS = ["sub", "exp", "iat", "jti", "iss", "aud"]


@dataclass(frozen=True)
class TokenConfig:
    private_key: str
    public_key: str
    issuer: str
    audience: str
    access_ttl_minutes: int
    refresh_ttl_seconds: int

    @classmethod
    def from_settings(cls, app_settings=settings) -> "TokenConfig":
        return cls(
            private_key=app_settings.JWT_PRIVATE_KEY.get_secret_value(),
            public_key=app_settings.JWT_PUBLIC_KEY,
            issuer=app_settings.JWT_ISSUER,
            audience=app_settings.JWT_AUDIENCE,
            access_ttl_minutes=app_settings.ACCESS_TOKEN_EXPIRE_MINUTES,
            refresh_ttl_seconds=app_settings.REFRESH_TOKEN_TTL_SECONDS,
        )


class CredentialIssuer(ICredentialIssuer):
    """Issues, rotates and revokes access/refresh credential pairs.

    Attributes:
        user_repository: Loads accounts named by tokens.
        refresh_repository: Server-side store of hashed refresh tokens.
        blocklist: Revoked access-token ids.
        config: Signing keys, claims and lifetimes.
    """

    def __init__(
        self,
        user_repository: IUserRepository,
        refresh_repository: IRefreshTokenRepository,
        blocklist: ITokenBlocklist,
        config: Optional[TokenConfig] = None,
    ):
        self.user_repository = user_repository
        self.refresh_repository = refresh_repository
        self.blocklist = blocklist
        self.config = config or TokenConfig.from_settings()

    def create_access_token(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role.value,
            "iss": self.config.issuer,
            "aud": self.config.audience,
            "exp": now + timedelta(minutes=self.config.access_ttl_minutes),
            "iat": now,
            "jti": secrets.token_urlsafe(24),
        }
        return jwt_encode(payload, self.config.private_key, algorithm=ALGORITHM)

    async def issue(self, user: User) -> CredentialPair:
        """Create a credential pair for an authenticated account.

        Args:
            user: The persisted account.

        Returns:
            CredentialPair: Signed access token and raw refresh token.
        """
        access_token = self.create_access_token(user)
        refresh_token = await self.refresh_repository.create(user, self.config.refresh_ttl_seconds)
        await logger.ainfo("Credentials issued", user_id=user.id, role=user.role.value)
        return CredentialPair(
            access_token=access_token,
            expires_in=self.config.access_ttl_minutes * 60,
            refresh_token=refresh_token,
            refresh_expires_in=self.config.refresh_ttl_seconds,
        )

    async def rotate(self, raw_refresh_token: str) -> Tuple[User, CredentialPair]:
        """Exchange a refresh token for a fresh pair, invalidating the old one.

        Raises:
            InvalidRefreshTokenError: Unknown, expired or concurrently rotated
                token, or the account is gone or inactive.
        """
        record = await self.refresh_repository.get_valid(raw_refresh_token)
        if record is None:
            raise InvalidRefreshTokenError()

        # Only the caller that deletes the row may rotate it.
        if not await self.refresh_repository.delete(raw_refresh_token):
            raise InvalidRefreshTokenError()

        user = await self.user_repository.get_by_id(record.user_id)
        if user is None or not user.is_active:
            await logger.awarning("Refresh for missing or inactive account", user_id=record.user_id)
            raise InvalidRefreshTokenError()

        credentials = await self.issue(user)
        await logger.ainfo("Refresh token rotated", user_id=user.id)
        return user, credentials

    def decode_access_token(self, token: str) -> Mapping[str, Any]:
        """Validate signature, issuer, audience and expiry of an access token.

        Raises:
            AuthenticationError: The token is malformed, forged or expired.
        """
        try:
            return jwt_decode(
                token,
                self.config.public_key,
                algorithms=[ALGORITHM],
                issuer=self.config.issuer,
                audience=self.config.audience,
                options={"require": REQUIRED_CLAIMS},
            )
        except PyJWTError as e:
            logger.info("Access token rejected", error_type=type(e).__name__)
            raise AuthenticationError("Invalid or expired token") from e

    async def authenticate(self, access_token: str) -> Tuple[User, Mapping[str, Any]]:
        claims = self.decode_access_token(access_token)
        if await self.blocklist.is_blocked(claims["jti"]):
            raise AuthenticationError("Token has been revoked")

        try:
            user_id = int(claims["sub"])
        except (TypeError, ValueError) as e:
            raise AuthenticationError("Invalid token subject") from e

        user = await self.user_repository.get_by_id(user_id)
        if user is None or not user.is_active:
            raise AuthenticationError("User account is inactive or missing")
        return user, claims

    async def revoke_all(self, user: User, claims: Mapping[str, Any]) -> None:
        """Log the account out everywhere.

        The presented access token is blocked for its remaining lifetime and
        every refresh token of the account is deleted.
        """
        remaining = int(claims["exp"] - datetime.now(timezone.utc).timestamp())
        await self.blocklist.block(claims["jti"], remaining)
        removed = await self.refresh_repository.delete_all_for(user)
        await logger.ainfo("Account logged out", user_id=user.id, refresh_tokens_removed=removed)


def attach_refresh_cookie(response: Response, credentials: CredentialPair, app_settings=settings) -> None:
    """Set the refresh-token cookie on a response."""
    response.set_cookie(
        key=app_settings.REFRESH_COOKIE_NAME,
        value=credentials.refresh_token,
        max_age=credentials.refresh_expires_in,
        path=app_settings.REFRESH_COOKIE_PATH,
        domain=app_settings.REFRESH_COOKIE_DOMAIN,
        secure=app_settings.REFRESH_COOKIE_SECURE,
        httponly=True,
        samesite=app_settings.REFRESH_COOKIE_SAMESITE,
    )


def clear_refresh_cookie(response: Response, app_settings=settings) -> None:
    response.delete_cookie(
        key=app_settings.REFRESH_COOKIE_NAME,
        path=app_settings.REFRESH_COOKIE_PATH,
        domain=app_settings.REFRESH_COOKIE_DOMAIN,
        secure=app_settings.REFRESH_COOKIE_SECURE,
        httponly=True,
        samesite=app_settings.REFRESH_COOKIE_SAMESITE,
    )
