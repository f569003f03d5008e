"""Google ID token verifier.

Validates the RS256 signature of a Google ID token against Google's published
key set, then checks audience, issuer and expiry. The key set is cached on the
verifier instance for the process lifetime and refetched once when a
token names a key id the cached set does not contain, which covers Google's
key rotation.
"""

import time
from typing import Any, Dict, List, Mapping, Optional

import httpx
from jose import JWTError, jwt as jose_jwt
from structlog import get_logger

from src.core.exceptions import InvalidIdentityAssertionError, ProviderProfileError
from src.domain.interfaces.oauth import IIdentityVerifier
from src.domain.value_objects.external_profile import ExternalProfile
from src.domain.value_objects.oauth_provider import OAuthProviderType
from src.infrastructure.services.oauth.config import GoogleVerifierConfig

logger = get_logger(__name__)

# Claims are checked explicitly below, jose only verifies the signature.
_SIGNATURE_ONLY = {
    "verify_signature": True,
    "verify_aud": False,
    "verify_iss": False,
    "verify_exp": False,
    "verify_iat": False,
    "verify_nbf": False,
    "verify_sub": False,
    "verify_jti": False,
    "verify_at_hash": False,
}


def _as_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


class GoogleIdTokenVerifier(IIdentityVerifier):
    """Verifies Google ID tokens and turns their claims into a profile.

    Attributes:
        config: Client id, certs URL and accepted issuers.
    """

    def __init__(
        self,
        config: GoogleVerifierConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._transport = transport
        self._jwks: Optional[Dict[str, Any]] = None

    async def verify(self, id_token: str) -> ExternalProfile:
        """Verify an ID token.

        Args:
            id_token: The compact JWS returned by Google's token endpoint.

        Returns:
            ExternalProfile: Profile built from the verified claims.

        Raises:
            InvalidIdentityAssertionError: Bad signature, foreign audience,
                unknown issuer, expired or malformed token.
            ProviderProfileError: The key set could not be fetched.
        """
        if not id_token:
            raise InvalidIdentityAssertionError("Missing identity token")

        claims = await self._verify_signature(id_token)
        self._check_claims(claims)

        subject = claims.get("sub")
        if not subject:
            raise InvalidIdentityAssertionError("Identity token has no subject")

        profile = ExternalProfile(
            provider=OAuthProviderType.GOOGLE,
            provider_id=str(subject),
            email=claims.get("email"),
            # Google only vouches for an address it marks verified.
            email_verified=_as_bool(claims.get("email_verified")) is True,
            first_name=claims.get("given_name"),
            last_name=claims.get("family_name"),
            avatar_url=claims.get("picture"),
        )
        logger.debug("Google ID token verified", **profile.mask_for_logging())
        return profile

    async def _verify_signature(self, id_token: str) -> Mapping[str, Any]:
        try:
            key_id = jose_jwt.get_unverified_header(id_token).get("kid")
        except JWTError as e:
            raise self._reject("format", e)

        had_cached_keys = self._jwks is not None
        jwks = await self._get_jwks()
        # Only an unknown key id points at a rotation, anything else is a bad token.
        if had_cached_keys and key_id not in self._key_ids(jwks):
            logger.info("ID token signed with an unknown key, refreshing key set", kid=key_id)
            jwks = await self._get_jwks(force_refresh=True)

        try:
            return self._decode(id_token, jwks)
        except JWTError as e:
            raise self._reject("signature", e)

    @staticmethod
    def _key_ids(jwks: Mapping[str, Any]) -> List[Any]:
        return [key.get("kid") for key in jwks.get("keys", []) if isinstance(key, dict)]

    @staticmethod
    def _decode(id_token: str, jwks: Mapping[str, Any]) -> Mapping[str, Any]:
        return jose_jwt.decode(id_token, jwks, algorithms=["RS256"], options=_SIGNATURE_ONLY)

    def _check_claims(self, claims: Mapping[str, Any]) -> None:
        audience = claims.get("aud")
        audiences = audience if isinstance(audience, list) else [audience]
        if not self.config.client_id or self.config.client_id not in audiences:
            raise self._reject("audience")

        if claims.get("iss") not in self.config.issuers:
            raise self._reject("issuer")

        expiry = claims.get("exp")
        try:
            expired = float(expiry) <= time.time()
        except (TypeError, ValueError):
            expired = True
        if expired:
            raise self._reject("expiry")

    @staticmethod
    def _reject(check: str, cause: Optional[Exception] = None) -> InvalidIdentityAssertionError:
        logger.warning("Google ID token rejected", failed_check=check, error=str(cause) if cause else None)
        return InvalidIdentityAssertionError(f"Invalid identity token: {check} check failed")

    async def _get_jwks(self, force_refresh: bool = False) -> Dict[str, Any]:
        if self._jwks is None or force_refresh:
            self._jwks = await self._fetch_jwks()
        return self._jwks

    async def _fetch_jwks(self) -> Dict[str, Any]:
        client_kwargs: Dict[str, Any] = {"timeout": self.config.timeout}
        if self._transport is not None:
            client_kwargs["transport"] = self._transport
        try:
            async with httpx.AsyncClient(**client_kwargs) as client:
                response = await client.get(self.config.certs_url)
                response.raise_for_status()
                jwks = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderProfileError(
                "Failed to fetch Google signing keys",
                provider=OAuthProviderType.GOOGLE.value,
                status_code=e.response.status_code,
            ) from e
        except (httpx.TransportError, ValueError) as e:
            raise ProviderProfileError(
                "Failed to fetch Google signing keys", provider=OAuthProviderType.GOOGLE.value
            ) from e

        if not isinstance(jwks, dict) or not jwks.get("keys"):
            raise ProviderProfileError(
                "Google returned an empty key set", provider=OAuthProviderType.GOOGLE.value
            )
        logger.info("Google signing keys fetched", key_count=len(jwks["keys"]))
        return jwks
