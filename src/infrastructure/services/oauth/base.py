"""Common machinery of the authorization-code provider adapters.

Authorization URLs and code exchanges go through authlib's httpx-based
`AsyncOAuth2Client`. Profile calls are plain GETs on the same client with
the token withheld, since every provider wants the access token in a
different place.
"""

from typing import Any, Dict, Mapping, Optional

import httpx
from authlib.integrations.base_client import OAuthError
from authlib.integrations.httpx_client import AsyncOAuth2Client
from structlog import get_logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.core.exceptions import ProviderExchangeError, ProviderProfileError
from src.domain.interfaces.oauth import IProviderAdapter
from src.domain.value_objects.oauth_provider import OAuthProviderType
from src.infrastructure.services.oauth.config import ProviderConfig

logger = get_logger(__name__)


class BaseProviderAdapter(IProviderAdapter):
    """Shared implementation of `IProviderAdapter`.

    Subclasses declare `provider`, adjust the authorization parameters and
    implement `fetch_profile`. `transport` lets tests plug an
    `httpx.MockTransport` underneath authlib.
    """

    provider: OAuthProviderType
    display_name: str = "provider"
    token_endpoint_auth_method: str = "client_secret_post"

    def __init__(
        self,
        config: ProviderConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if config.provider is not self.provider:
            raise ValueError(
                f"{type(self).__name__} cannot be configured for {config.provider.value}"
            )
        self.config = config
        self._transport = transport

    def _client(self) -> AsyncOAuth2Client:
        client_kwargs: Dict[str, Any] = {"timeout": self.config.timeout}
        if self._transport is not None:
            client_kwargs["transport"] = self._transport
        return AsyncOAuth2Client(
            client_id=self.config.client_id,
            client_secret=self.config.client_secret,
            redirect_uri=self.config.redirect_uri,
            token_endpoint_auth_method=self.token_endpoint_auth_method,
            **client_kwargs,
        )

    # -- authorization URL --------------------------------------------------

    def scope_param(self) -> str:
        return " ".join(self.config.scopes)

    def authorization_params(self) -> Dict[str, str]:
        return dict(self.config.extra_authorize_params)

    async def authorization_url(self, state: str) -> str:
        async with self._client() as client:
            url, _ = client.create_authorization_url(
                self.config.authorize_url,
                state=state,
                scope=self.scope_param(),
                **self.authorization_params(),
            )
        return url

    # -- code exchange ------------------------------------------------------

    @property
    def exchange_failed_message(self) -> str:
        return (
            f"Failed to exchange code with {self.display_name}. "
            "The code may be expired or invalid."
        )

    async def exchange_code(self, code: str) -> Mapping[str, Any]:
        if not code:
            raise ProviderExchangeError(
                "Authorization code is missing", provider=self.provider.value, status_code=400
            )
        try:
            async with self._client() as client:
                tokens = await self._request_token(client, code)
        except OAuthError as e:
            logger.warning(
                "Provider rejected authorization code",
                provider=self.provider.value,
                error=e.error,
            )
            raise ProviderExchangeError(
                self.exchange_failed_message, provider=self.provider.value, status_code=400
            ) from e
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Provider token endpoint failed",
                provider=self.provider.value,
                status=e.response.status_code,
            )
            raise ProviderExchangeError(
                self.exchange_failed_message,
                provider=self.provider.value,
                status_code=e.response.status_code,
            ) from e
        except httpx.TransportError as e:
            logger.error("Provider token endpoint unreachable", provider=self.provider.value, error=str(e))
            raise ProviderExchangeError(
                f"Could not reach {self.display_name}", provider=self.provider.value
            ) from e
        except ValueError as e:
            # Token endpoint answered with something that is not JSON.
            raise ProviderExchangeError(
                f"Unexpected token response from {self.display_name}", provider=self.provider.value
            ) from e

        if not tokens.get("access_token"):
            raise ProviderExchangeError(
                f"No access token received from {self.display_name}", provider=self.provider.value
            )
        logger.debug("Authorization code exchanged", provider=self.provider.value)
        return tokens

    async def _request_token(self, client: AsyncOAuth2Client, code: str) -> Mapping[str, Any]:
        return await client.fetch_token(
            self.config.token_url, code=code, grant_type="authorization_code"
        )

    # -- profile ------------------------------------------------------------

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, max=2),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _get_json(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        async with self._client() as client:
            response = await client.request(
                "GET", url, params=params, headers=headers, withhold_token=True
            )
        response.raise_for_status()
        return response.json()

    async def fetch_json(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, Any]:
        """GET a JSON document from the provider, translating failures.

        Raises:
            ProviderProfileError: On HTTP error status, transport failure after
                retries, or a body that is not a JSON object.
        """
        try:
            payload = await self._get_json(url, params=params, headers=headers)
        except httpx.HTTPStatusError as e:
            raise ProviderProfileError(
                f"Failed to fetch profile from {self.display_name}",
                provider=self.provider.value,
                status_code=e.response.status_code,
            ) from e
        except httpx.TransportError as e:
            raise ProviderProfileError(
                f"Could not reach {self.display_name}", provider=self.provider.value
            ) from e
        except ValueError as e:
            raise ProviderProfileError(
                f"Unexpected profile response from {self.display_name}",
                provider=self.provider.value,
            ) from e
        if not isinstance(payload, dict):
            raise ProviderProfileError(
                f"Unexpected profile response from {self.display_name}",
                provider=self.provider.value,
            )
        return payload
