"""Facebook provider adapter.

Facebook takes a comma separated scope list and exchanges the code through a
GET with query parameters. The profile comes from the Graph API ``me`` node.
"""

from datetime import date, datetime
from typing import Any, Mapping, Optional, Tuple

from authlib.integrations.httpx_client import AsyncOAuth2Client
from structlog import get_logger

from src.core.exceptions import ProviderExchangeError, ProviderProfileError
from src.domain.value_objects.external_profile import ExternalProfile
from src.domain.value_objects.oauth_provider import OAuthProviderType
from src.infrastructure.services.oauth.base import BaseProviderAdapter

logger = get_logger(__name__)

GRAPH_FIELDS = "id,name,email,picture,birthday,link,age_range,gender"


def split_name(name: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """Split a display name on the first space into first and last name."""
    if not name or not name.strip():
        return None, None
    first, _, last = name.strip().partition(" ")
    return first, (last.strip() or None)


def parse_birthday(value: Optional[str]) -> Optional[date]:
    # Graph API returns MM/DD/YYYY, or a partial date depending on the user's privacy settings.
    if not value:
        return None
    try:
        return datetime.strptime(value, "%m/%d/%Y").date()
    except ValueError:
        return None


class FacebookAdapter(BaseProviderAdapter):
    provider = OAuthProviderType.FACEBOOK
    display_name = "Facebook"

    def scope_param(self) -> str:
        return ",".join(self.config.scopes)

    async def _request_token(self, client: AsyncOAuth2Client, code: str) -> Mapping[str, Any]:
        response = await client.request(
            "GET",
            self.config.token_url,
            params={
                "client_id": self.config.client_id,
                "client_secret": self.config.client_secret,
                "redirect_uri": self.config.redirect_uri,
                "code": code,
            },
            withhold_token=True,
        )
        if response.status_code >= 500:
            response.raise_for_status()
        payload = response.json()
        if response.status_code >= 400 or "error" in payload:
            error = payload.get("error") if isinstance(payload, dict) else None
            logger.warning(
                "Facebook rejected authorization code",
                status=response.status_code,
                error_type=error.get("type") if isinstance(error, dict) else error,
            )
            raise ProviderExchangeError(
                self.exchange_failed_message,
                provider=self.provider.value,
                status_code=response.status_code if response.status_code >= 400 else 400,
            )
        return payload

    async def fetch_profile(self, tokens: Mapping[str, Any]) -> ExternalProfile:
        data = await self.fetch_json(
            self.config.profile_url,
            params={"fields": GRAPH_FIELDS, "access_token": tokens["access_token"]},
        )
        if not data.get("id"):
            raise ProviderProfileError(
                "Facebook profile has no identifier", provider=self.provider.value
            )

        first_name, last_name = split_name(data.get("name"))
        picture = data.get("picture") or {}
        avatar_url = (picture.get("data") or {}).get("url") if isinstance(picture, dict) else None

        return ExternalProfile(
            provider=self.provider,
            provider_id=str(data["id"]),
            email=data.get("email"),
            first_name=first_name,
            last_name=last_name,
            avatar_url=avatar_url,
            bio=data.get("link"),
            gender=data.get("gender"),
            birthday=parse_birthday(data.get("birthday")),
        )
