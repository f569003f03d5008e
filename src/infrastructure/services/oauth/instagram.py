"""Instagram provider adapter (Instagram API with Instagram Login).

Instagram never asserts an email, accounts created through it receive the
synthetic placeholder address.
"""

from typing import Any, Mapping

from src.core.exceptions import ProviderProfileError
from src.domain.value_objects.external_profile import ExternalProfile
from src.domain.value_objects.oauth_provider import OAuthProviderType
from src.infrastructure.services.oauth.base import BaseProviderAdapter
from src.infrastructure.services.oauth.facebook import split_name

PROFILE_FIELDS = "id,username,name,profile_picture_url,biography"


class InstagramAdapter(BaseProviderAdapter):
    provider = OAuthProviderType.INSTAGRAM
    display_name = "Instagram"

    async def fetch_profile(self, tokens: Mapping[str, Any]) -> ExternalProfile:
        data = await self.fetch_json(
            self.config.profile_url,
            params={"fields": PROFILE_FIELDS, "access_token": tokens["access_token"]},
        )
        provider_id = data.get("id") or data.get("user_id") or tokens.get("user_id")
        if not provider_id:
            raise ProviderProfileError(
                "Instagram profile has no identifier", provider=self.provider.value
            )

        first_name, last_name = split_name(data.get("name"))
        return ExternalProfile(
            provider=self.provider,
            provider_id=str(provider_id),
            username=data.get("username"),
            first_name=first_name,
            last_name=last_name,
            avatar_url=data.get("profile_picture_url"),
            bio=data.get("biography"),
        )
