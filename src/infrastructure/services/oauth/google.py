"""Google provider adapter.

Google's identity comes from the signed ID token of the token response,
verified by `GoogleIdTokenVerifier`. Phone, gender and birthday are not part
of the ID token and are read best-effort from the People API.
"""

import dataclasses
from datetime import date
from typing import Any, Dict, Mapping, Optional

import httpx
from structlog import get_logger

from src.core.exceptions import ProviderProfileError
from src.domain.interfaces.oauth import IIdentityVerifier
from src.domain.value_objects.external_profile import ExternalProfile
from src.domain.value_objects.oauth_provider import OAuthProviderType
from src.infrastructure.services.oauth.base import BaseProviderAdapter
from src.infrastructure.services.oauth.config import ProviderConfig

logger = get_logger(__name__)

PEOPLE_FIELDS = "phoneNumbers,genders,birthdays"


def _first_value(entries: Any, key: str = "value") -> Optional[Any]:
    if not isinstance(entries, list):
        return None
    for entry in entries:
        if isinstance(entry, dict) and entry.get(key):
            return entry[key]
    return None


def _parse_birthday(entries: Any) -> Optional[date]:
    if not isinstance(entries, list):
        return None
    for entry in entries:
        raw = entry.get("date") if isinstance(entry, dict) else None
        if not isinstance(raw, dict):
            continue
        try:
            return date(int(raw["year"]), int(raw["month"]), int(raw["day"]))
        except (KeyError, TypeError, ValueError):
            # Users may share a birthday without the year.
            continue
    return None


class GoogleAdapter(BaseProviderAdapter):
    provider = OAuthProviderType.GOOGLE
    display_name = "Google"

    def __init__(
        self,
        config: ProviderConfig,
        verifier: IIdentityVerifier,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(config, transport=transport)
        self.verifier = verifier

    async def fetch_profile(self, tokens: Mapping[str, Any]) -> ExternalProfile:
        id_token = tokens.get("id_token")
        if not id_token:
            raise ProviderProfileError("No id_token received from Google", provider=self.provider.value)

        profile = await self.verifier.verify(id_token)

        extras = await self._fetch_people_extras(tokens.get("access_token"))
        if extras:
            profile = dataclasses.replace(profile, **extras)
        return profile

    async def _fetch_people_extras(self, access_token: Optional[str]) -> Dict[str, Any]:
        """Read phone, gender and birthday. Failures yield no extras."""
        if not access_token or not self.config.profile_url:
            return {}
        try:
            person = await self.fetch_json(
                self.config.profile_url,
                params={"personFields": PEOPLE_FIELDS},
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except ProviderProfileError as e:
            logger.warning(
                "Google People API unavailable, continuing without extras",
                status=e.status_code,
                error=e.message,
            )
            return {}

        extras = {
            "phone": _first_value(person.get("phoneNumbers")),
            "gender": _first_value(person.get("genders")),
            "birthday": _parse_birthday(person.get("birthdays")),
        }
        return {key: value for key, value in extras.items() if value is not None}
