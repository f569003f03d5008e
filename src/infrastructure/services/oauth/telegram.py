"""Telegram identity verifier.

The Telegram login widget posts the user's data to the frontend, which
forwards it to the callback. The only server-side check is that the bot API
knows the chat id. The payload itself supplies the display data.
"""

from typing import Any, Mapping, Optional

import httpx
from structlog import get_logger

from src.core.exceptions import ProviderProfileError, TelegramUserNotFoundError
from src.domain.interfaces.oauth import ITelegramVerifier
from src.domain.value_objects.external_profile import ExternalProfile
from src.domain.value_objects.oauth_provider import OAuthProviderType
from src.infrastructure.services.oauth.config import TelegramConfig

logger = get_logger(__name__)


def fallback_username(telegram_id: int) -> str:
    return f"telegram_user_{telegram_id}"


class TelegramVerifier(ITelegramVerifier):
    provider = OAuthProviderType.TELEGRAM

    def __init__(
        self,
        config: TelegramConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._transport = transport

    @property
    def _get_chat_url(self) -> str:
        return f"{self.config.api_url.rstrip('/')}/bot{self.config.bot_token}/getChat"

    async def verify(self, telegram_id: int, payload: Mapping[str, Any]) -> ExternalProfile:
        await self._ensure_chat_exists(telegram_id)

        return ExternalProfile(
            provider=self.provider,
            provider_id=str(telegram_id),
            username=payload.get("username") or fallback_username(telegram_id),
            first_name=payload.get("first_name"),
            last_name=payload.get("last_name"),
            avatar_url=payload.get("photo_url"),
        )

    async def _ensure_chat_exists(self, telegram_id: int) -> None:
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout, transport=self._transport
            ) as client:
                response = await client.get(self._get_chat_url, params={"chat_id": telegram_id})
        except httpx.TransportError as e:
            logger.error("Telegram bot API unreachable", error=type(e).__name__)
            raise ProviderProfileError(
                "Could not reach Telegram", provider=self.provider.value
            ) from e

        if response.status_code >= 500:
            raise ProviderProfileError(
                "Telegram bot API failed",
                provider=self.provider.value,
                status_code=response.status_code,
            )
        try:
            body = response.json()
        except ValueError as e:
            raise ProviderProfileError(
                "Unexpected response from Telegram", provider=self.provider.value
            ) from e

        # Unknown chats come back as 400 with {"ok": false, "description": ...}.
        if not isinstance(body, dict) or body.get("ok") is not True:
            logger.info(
                "Telegram chat lookup failed",
                status=response.status_code,
                description=body.get("description") if isinstance(body, dict) else None,
            )
            raise TelegramUserNotFoundError()
