from __future__ import annotations

"""Request-payload Pydantic models for authentication endpoints."""

from typing import Any, Dict, Optional
from urllib.parse import unquote

from pydantic import BaseModel, Field, field_validator

# A role outside {master, client} is accepted and treated as no preference.
RoleStr = Optional[str]


class CallbackRequest(BaseModel):
    """Payload expected by ``POST /auth/{provider}/callback``."""

    code: str = Field(..., min_length=1, max_length=4096, examples=["4/0AX4XfWh..."])
    state: str = Field(..., min_length=1, max_length=512, examples=["9f86d081884c7d65..."])
    role: RoleStr = Field(default=None, max_length=32, examples=["master"])

    @field_validator("code")
    @classmethod
    def _decode_code(cls, value: str) -> str:
        # Frontends forward the code exactly as it appeared in the redirect URL.
        return unquote(value)

    @field_validator("state")
    @classmethod
    def _strip_fragment(cls, value: str) -> str:
        # Facebook appends "#_=_" to the redirect, which some frontends pass along.
        return value.split("#", 1)[0].strip()


class TelegramCallbackRequest(BaseModel):
    """Payload expected by ``POST /auth/telegram/callback``.

    Mirrors the user object produced by the Telegram login widget.
    """

    id: int = Field(..., gt=0, examples=[123456789])
    username: Optional[str] = Field(default=None, max_length=64)
    first_name: Optional[str] = Field(default=None, max_length=128)
    last_name: Optional[str] = Field(default=None, max_length=128)
    photo_url: Optional[str] = Field(default=None, max_length=1024)
    role: RoleStr = Field(default=None, max_length=32, examples=["client"])

    def profile_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"id", "role"}, exclude_none=True)
