"""Request helpers shared by the API journey tests."""

from typing import Optional
from urllib.parse import parse_qs, urlparse

import httpx

from src.core.config.settings import settings
from tests.utils.provider_stub import cookie_value


async def start_login(client: httpx.AsyncClient, provider: str = "google") -> str:
    """Request an authorization URL and return the state embedded in it."""
    response = await client.get(f"/api/v1/auth/{provider}/url")
    assert response.status_code == 200, response.text
    return parse_qs(urlparse(response.json()["url"]).query)["state"][0]


async def login(
    client: httpx.AsyncClient,
    provider: str = "google",
    role: Optional[str] = None,
    code: str = "auth-code",
) -> httpx.Response:
    state = await start_login(client, provider)
    body = {"code": code, "state": state}
    if role is not None:
        body["role"] = role
    return await client.post(f"/api/v1/auth/{provider}/callback", json=body)


def refresh_cookie(response: httpx.Response) -> Optional[str]:
    return cookie_value(response, settings.REFRESH_COOKIE_NAME)


async def refresh(client: httpx.AsyncClient, raw_token: Optional[str]) -> httpx.Response:
    """Call the refresh endpoint presenting exactly `raw_token`."""
    client.cookies.clear()
    headers = {"Cookie": f"{settings.REFRESH_COOKIE_NAME}={raw_token}"} if raw_token else {}
    return await client.post("/api/v1/auth/token/refresh", headers=headers)


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
