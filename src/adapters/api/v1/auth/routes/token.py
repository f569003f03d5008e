"""Refresh-token rotation endpoint."""

from typing import Optional

import structlog
from fastapi import APIRouter, Request, Response, status

from src.adapters.api.v1.auth.schemas import AuthResponse
from src.core.config.settings import settings
from src.core.exceptions import InvalidRefreshTokenError
from src.core.ratelimiter import AUTH_RATE_LIMIT, limiter
from src.domain.services.auth.credentials import attach_refresh_cookie
from src.infrastructure.dependency_injection.auth_dependencies import Issuer

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "/token/refresh",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Rotate the refresh token",
    responses={401: {"description": "Refresh cookie missing, unknown or expired"}},
)
@limiter.limit(AUTH_RATE_LIMIT)
async def refresh_token(
    request: Request,
    response: Response,
    issuer: Issuer,
) -> AuthResponse:
    """Trade the refresh cookie for a new access token and a new cookie.

    The presented refresh token is deleted, replaying it fails.
    """
    raw_token: Optional[str] = request.cookies.get(settings.REFRESH_COOKIE_NAME)
    if not raw_token:
        raise InvalidRefreshTokenError("Refresh token cookie is missing")

    user, credentials = await issuer.rotate(raw_token)
    attach_refresh_cookie(response, credentials)
    return AuthResponse.build(user, credentials)
