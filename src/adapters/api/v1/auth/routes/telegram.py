"""Telegram login widget endpoint."""

import structlog
from fastapi import APIRouter, Request, Response, status

from src.adapters.api.v1.auth.schemas import AuthResponse, TelegramCallbackRequest
from src.core.ratelimiter import AUTH_RATE_LIMIT, limiter
from src.domain.services.auth.credentials import attach_refresh_cookie
from src.infrastructure.dependency_injection.auth_dependencies import Orchestrator

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "/telegram/callback",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Complete a Telegram login",
    responses={
        404: {"description": "Telegram does not know the user, or Telegram login is disabled"},
        502: {"description": "Telegram bot API unavailable"},
    },
)
@limiter.limit(AUTH_RATE_LIMIT)
async def telegram_callback(
    request: Request,
    response: Response,
    payload: TelegramCallbackRequest,
    orchestrator: Orchestrator,
) -> AuthResponse:
    await logger.ainfo(
        "Telegram callback received",
        correlation_id=getattr(request.state, "correlation_id", None),
        role_requested=payload.role,
    )
    result = await orchestrator.complete_telegram_login(
        telegram_id=payload.id,
        payload=payload.profile_payload(),
        requested_role=payload.role,
    )
    attach_refresh_cookie(response, result.credentials)
    return AuthResponse.build(result.account, result.credentials)
