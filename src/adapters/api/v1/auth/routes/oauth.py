"""OAuth authorization-code endpoints.

The API layer is kept thin: it parses the request, delegates the whole flow
to the orchestrator and turns the result into a response with the refresh
cookie attached. Failures propagate as domain exceptions and are rendered by
the global handlers.
"""

import structlog
from fastapi import APIRouter, Request, Response, status

from src.adapters.api.v1.auth.schemas import (
    AuthorizationUrlResponse,
    AuthResponse,
    CallbackRequest,
)
from src.core.ratelimiter import AUTH_RATE_LIMIT, limiter
from src.domain.services.auth.credentials import attach_refresh_cookie
from src.infrastructure.dependency_injection.auth_dependencies import Orchestrator

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get(
    "/{provider}/url",
    response_model=AuthorizationUrlResponse,
    status_code=status.HTTP_200_OK,
    summary="Build the provider authorization URL",
    responses={404: {"description": "Unknown or unconfigured provider"}},
)
@limiter.limit(AUTH_RATE_LIMIT)
async def authorization_url(
    request: Request,
    provider: str,
    orchestrator: Orchestrator,
) -> AuthorizationUrlResponse:
    """Issue a fresh state and return the URL the browser must be sent to."""
    url = await orchestrator.build_authorization_url(provider)
    return AuthorizationUrlResponse(url=url)


@router.post(
    "/{provider}/callback",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Complete an OAuth login",
    responses={
        400: {"description": "Invalid or expired state, or rejected authorization code"},
        401: {"description": "Identity assertion failed verification"},
        403: {"description": "Email not verified by the provider"},
        404: {"description": "Unknown or unconfigured provider"},
        409: {"description": "Email already linked to another login method"},
        502: {"description": "Provider unavailable"},
    },
)
@limiter.limit(AUTH_RATE_LIMIT)
async def oauth_callback(
    request: Request,
    response: Response,
    provider: str,
    payload: CallbackRequest,
    orchestrator: Orchestrator,
) -> AuthResponse:
    """Exchange the authorization code and log the user in.

    The access token is returned in the body, the refresh token only as an
    HttpOnly cookie scoped to the refresh endpoint.
    """
    request_logger = logger.bind(
        correlation_id=getattr(request.state, "correlation_id", None),
        endpoint="oauth_callback",
        provider=provider,
    )
    await request_logger.ainfo("OAuth callback received", role_requested=payload.role)

    result = await orchestrator.complete_login(
        provider=provider,
        code=payload.code,
        state=payload.state,
        requested_role=payload.role,
    )
    attach_refresh_cookie(response, result.credentials)

    await request_logger.ainfo("OAuth login completed", user_id=result.account.id)
    return AuthResponse.build(result.account, result.credentials)
