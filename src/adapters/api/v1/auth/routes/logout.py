from __future__ import annotations

"""Logout route.

Revokes the presented access token and every refresh token of the account,
so all sessions of the user end, not only the current one.
"""

from fastapi import APIRouter, Request, Response, status
from structlog import get_logger

from src.adapters.api.v1.auth.schemas import MessageResponse
from src.domain.services.auth.credentials import clear_refresh_cookie
from src.infrastructure.dependency_injection.auth_dependencies import CurrentUser, Issuer

logger = get_logger(__name__)
router = APIRouter()


@router.post(
    "/logout",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Logout current user",
    responses={
        200: {"description": "Successfully logged out"},
        401: {"description": "Authentication failed - missing, invalid or revoked token"},
    },
)
async def logout_user(
    request: Request,
    response: Response,
    current: CurrentUser,
    issuer: Issuer,
) -> MessageResponse:
    user, claims = current
    await issuer.revoke_all(user, claims)
    clear_refresh_cookie(response)

    await logger.ainfo(
        "Logout request completed successfully",
        user_id=user.id,
        correlation_id=getattr(request.state, "correlation_id", None),
    )
    return MessageResponse(message="Logged out successfully")
