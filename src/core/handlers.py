from __future__ import annotations

"""
Global exception handlers for the FastAPI application.

This module contains centralized handlers for custom application exceptions,
translating them into HTTP responses of the shape
``{"detail": <message>, "code": <machine readable reason>}``.
"""

from fastapi import Request, FastAPI
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette import status
from structlog import get_logger

from src.core.exceptions import (
    AccountCreationConflictError,
    AuthenticationError,
    DatabaseError,
    EmailAlreadyLinkedError,
    EmailNotVerifiedError,
    InvalidIdentityAssertionError,
    InvalidStateError,
    MasterhubError,
    ProviderError,
    TelegramUserNotFoundError,
    UnsupportedProviderError,
)

__all__ = [
    "authentication_error_handler",
    "invalid_state_error_handler",
    "unsupported_provider_error_handler",
    "provider_error_handler",
    "invalid_identity_assertion_error_handler",
    "telegram_user_not_found_error_handler",
    "email_already_linked_error_handler",
    "email_not_verified_error_handler",
    "account_creation_conflict_error_handler",
    "rate_limit_exception_handler",
    "database_error_handler",
    "masterhub_error_handler",
    "register_exception_handlers",
]

logger = get_logger(__name__)


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _error_response(status_code: int, exc: MasterhubError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code},
    )


async def authentication_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    """Handles `AuthenticationError`, returning a `401 Unauthorized`.

    Covers invalid, expired or revoked bearer tokens and refresh tokens.

    Args:
        request: The incoming `Request` object.
        exc: The `AuthenticationError` instance.

    Returns:
        A `JSONResponse` with a 401 status code and error detail.
    """
    logger.warning(
        "Authentication failure",
        error=exc.code,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    response = _error_response(status.HTTP_401_UNAUTHORIZED, exc)
    response.headers["WWW-Authenticate"] = "Bearer"
    return response


async def invalid_state_error_handler(request: Request, exc: InvalidStateError) -> JSONResponse:
    """Handles `InvalidStateError`, returning a `400 Bad Request`.

    An unknown, expired or replayed state. The client must restart the flow
    from a fresh authorization URL.
    """
    logger.warning(
        "OAuth state rejected",
        error=exc.code,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return _error_response(status.HTTP_400_BAD_REQUEST, exc)


async def unsupported_provider_error_handler(
    request: Request, exc: UnsupportedProviderError
) -> JSONResponse:
    """Handles `UnsupportedProviderError`, returning a `404 Not Found`."""
    return _error_response(status.HTTP_404_NOT_FOUND, exc)


async def provider_error_handler(request: Request, exc: ProviderError) -> JSONResponse:
    """Handles provider exchange and profile failures.

    The provider's own 4xx status is passed through so the client can tell an
    expired code from an outage. Transport failures and provider 5xx answers
    become `502 Bad Gateway`.

    Args:
        request: The incoming `Request` object.
        exc: The `ProviderError` instance.

    Returns:
        A `JSONResponse` with the provider status or 502.
    """
    status_code = exc.status_code
    if status_code is None or not 400 <= status_code < 500:
        status_code = status.HTTP_502_BAD_GATEWAY
    logger.warning(
        "Identity provider call failed",
        error=exc.code,
        provider=exc.provider,
        provider_status=exc.status_code,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return _error_response(status_code, exc)


async def invalid_identity_assertion_error_handler(
    request: Request, exc: InvalidIdentityAssertionError
) -> JSONResponse:
    """Handles `InvalidIdentityAssertionError`, returning a `401 Unauthorized`.

    A forged or stale ID token is a potential attack, so it is logged at
    error level.
    """
    logger.error(
        "Identity assertion rejected",
        error=exc.code,
        reason=exc.message,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return _error_response(status.HTTP_401_UNAUTHORIZED, exc)


async def telegram_user_not_found_error_handler(
    request: Request, exc: TelegramUserNotFoundError
) -> JSONResponse:
    """Handles `TelegramUserNotFoundError`, returning a `404 Not Found`."""
    return _error_response(status.HTTP_404_NOT_FOUND, exc)


async def email_already_linked_error_handler(
    request: Request, exc: EmailAlreadyLinkedError
) -> JSONResponse:
    """Handles `EmailAlreadyLinkedError`, returning a `409 Conflict`."""
    logger.warning(
        "Reconciliation conflict",
        error=exc.code,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return _error_response(status.HTTP_409_CONFLICT, exc)


async def email_not_verified_error_handler(
    request: Request, exc: EmailNotVerifiedError
) -> JSONResponse:
    """Handles `EmailNotVerifiedError`, returning a `403 Forbidden`."""
    return _error_response(status.HTTP_403_FORBIDDEN, exc)


async def account_creation_conflict_error_handler(
    request: Request, exc: AccountCreationConflictError
) -> JSONResponse:
    """Handles `AccountCreationConflictError`, returning a `409 Conflict`.

    Only reached when the re-resolve after a lost race fails as well.
    """
    logger.error(
        "Account creation conflict persisted after retry",
        error=exc.code,
        path=request.url.path,
    )
    return _error_response(status.HTTP_409_CONFLICT, exc)


async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handles slowapi's `RateLimitExceeded`, returning a `429 Too Many Requests`."""
    logger.warning(
        "Rate limit exceeded",
        limit=str(exc.detail),
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"detail": f"Rate limit exceeded: {exc.detail}", "code": "rate_limit_exceeded"},
    )


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    """Handles `DatabaseError`, returning a `500 Internal Server Error`.

    The driver error is logged but never returned to the client.
    """
    logger.critical(
        "A critical database error occurred",
        error_message=str(exc),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "A database error occurred.", "code": exc.code},
    )


async def masterhub_error_handler(request: Request, exc: MasterhubError) -> JSONResponse:
    """Handles the base `MasterhubError`, returning a `500 Internal Server Error`.

    Fallback for application errors without a more specific handler.
    """
    logger.error(
        "An unhandled application error occurred",
        error_code=exc.code,
        error_message=exc.message,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An unexpected error occurred.", "code": exc.code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Registers all custom exception handlers with the FastAPI application.

    Starlette resolves handlers along the exception's MRO, so the base class
    handler only catches what no specific handler claims.

    Args:
        app: The `FastAPI` application instance.
    """
    app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
    app.add_exception_handler(AuthenticationError, authentication_error_handler)
    app.add_exception_handler(InvalidStateError, invalid_state_error_handler)
    app.add_exception_handler(UnsupportedProviderError, unsupported_provider_error_handler)
    app.add_exception_handler(ProviderError, provider_error_handler)
    app.add_exception_handler(
        InvalidIdentityAssertionError, invalid_identity_assertion_error_handler
    )
    app.add_exception_handler(TelegramUserNotFoundError, telegram_user_not_found_error_handler)
    app.add_exception_handler(EmailAlreadyLinkedError, email_already_linked_error_handler)
    app.add_exception_handler(EmailNotVerifiedError, email_not_verified_error_handler)
    app.add_exception_handler(
        AccountCreationConflictError, account_creation_conflict_error_handler
    )
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(MasterhubError, masterhub_error_handler)
