from __future__ import annotations

"""Centralized, structured exception hierarchy for masterhub.

Every error raised by the identity federation flow carries a machine-readable
`code` for programmatic handling and a human-readable `message` for logging
and user feedback. The API layer maps each class to one HTTP status in
`src.core.handlers`.
"""

from typing import Final, Optional

__all__: Final = [
    "MasterhubError",
    "AuthenticationError",
    "InvalidRefreshTokenError",
    "InvalidStateError",
    "UnsupportedProviderError",
    "ProviderError",
    "ProviderExchangeError",
    "ProviderProfileError",
    "InvalidIdentityAssertionError",
    "TelegramUserNotFoundError",
    "ReconciliationError",
    "EmailAlreadyLinkedError",
    "EmailNotVerifiedError",
    "AccountCreationConflictError",
    "DatabaseError",
]


class MasterhubError(Exception):
    """Base exception class for all custom errors in the application.

    Attributes:
        message (str): A human-readable error message, suitable for logging.
        code (str): A unique, machine-readable error code.
    """

    message: str
    code: str = "generic_error"

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    # A concise, structured representation used by loggers & FastAPI handlers.
    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Auth-related errors
# ---------------------------------------------------------------------------


class AuthenticationError(MasterhubError):
    """Raised for general authentication failures.

    Typically maps to a `401 Unauthorized` HTTP status code.
    """

    def __init__(self, message: str = "Could not validate credentials", code: str = "authentication_error"):
        super().__init__(message, code)


class InvalidRefreshTokenError(AuthenticationError):
    """Raised when a presented refresh token is unknown, expired or already rotated."""

    def __init__(self, message: str = "Refresh token is invalid or expired", code: str = "invalid_refresh_token"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# OAuth flow errors
# ---------------------------------------------------------------------------


class InvalidStateError(MasterhubError):
    """Raised when a callback presents an unknown, expired or reused state.

    The flow cannot continue, the client has to request a fresh
    authorization URL. Maps to `400 Bad Request`.
    """

    def __init__(self, message: str = "Invalid or expired OAuth state", code: str = "invalid_state"):
        super().__init__(message, code)


class UnsupportedProviderError(MasterhubError):
    """Raised when a route names a provider that is unknown or not configured."""

    def __init__(self, message: str, code: str = "unsupported_provider"):
        super().__init__(message, code)


class ProviderError(MasterhubError):
    """Base class for failures while talking to an identity provider.

    Attributes:
        provider (str): The provider the failure came from.
        status_code (Optional[int]): The HTTP status returned by the provider,
            or None for transport failures.
    """

    def __init__(
        self,
        message: str,
        code: str = "provider_error",
        provider: str = "",
        status_code: Optional[int] = None,
    ):
        super().__init__(message, code)
        self.provider = provider
        self.status_code = status_code


class ProviderExchangeError(ProviderError):
    """Raised when the authorization code is rejected or cannot be exchanged."""

    def __init__(self, message: str, provider: str = "", status_code: Optional[int] = None):
        super().__init__(message, "provider_exchange_failed", provider, status_code)


class ProviderProfileError(ProviderError):
    """Raised when the provider profile cannot be fetched."""

    def __init__(self, message: str, provider: str = "", status_code: Optional[int] = None):
        super().__init__(message, "provider_profile_failed", provider, status_code)


class InvalidIdentityAssertionError(MasterhubError):
    """Raised when a Google ID token fails signature, audience, issuer or expiry checks.

    Always fatal and never retried. Maps to `401 Unauthorized`.
    """

    def __init__(self, message: str = "Invalid identity token", code: str = "invalid_identity_assertion"):
        super().__init__(message, code)


class TelegramUserNotFoundError(MasterhubError):
    """Raised when the Telegram bot API does not know the asserted chat id."""

    def __init__(self, message: str = "Telegram user not found", code: str = "telegram_user_not_found"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Reconciliation errors (typically map to 409 Conflict)
# ---------------------------------------------------------------------------


class ReconciliationError(MasterhubError):
    """Base class for failures mapping an external identity to a local account."""


class EmailAlreadyLinkedError(ReconciliationError):
    """Raised when the profile email belongs to an account already linked elsewhere.

    The account cannot be taken over by a different external identity. There
    is no merge flow, resolving this needs the user or an operator.
    """

    def __init__(
        self,
        message: str = "This email is already associated with another login method",
        code: str = "email_already_linked",
    ):
        super().__init__(message, code)


class EmailNotVerifiedError(ReconciliationError):
    """Raised when the provider explicitly reports the email as unverified."""

    def __init__(self, message: str = "Email is not verified by the provider", code: str = "email_not_verified"):
        super().__init__(message, code)


class AccountCreationConflictError(ReconciliationError):
    """Raised when a concurrent first login won the race on a unique constraint.

    Recovered by re-resolving through the provider-id lookup.
    """

    def __init__(self, message: str = "Account was created concurrently", code: str = "account_creation_conflict"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Persistence errors
# ---------------------------------------------------------------------------


class DatabaseError(MasterhubError):
    """Raised for low-level database interaction errors.

    Wraps underlying driver errors. Maps to `500 Internal Server Error`.
    """

    def __init__(self, message: str, code: str = "database_error"):
        super().__init__(message, code)
