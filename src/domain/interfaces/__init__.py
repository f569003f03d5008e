"""Domain Interfaces for dependency inversion.

These interfaces define contracts that infrastructure and application
layers must implement.

Interface Organization:
- Repositories: accounts, identity links and refresh tokens
- OAuth: state store, provider adapters, identity verifiers
- Token Management: access-token blocklist and credential issuing
"""

from .oauth import IIdentityVerifier, IProviderAdapter, IStateStore, ITelegramVerifier
from .repositories import IRefreshTokenRepository, IUserRepository
from .token_management import ICredentialIssuer, ITokenBlocklist

__all__ = [
    "IUserRepository",
    "IRefreshTokenRepository",
    "IStateStore",
    "IProviderAdapter",
    "IIdentityVerifier",
    "ITelegramVerifier",
    "ITokenBlocklist",
    "ICredentialIssuer",
]
