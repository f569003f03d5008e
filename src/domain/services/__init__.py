"""Domain Services for the identity federation bounded context.

- OAuth: the login orchestrator and the identity reconciliation engine
- Auth: issuing, rotating and revoking the application's own credentials
"""

from .auth.credentials import CredentialIssuer, TokenConfig
from .oauth.orchestrator import LoginResult, OAuthOrchestrator
from .oauth.reconciliation import IdentityReconciler

__all__ = [
    "CredentialIssuer",
    "IdentityReconciler",
    "LoginResult",
    "OAuthOrchestrator",
    "TokenConfig",
]
