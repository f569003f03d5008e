"""Domain Value Objects for the identity federation domain.

Value objects are immutable objects that describe domain concepts by their attributes
rather than their identity.
"""

from .credentials import CredentialPair
from .external_profile import ExternalProfile
from .oauth_provider import OAuthProviderType
from .oauth_state import OAuthState

__all__ = [
    "CredentialPair",
    "ExternalProfile",
    "OAuthProviderType",
    "OAuthState",
]
