"""Export the identity federation entities for use across the application.

This module provides a clean interface for importing the User, OAuthLink and
RefreshToken models.
"""

from .oauth_link import OAuthLink
from .refresh_token import RefreshToken
from .user import Gender, Role, User

__all__ = ["User", "Role", "Gender", "OAuthLink", "RefreshToken"]
