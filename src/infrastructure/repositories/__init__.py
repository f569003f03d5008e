"""Repository implementations for the infrastructure layer."""

from .refresh_token_repository import RefreshTokenRepository
from .user_repository import UserRepository

__all__ = ["UserRepository", "RefreshTokenRepository"]
