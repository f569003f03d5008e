from __future__ import annotations

"""Authentication router package – bundles the OAuth, token and logout endpoints."""

from fastapi import APIRouter

from .routes import logout as logout_route
from .routes import oauth as oauth_route
from .routes import telegram as telegram_route
from .routes import token as token_route

router = APIRouter(prefix="/auth", tags=["auth"])

# Static paths first, "/telegram/callback" would otherwise match "/{provider}/callback".
router.include_router(telegram_route.router)
router.include_router(token_route.router)
router.include_router(logout_route.router)
router.include_router(oauth_route.router)

__all__ = ["router"]
