from __future__ import annotations

"""Authentication API schemas package.

Request payloads, response envelopes and the serialised user live in
separate modules; everything is re-exported here for the routes.
"""

# flake8: noqa: F401 – re-export

from .misc import AuthorizationUrlResponse, MessageResponse
from .requests import CallbackRequest, TelegramCallbackRequest
from .responses.auth import AuthResponse
from .responses.user import UserOut

__all__ = [
    "AuthorizationUrlResponse",
    "AuthResponse",
    "CallbackRequest",
    "MessageResponse",
    "TelegramCallbackRequest",
    "UserOut",
]
