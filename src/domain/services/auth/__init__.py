from .credentials import CredentialIssuer, TokenConfig, attach_refresh_cookie, clear_refresh_cookie

__all__ = [
    "CredentialIssuer",
    "TokenConfig",
    "attach_refresh_cookie",
    "clear_refresh_cookie",
]
