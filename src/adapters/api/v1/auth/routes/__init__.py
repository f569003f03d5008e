from __future__ import annotations

"""Subpackage aggregating individual auth route modules."""

__all__ = [
    "logout",
    "oauth",
    "telegram",
    "token",
]
