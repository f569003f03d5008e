from __future__ import annotations

"""Response Pydantic model for user data."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

from src.domain.entities.user import Gender, Role, User


class UserOut(BaseModel):
    """Serialised representation of :class:`~src.domain.entities.user.User`."""

    id: int
    email: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    gender: Optional[Gender] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    role: Role
    is_active: bool = True
    is_approved: bool = False
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, user: User) -> "UserOut":
        return cls.model_validate(user, from_attributes=True)

    model_config = {
        "from_attributes": True
    }
