from __future__ import annotations

"""Factory for generating fake users and external profiles for testing."""

from datetime import date
from typing import Optional

from faker import Faker

from src.domain.entities.oauth_link import OAuthLink
from src.domain.entities.user import Role, User
from src.domain.value_objects.external_profile import ExternalProfile
from src.domain.value_objects.oauth_provider import OAuthProviderType

fake = Faker()


def create_fake_user(
    id: Optional[int] = None,
    email: Optional[str] = None,
    username: Optional[str] = None,
    role: Role = Role.USER,
    is_active: bool = True,
    is_approved: bool = True,
    **fields,
) -> User:
    """Create a User entity for testing.

    Args:
        id (Optional[int]): User ID. Leave None for users that will be persisted.
        email (Optional[str]): Email, defaults to a fake email.
        username (Optional[str]): Username, defaults to a fake username.
        role (Role): Marketplace role, defaults to USER.
        is_active (bool): Whether the user is active.
        is_approved (bool): Whether the user is approved.
        **fields: Any other User attribute.

    Returns:
        User: A fake User entity.
    """
    return User(
        id=id,
        email=email if email is not None else fake.unique.email(),
        username=username if username is not None else fake.user_name(),
        first_name=fields.pop("first_name", fake.first_name()),
        last_name=fields.pop("last_name", fake.last_name()),
        password=fields.pop("password", ""),
        role=role,
        is_active=is_active,
        is_approved=is_approved,
        **fields,
    )


def create_fake_profile(
    provider: OAuthProviderType = OAuthProviderType.GOOGLE,
    provider_id: Optional[str] = None,
    email: Optional[str] = "__fake__",
    email_verified: Optional[bool] = True,
    **fields,
) -> ExternalProfile:
    """Create a normalized external profile.

    Pass ``email=None`` for providers that assert no email.
    """
    return ExternalProfile(
        provider=provider,
        provider_id=provider_id if provider_id is not None else str(fake.random_number(digits=18)),
        email=fake.unique.email() if email == "__fake__" else email,
        email_verified=email_verified,
        first_name=fields.pop("first_name", fake.first_name()),
        last_name=fields.pop("last_name", fake.last_name()),
        **fields,
    )


def create_fake_link(provider: OAuthProviderType, provider_id: str, user_id: Optional[int] = None) -> OAuthLink:
    link = OAuthLink(user_id=user_id)
    link.set_identifier(provider, provider_id)
    return link


def fake_birthday() -> date:
    return fake.date_of_birth(minimum_age=18, maximum_age=80)
