"""Identity Reconciliation Engine.

Maps an external identity onto exactly one local account. Lookups run in a
fixed order: provider identifier, then email, then account creation. The
uniqueness of provider identifiers and emails is guaranteed by database
constraints; a lost creation race is recovered by resolving again.
"""

from typing import Optional

from structlog import get_logger

from src.core.exceptions import (
    AccountCreationConflictError,
    AuthenticationError,
    EmailAlreadyLinkedError,
    EmailNotVerifiedError,
)
from src.domain.entities.oauth_link import OAuthLink
from src.domain.entities.user import Gender, Role, User
from src.domain.interfaces.repositories import IUserRepository
from src.domain.value_objects.external_profile import ExternalProfile
from src.domain.value_objects.oauth_provider import OAuthProviderType

logger = get_logger(__name__)


def synthetic_email(profile: ExternalProfile, domain: str) -> str:
    """Non-routable placeholder address for providers that assert no email."""
    return f"{profile.provider.value}.{profile.provider_id}@{domain}"


def apply_profile(user: User, profile: ExternalProfile) -> bool:
    """Copy present profile values onto the account.

    Absent values never erase stored data. Email is left alone, and so is the
    username except for Telegram, whose handle is the account login.

    Returns:
        bool: Whether any field changed.
    """
    updates = {
        "first_name": profile.first_name,
        "last_name": profile.last_name,
        "avatar_url": profile.avatar_url,
        "bio": profile.bio,
        "date_of_birth": profile.birthday,
        "gender": Gender.from_provider(profile.gender),
        "phone": profile.phone,
    }
    changed = False
    for field_name, value in updates.items():
        if value is None or getattr(user, field_name) == value:
            continue
        setattr(user, field_name, value)
        changed = True
    if (
        profile.provider is OAuthProviderType.TELEGRAM
        and profile.username
        and user.username != profile.username
    ):
        user.username = profile.username
        changed = True
    return changed


class IdentityReconciler:
    """Resolves an `ExternalProfile` to a local `User`.

    Attributes:
        user_repository: Account and identity-link persistence.
        email_domain: Domain of synthetic placeholder addresses.
    """

    def __init__(self, user_repository: IUserRepository, email_domain: str):
        self.user_repository = user_repository
        self.email_domain = email_domain

    async def resolve(self, profile: ExternalProfile, requested_role: Optional[str] = None) -> User:
        """Return the account for `profile`, linking or creating it when needed.

        Raises:
            EmailNotVerifiedError: The provider reported the email unverified.
            EmailAlreadyLinkedError: The email belongs to an account already
                linked to another identity.
            AccountCreationConflictError: A creation race was lost twice.
            AuthenticationError: The matched account is inactive.
        """
        try:
            return await self._resolve(profile, requested_role)
        except AccountCreationConflictError:
            # The concurrent winner now owns the identity, the retry takes the
            # provider-id path.
            await logger.ainfo("Account creation race lost, resolving again", **profile.mask_for_logging())
            return await self._resolve(profile, requested_role)

    async def _resolve(self, profile: ExternalProfile, requested_role: Optional[str]) -> User:
        if not self._email_vouched(profile):
            raise EmailNotVerifiedError()

        user = await self.user_repository.find_by_provider_id(profile.provider, profile.provider_id)
        if user is not None:
            self._ensure_active(user)
            if apply_profile(user, profile):
                user = await self.user_repository.save(user)
            await logger.ainfo("Returning user matched by provider id", user_id=user.id, provider=profile.provider.value)
            return user

        if profile.email:
            user = await self.user_repository.find_by_email(profile.email)
            if user is not None:
                return await self._link_existing(user, profile)

        return await self._create(profile, requested_role)

    async def _link_existing(self, user: User, profile: ExternalProfile) -> User:
        link = await self.user_repository.get_link(user.id)
        if link is not None and link.has_any_provider():
            await logger.awarning(
                "Email already linked to another identity",
                user_id=user.id,
                linked_providers=[p.value for p in link.active_providers()],
                **profile.mask_for_logging(),
            )
            raise EmailAlreadyLinkedError()

        self._ensure_active(user)
        if link is None:
            link = OAuthLink(user_id=user.id)
        link.set_identifier(profile.provider, profile.provider_id)
        apply_profile(user, profile)
        user = await self.user_repository.save(user, link)
        await logger.ainfo("Linked provider to existing account", user_id=user.id, provider=profile.provider.value)
        return user

    async def _create(self, profile: ExternalProfile, requested_role: Optional[str]) -> User:
        user = User(
            email=profile.email or synthetic_email(profile, self.email_domain),
            username=profile.username,
            password="",
            role=Role.from_requested(requested_role),
            is_active=True,
            is_approved=True,
        )
        apply_profile(user, profile)
        if user.gender is None and profile.provider is OAuthProviderType.TELEGRAM:
            user.gender = Gender.NEUTRAL

        link = OAuthLink()
        link.set_identifier(profile.provider, profile.provider_id)

        user = await self.user_repository.save(user, link)
        await logger.ainfo(
            "Created account from external identity",
            user_id=user.id,
            role=user.role.value,
            synthetic_email=profile.email is None,
            **profile.mask_for_logging(),
        )
        return user

    @staticmethod
    def _email_vouched(profile: ExternalProfile) -> bool:
        """Google must assert verification explicitly, other providers only reject when they say so."""
        if profile.provider is OAuthProviderType.GOOGLE:
            return profile.email_verified is True
        return profile.email_verified is not False

    @staticmethod
    def _ensure_active(user: User) -> None:
        if not user.is_active:
            logger.warning("Inactive account attempted external login", user_id=user.id)
            raise AuthenticationError("User account is inactive")
