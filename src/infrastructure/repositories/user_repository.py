"""User Repository implementation using SQLAlchemy.

Persists accounts together with their identity link. Uniqueness of the email
and of every provider identifier is left to the database constraints, a lost
race surfaces as `AccountCreationConflictError` so the reconciliation engine
can re-resolve instead of failing the login.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from src.core.exceptions import AccountCreationConflictError, DatabaseError
from src.domain.entities.oauth_link import OAuthLink
from src.domain.entities.user import User
from src.domain.interfaces.repositories import IUserRepository
from src.domain.value_objects.oauth_provider import OAuthProviderType

logger = get_logger(__name__)


class UserRepository(IUserRepository):
    """SQLAlchemy implementation of `IUserRepository`.

    The repository owns the transaction boundary of `save`: it commits on
    success and rolls back on any failure, so a caller never observes a
    half-written account without a link.
    """

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def get_by_id(self, user_id: int) -> Optional[User]:
        statement = select(User).where(User.id == user_id)
        result = await self.db_session.execute(statement)
        return result.scalars().first()

    async def find_by_provider_id(
        self, provider: OAuthProviderType, provider_id: str
    ) -> Optional[User]:
        """Look an account up through its identity link.

        Args:
            provider: Provider whose identifier column is searched.
            provider_id: Provider-scoped subject identifier.

        Returns:
            User entity if found, None otherwise
        """
        column = getattr(OAuthLink, OAuthLink.column_for(provider))
        statement = (
            select(User)
            .join(OAuthLink, OAuthLink.user_id == User.id)
            .where(column == str(provider_id))
        )
        result = await self.db_session.execute(statement)
        user = result.scalars().first()
        logger.debug(
            "User lookup by provider id completed",
            provider=provider.value,
            found=user is not None,
            operation="find_by_provider_id",
        )
        return user

    async def find_by_email(self, email: str) -> Optional[User]:
        if not email or not email.strip():
            return None
        statement = select(User).where(func.lower(User.email) == email.strip().lower())
        result = await self.db_session.execute(statement)
        user = result.scalars().first()
        logger.debug(
            "User lookup by email completed",
            found=user is not None,
            operation="find_by_email",
        )
        return user

    async def get_link(self, user_id: int) -> Optional[OAuthLink]:
        statement = select(OAuthLink).where(OAuthLink.user_id == user_id)
        result = await self.db_session.execute(statement)
        return result.scalars().first()

    async def save(self, user: User, link: Optional[OAuthLink] = None) -> User:
        """Insert or update an account and its link in one transaction.

        Args:
            user: The account to persist.
            link: Optional identity link. Receives the account id when new.

        Returns:
            The refreshed `User`.

        Raises:
            AccountCreationConflictError: A unique constraint was violated.
            DatabaseError: For any other SQLAlchemy failure.
        """
        is_new = user.id is None
        if not is_new:
            user.updated_at = datetime.now(timezone.utc).replace(tzinfo=None)

        try:
            self.db_session.add(user)
            await self.db_session.flush()
            if link is not None:
                if link.user_id is None:
                    link.user_id = user.id
                self.db_session.add(link)
                await self.db_session.flush()
            await self.db_session.commit()
        except IntegrityError as e:
            await self.db_session.rollback()
            logger.warning(
                "Unique constraint violated while saving user",
                is_new=is_new,
                error_type=type(e).__name__,
                operation="save",
            )
            raise AccountCreationConflictError() from e
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            logger.error(
                "Error saving user",
                error=str(e),
                error_type=type(e).__name__,
                operation="save",
            )
            raise DatabaseError("Failed to persist user account") from e

        await self.db_session.refresh(user)
        logger.info(
            "User saved",
            user_id=user.id,
            created=is_new,
            providers=[p.value for p in link.active_providers()] if link is not None else None,
            operation="save",
        )
        return user
