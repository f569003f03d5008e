"""Refresh Token Repository implementation using SQLAlchemy.

Raw refresh tokens never touch the database. Rows are keyed by the SHA-256
hash of the opaque value.
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from src.core.exceptions import DatabaseError
from src.domain.entities.refresh_token import RefreshToken
from src.domain.entities.user import User
from src.domain.interfaces.repositories import IRefreshTokenRepository

logger = get_logger(__name__)

REFRESH_TOKEN_BYTES = 48


def hash_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode()).hexdigest()


def _utcnow() -> datetime:
    # Columns are timezone-naive UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)


class RefreshTokenRepository(IRefreshTokenRepository):
    """SQLAlchemy implementation of `IRefreshTokenRepository`."""

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def create(self, user: User, ttl_seconds: int) -> str:
        """Mint, hash and store a refresh token.

        Args:
            user: Account the token is issued to. Must be persisted.
            ttl_seconds: Lifetime of the token.

        Returns:
            str: The raw opaque token, to be delivered via cookie only.
        """
        raw_token = secrets.token_urlsafe(REFRESH_TOKEN_BYTES)
        record = RefreshToken(
            user_id=user.id,
            token_hash=hash_token(raw_token),
            expires_at=_utcnow() + timedelta(seconds=ttl_seconds),
        )
        self.db_session.add(record)
        await self._commit("create")
        logger.debug("Refresh token stored", user_id=user.id, ttl=ttl_seconds)
        return raw_token

    async def get_valid(self, raw_token: str, now: Optional[datetime] = None) -> Optional[RefreshToken]:
        if not raw_token:
            return None
        statement = select(RefreshToken).where(RefreshToken.token_hash == hash_token(raw_token))
        result = await self.db_session.execute(statement)
        record = result.scalars().first()
        if record is None:
            return None
        if record.expires_at <= (now or _utcnow()):
            logger.info("Expired refresh token presented", user_id=record.user_id)
            return None
        return record

    async def delete(self, raw_token: str) -> bool:
        statement = delete(RefreshToken).where(RefreshToken.token_hash == hash_token(raw_token))
        result = await self.db_session.execute(statement)
        await self._commit("delete")
        return bool(result.rowcount)

    async def delete_all_for(self, user: User) -> int:
        statement = delete(RefreshToken).where(RefreshToken.user_id == user.id)
        result = await self.db_session.execute(statement)
        await self._commit("delete_all_for")
        removed = result.rowcount or 0
        logger.info("Refresh tokens revoked", user_id=user.id, count=removed)
        return removed

    async def _commit(self, operation: str) -> None:
        try:
            await self.db_session.commit()
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            logger.error("Refresh token store failure", operation=operation, error=str(e))
            raise DatabaseError("Failed to update refresh tokens") from e
