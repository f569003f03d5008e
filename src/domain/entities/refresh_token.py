from datetime import datetime  # For timestamp fields
from typing import Optional  # For optional fields

from sqlalchemy import DateTime, text  # For SQL expressions and explicit DateTime type
from sqlmodel import Column, Field, SQLModel, String  # For ORM and table definition


class RefreshToken(SQLModel, table=True):
    """Represents a server-side refresh token record.

    The raw opaque token only ever lives in the client's cookie. The table
    stores its SHA-256 hash, so a database leak does not leak usable
    credentials. Logout removes every row of the account at once.

    Attributes:
        id: The unique identifier for the record.
        user_id: The account the token was issued to.
        token_hash: Hex SHA-256 of the raw token value.
        expires_at: The timestamp after which the token is no longer accepted.
        created_at: The timestamp when the token was issued.
    """

    __tablename__ = "refresh_tokens"  # Explicit table name for clarity

    id: Optional[int] = Field(
        default=None,  # Auto-incremented by database
        primary_key=True,  # Primary key constraint
        description="The unique identifier for the refresh token record.",
    )
    user_id: int = Field(
        foreign_key="users.id",  # References users table
        index=True,  # Bulk deletion on logout
        nullable=False,
        description="Foreign key linking the token to the User.",
    )
    token_hash: str = Field(
        sa_column=Column(String(64), unique=True, index=True, nullable=False),
        description="SHA-256 hash of the opaque refresh token.",
    )
    expires_at: datetime = Field(
        sa_column=Column(DateTime, nullable=False),  # Explicit DateTime type for Alembic
        description="The timestamp when the refresh token expires.",
    )
    created_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(
            DateTime,  # Explicit DateTime type for Alembic
            server_default=text("CURRENT_TIMESTAMP"),  # Database timestamp
            nullable=False,
        ),
        description="The timestamp when the refresh token was issued.",
    )
