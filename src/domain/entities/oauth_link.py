from datetime import datetime  # For timestamp fields
from typing import Optional  # For optional fields

from sqlalchemy import DateTime, text  # For SQL expressions and explicit DateTime type
from sqlmodel import Column, Field, SQLModel, String  # For ORM and table definition

from src.domain.value_objects.oauth_provider import OAuthProviderType

# Provider -> column holding that provider's subject identifier.
_PROVIDER_COLUMNS = {
    OAuthProviderType.GOOGLE: "google_id",
    OAuthProviderType.FACEBOOK: "facebook_id",
    OAuthProviderType.INSTAGRAM: "instagram_id",
    OAuthProviderType.TELEGRAM: "telegram_id",
}


class OAuthLink(SQLModel, table=True):
    """Records which external identities are bound to a local account.

    Each account owns zero or one link row, created the first time the
    account authenticates through any provider. The link holds at most one
    identifier per provider. Every identifier column carries a unique
    constraint, so two accounts can never claim the same external identity
    even when two first logins race.

    Attributes:
        id: The unique identifier for the link record.
        user_id: The owning account. Unique, one link per account.
        google_id / facebook_id / instagram_id / telegram_id: Provider-scoped
            subject identifiers, null when that provider is not linked.
        created_at: The timestamp when the link was first created.
    """

    __tablename__ = "oauth_links"  # Explicit table name for clarity

    id: Optional[int] = Field(
        default=None,  # Auto-incremented by database
        primary_key=True,  # Primary key constraint
        description="The unique identifier for the link record.",
    )
    user_id: Optional[int] = Field(
        default=None,
        foreign_key="users.id",  # References users table
        unique=True,  # One link per account
        nullable=False,
        description="Foreign key linking this record to its User.",
    )
    google_id: Optional[str] = Field(
        default=None, sa_column=Column(String(255), unique=True, nullable=True)
    )
    facebook_id: Optional[str] = Field(
        default=None, sa_column=Column(String(255), unique=True, nullable=True)
    )
    instagram_id: Optional[str] = Field(
        default=None, sa_column=Column(String(255), unique=True, nullable=True)
    )
    telegram_id: Optional[str] = Field(
        default=None, sa_column=Column(String(255), unique=True, nullable=True)
    )
    created_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(
            DateTime,  # Explicit DateTime type for Alembic
            server_default=text("CURRENT_TIMESTAMP"),  # Database timestamp
            nullable=False,
        ),
        description="The timestamp when the link was created.",
    )

    @staticmethod
    def column_for(provider: OAuthProviderType) -> str:
        """Name of the identifier column for a provider."""
        return _PROVIDER_COLUMNS[provider]

    def get_identifier(self, provider: OAuthProviderType) -> Optional[str]:
        return getattr(self, self.column_for(provider))

    def set_identifier(self, provider: OAuthProviderType, provider_id: str) -> None:
        """Bind a provider identifier to this link.

        Raises:
            ValueError: If a different identifier is already bound for the provider.
        """
        current = self.get_identifier(provider)
        if current is not None and current != provider_id:
            raise ValueError(f"Link already holds a different {provider.value} identifier")
        setattr(self, self.column_for(provider), provider_id)

    def active_providers(self) -> list[OAuthProviderType]:
        return [provider for provider in _PROVIDER_COLUMNS if self.get_identifier(provider)]

    def has_any_provider(self) -> bool:
        return bool(self.active_providers())
