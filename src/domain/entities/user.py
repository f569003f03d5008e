from datetime import date, datetime  # For timestamp fields
from enum import Enum  # For type-safe role enumeration
from typing import Optional  # For optional fields

from sqlalchemy import Date, DateTime, Enum as SAEnum, text  # Portable column types
from sqlmodel import Column, Field, Index, SQLModel, String  # For ORM and table definition


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class Role(str, Enum):
    """Represents the role of a user within the marketplace.

    Attributes:
        MASTER: A service provider offering work through the marketplace.
        CLIENT: A customer ordering work from masters.
        USER: Default unprivileged role for accounts that did not pick a side.
        ADMIN: Confers administrative privileges. Never assignable via login.
    """

    MASTER = "master"
    CLIENT = "client"
    USER = "user"
    ADMIN = "admin"

    @classmethod
    def from_requested(cls, value: Optional[str]) -> "Role":
        """Map a role requested by the login form to a role.

        Only `master` and `client` may be requested, anything else (including
        nothing) yields the default unprivileged role.
        """
        if value in (cls.MASTER.value, cls.CLIENT.value):
            return cls(value)
        return cls.USER


class Gender(str, Enum):
    """Gender as stored on the account, normalized from provider vocabularies."""

    MALE = "male"
    FEMALE = "female"
    NEUTRAL = "neutral"

    @classmethod
    def from_provider(cls, value: Optional[str]) -> Optional["Gender"]:
        """Normalize a provider gender string. Absent stays absent."""
        if not value:
            return None
        lowered = value.strip().lower()
        if lowered == cls.MALE.value:
            return cls.MALE
        if lowered == cls.FEMALE.value:
            return cls.FEMALE
        return cls.NEUTRAL


class User(SQLModel, table=True):
    """Represents a local marketplace account and acts as an Aggregate Root.

    Only the attributes the identity federation flow reads or writes are
    modelled here. Accounts created through an external provider carry an
    empty password, they can only log in through a linked provider until a
    password is set elsewhere.

    Attributes:
        id: The unique identifier for the user (primary key).
        email: A unique email address. Synthetic for providers that assert none.
        username: Display login, not used for authentication here.
        first_name / last_name / avatar_url / bio / gender / phone / date_of_birth:
            Profile fields refreshed from the provider on every login.
        password: Hashed password or the empty-string sentinel for OAuth-only
            accounts.
        role: The user's marketplace role.
        is_active: Inactive users cannot log in.
        is_approved: Approval flag. External identity assertion substitutes
            for email confirmation, so OAuth accounts start approved.
        created_at: The timestamp of when the user account was created.
        updated_at: The timestamp of the last update to the user's record.
    """

    __tablename__ = "users"  # Explicit table name for clarity

    id: Optional[int] = Field(
        default=None,  # Auto-incremented by database
        primary_key=True,  # Primary key constraint
        description="The unique identifier for the user.",
    )
    email: str = Field(
        sa_column=Column(String(255), unique=True, index=True, nullable=False),
        description="Unique email address.",
    )
    username: Optional[str] = Field(
        default=None,
        sa_column=Column(String(100), nullable=True),
        description="Display login taken from the provider when available.",
    )
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    avatar_url: Optional[str] = Field(default=None, max_length=1024)
    bio: Optional[str] = Field(default=None, max_length=2048)
    gender: Optional[Gender] = Field(
        default=None,
        sa_column=Column(
            SAEnum(Gender, name="gender", native_enum=False, values_callable=_enum_values),
            nullable=True,
        ),
    )
    phone: Optional[str] = Field(default=None, max_length=32)
    date_of_birth: Optional[date] = Field(default=None, sa_column=Column(Date, nullable=True))
    password: str = Field(
        default="",
        max_length=255,
        description="Hashed password, empty for accounts created through a provider.",
    )
    role: Role = Field(
        default=Role.USER,
        sa_column=Column(
            SAEnum(Role, name="role", native_enum=False, values_callable=_enum_values),
            nullable=False,
        ),
        description="The user's marketplace role.",
    )
    is_active: bool = Field(default=True)
    is_approved: bool = Field(default=False)
    created_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(
            DateTime,  # Explicit DateTime type for Alembic
            server_default=text("CURRENT_TIMESTAMP"),  # Database timestamp
            nullable=False,
        ),
        description="The timestamp of when the user account was created.",
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
        description="The timestamp of the last update to the user's record.",
    )

    __table_args__ = (
        Index("ix_users_email_lower", text("lower(email)")),  # Case-insensitive lookups
        {"extend_existing": True},
    )