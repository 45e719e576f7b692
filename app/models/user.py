# app/models/user.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Marketplace account.

    Role:
      - "customer" | "shopkeeper"
      - guests are represented by the absence of a row (they carry an
        X-Guest-Id header instead of a token).

    Accounts are never hard-deleted; `is_deleted` disables login and
    invalidates outstanding tokens.
    """

    __tablename__ = "users"

    user_id: int | None = Field(default=None, primary_key=True)

    name: str = Field(max_length=100)

    email: str = Field(
        unique=True,
        index=True,
        max_length=255,
    )

    phone_number: str | None = Field(default=None, max_length=20)

    password_hash: str = Field(description="bcrypt hash, never returned to clients")

    role: str = Field(
        default="customer",
        index=True,
        description="Application role: customer | shopkeeper",
    )

    image_url: str | None = None

    is_deleted: bool = Field(default=False)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class UserAddress(SQLModel, table=True):
    """
    Saved shipping address.

    At most one live address per user has `is_default` set; the service
    keeps that true by clearing every default before setting a new one.
    """

    __tablename__ = "user_addresses"

    address_id: int | None = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="users.user_id", index=True)

    full_name: str = Field(max_length=100)
    phone: str = Field(max_length=20)
    house: str = Field(max_length=255)
    landmark: str | None = Field(default=None, max_length=255)
    city: str = Field(max_length=100)
    state: str = Field(max_length=100)
    pincode: str = Field(max_length=10)

    is_default: bool = Field(default=False)
    is_deleted: bool = Field(default=False)
    deleted_at: datetime | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
