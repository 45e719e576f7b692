# app/schemas/user.py
from datetime import datetime

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field

from app.core.identity import is_valid_guest_id, normalize_guest_id
from app.schemas.cart import CartRead


class LoginRequest(SQLModel):
    """
    Login payload.

    `guest_id` (or the X-Guest-Id header) names a guest cart to merge into
    the user's cart once the credentials check out.
    """

    model_config = ConfigDict(extra="ignore")

    email: EmailStr
    password: str = Field(min_length=1)
    guest_id: str | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("guest_id")
    @classmethod
    def check_guest_id(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        if not is_valid_guest_id(v.strip()):
            raise ValueError("Invalid guest ID format")
        return normalize_guest_id(v)


class RefreshRequest(SQLModel):
    refreshToken: str | None = None


class TokenPair(SQLModel):
    accessToken: str
    refreshToken: str


class UserRead(SQLModel):
    """Response schema returned to clients (never includes the hash)."""

    user_id: int
    name: str
    email: str
    phone_number: str | None = None
    role: str
    image_url: str | None = None
    created_at: datetime


class LoginData(SQLModel):
    user: UserRead
    tokens: TokenPair
    cart: CartRead | None = None


# -------- Addresses --------


class AddressCreate(SQLModel):
    """
    Payload for a new shipping address. Every field except landmark is required.
    """

    model_config = ConfigDict(extra="forbid")

    full_name: str = Field(max_length=100)
    phone: str = Field(max_length=20)
    house: str = Field(max_length=255)
    landmark: str | None = Field(default=None, max_length=255)
    city: str = Field(max_length=100)
    state: str = Field(max_length=100)
    pincode: str = Field(max_length=10)
    is_default: bool = False

    @field_validator("full_name", "phone", "house", "city", "state", "pincode")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("landmark")
    @classmethod
    def normalize_landmark(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class AddressRead(SQLModel):
    address_id: int
    user_id: int
    full_name: str
    phone: str
    house: str
    landmark: str | None = None
    city: str
    state: str
    pincode: str
    is_default: bool
    created_at: datetime
