# app/core/identity.py
"""
Caller identity for cart endpoints: an authenticated user or an anonymous
guest keyed by a client-held UUID.
"""
import re
import uuid
from dataclasses import dataclass

_GUEST_ID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class AuthenticatedCaller:
    user_id: int
    email: str
    role: str


@dataclass(frozen=True)
class GuestCaller:
    guest_id: str


CallerIdentity = AuthenticatedCaller | GuestCaller


def generate_guest_id() -> str:
    return str(uuid.uuid4())


def is_valid_guest_id(value: str) -> bool:
    return bool(_GUEST_ID_RE.match(value))


def normalize_guest_id(value: str) -> str:
    """Canonical lowercase form, so `ABC...` and `abc...` key the same cart."""
    return value.strip().lower()
