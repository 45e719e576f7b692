# app/core/auth.py
from typing import Callable

from fastapi import Depends, Request, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from app.core.config import get_settings
from app.core.errors import ForbiddenError, UnauthorizedError, ValidationError
from app.core.identity import (
    AuthenticatedCaller,
    CallerIdentity,
    GuestCaller,
    generate_guest_id,
    is_valid_guest_id,
    normalize_guest_id,
)
from app.core.security import TokenError, decode_access_token
from app.database import get_session
from app.models.user import User
from app.dependencies import get_user_repository
from app.repositories.user_repo import UserRepository

settings = get_settings()

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so we can support guest mode (unauthenticated carts).
bearer_scheme = HTTPBearer(auto_error=False)


def _load_active_user(
    session: Session, users: UserRepository, payload: dict
) -> User | None:
    """Return the token's user if it still exists and is not soft-deleted."""
    return users.get_by_id(session, payload["user_id"])


def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
    users: UserRepository = Depends(get_user_repository),
) -> User | None:
    """
    Resolve the current user if a usable bearer token was sent.

    Any failure (missing header, invalid/expired token, deleted account)
    yields None so the caller can fall back to guest mode.
    """
    if credentials is None:
        return None
    try:
        payload = decode_access_token(credentials.credentials)
    except TokenError:
        return None
    return _load_active_user(session, users, payload)


def require_auth(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
    users: UserRepository = Depends(get_user_repository),
) -> User:
    """
    Enforce authentication.

    Raises:
        UnauthorizedError(401): missing header, expired or invalid token,
        or the account no longer exists.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Authentication required")

    try:
        payload = decode_access_token(credentials.credentials)
    except TokenError as exc:
        raise UnauthorizedError(str(exc)) from exc

    user = _load_active_user(session, users, payload)
    if user is None:
        raise UnauthorizedError("User not found or account has been deleted")
    return user


def require_role(*roles: str) -> Callable[..., User]:
    """
    Build a dependency enforcing one of `roles`.

        @router.get("/x", dependencies=[Depends(require_role("shopkeeper"))])
    """

    def dependency(user: User = Depends(require_auth)) -> User:
        if user.role not in roles:
            raise ForbiddenError(
                f"Access denied. Required roles: {', '.join(roles)}"
            )
        return user

    return dependency


def _read_guest_header(request: Request) -> str | None:
    raw = request.headers.get(settings.GUEST_ID_HEADER)
    if raw is None:
        return None
    raw = raw.strip()
    if not raw:
        return None
    if not is_valid_guest_id(raw):
        raise ValidationError("Invalid guest ID format")
    return normalize_guest_id(raw)


def as_caller(user: User) -> AuthenticatedCaller:
    return AuthenticatedCaller(user_id=user.user_id, email=user.email, role=user.role)


def resolve_cart_caller(
    request: Request,
    response: Response,
    user: User | None = Depends(get_optional_user),
) -> CallerIdentity:
    """
    Identity for cart endpoints.

    Authenticated users win. Otherwise a guest id is taken from the
    X-Guest-Id header (400 if malformed) or freshly generated, and always
    echoed back in the response header so the client can persist it.
    """
    if user is not None:
        return as_caller(user)

    guest_id = _read_guest_header(request) or generate_guest_id()
    response.headers[settings.GUEST_ID_HEADER] = guest_id
    return GuestCaller(guest_id=guest_id)


def resolve_optional_caller(
    request: Request,
    response: Response,
    user: User | None = Depends(get_optional_user),
) -> CallerIdentity | None:
    """
    Like `resolve_cart_caller`, but never invents a guest id: when the
    client sent none and is not authenticated, the identity is None.
    """
    if user is not None:
        return as_caller(user)

    guest_id = _read_guest_header(request)
    if guest_id is None:
        return None
    response.headers[settings.GUEST_ID_HEADER] = guest_id
    return GuestCaller(guest_id=guest_id)


def require_caller(user: User = Depends(require_auth)) -> AuthenticatedCaller:
    return as_caller(user)
