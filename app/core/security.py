# app/core/security.py
"""
Credential issuing and verification.

Access tokens carry {user_id, email, role}; refresh tokens carry the same
claims plus type="refresh" and are signed with a separate secret so one can
never be used in place of the other.
"""
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from app.core.config import get_settings

settings = get_settings()


class TokenError(Exception):
    """Base class for credential verification failures."""


class TokenExpiredError(TokenError):
    pass


class InvalidTokenError(TokenError):
    pass


def _encode(claims: dict[str, Any], secret: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        "iat": now,
        "exp": now + expires_delta,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
    }
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


def _decode(token: str, secret: str, label: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except ExpiredSignatureError as exc:
        raise TokenExpiredError(f"{label} has expired") from exc
    except JWTError as exc:
        raise InvalidTokenError(f"Invalid {label.lower()}") from exc


def create_access_token(user_id: int, email: str, role: str) -> str:
    return _encode(
        {"user_id": user_id, "email": email, "role": role},
        settings.JWT_SECRET,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(user_id: int, email: str, role: str) -> str:
    return _encode(
        {"user_id": user_id, "email": email, "role": role, "type": "refresh"},
        settings.JWT_REFRESH_SECRET,
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def create_token_pair(user_id: int, email: str, role: str) -> dict[str, str]:
    return {
        "accessToken": create_access_token(user_id, email, role),
        "refreshToken": create_refresh_token(user_id, email, role),
    }


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify signature, expiry, issuer and audience of an access token.

    Raises:
        TokenExpiredError: the token was valid but is past `exp`.
        InvalidTokenError: anything else (bad signature, malformed, wrong aud).
    """
    payload = _decode(token, settings.JWT_SECRET, "Token")
    if "user_id" not in payload:
        raise InvalidTokenError("Invalid token")
    return payload


def decode_refresh_token(token: str) -> dict[str, Any]:
    payload = _decode(token, settings.JWT_REFRESH_SECRET, "Refresh token")
    if payload.get("type") != "refresh" or "user_id" not in payload:
        raise InvalidTokenError("Invalid refresh token type")
    return payload


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False
