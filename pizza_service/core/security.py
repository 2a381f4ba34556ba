"""
Password hashing and session token encoding.

Tokens are HS256 JWTs carrying the user's identity and roles. Each token
gets a unique ``jti`` so it can be revoked individually on logout.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from passlib.context import CryptContext

from pizza_service.core.config import Settings, get_settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    return pwd_context.verify(plain_password, hashed_password)


@dataclass(frozen=True)
class TokenClaims:
    """Decoded contents of a session token."""
    user_id: int
    name: str
    email: str
    roles: list[dict[str, Any]]
    jti: str
    expires_at: datetime


def create_access_token(user: dict[str, Any], settings: Optional[Settings] = None) -> str:
    """
    Create a signed session token for a serialized user.

    Args:
        user: ``{"id", "name", "email", "roles"}`` as returned by the API
        settings: Settings to sign with (defaults to the cached settings)

    Returns:
        str: Encoded JWT
    """
    settings = settings or get_settings()
    issued_at = datetime.now(timezone.utc)
    payload = {
        "id": user["id"],
        "name": user["name"],
        "email": user["email"],
        "roles": user["roles"],
        "jti": uuid.uuid4().hex,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.jwt_ttl_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Optional[Settings] = None) -> Optional[TokenClaims]:
    """
    Decode and verify a session token.

    Returns:
        TokenClaims, or None when the signature, expiry or payload is invalid
    """
    settings = settings or get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "jti"]},
        )
        return TokenClaims(
            user_id=int(payload["id"]),
            name=payload["name"],
            email=payload["email"],
            roles=list(payload.get("roles", [])),
            jti=payload["jti"],
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
    except (jwt.PyJWTError, KeyError, TypeError, ValueError):
        return None
