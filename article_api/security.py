"""
Credential primitives: bcrypt password hashing and JWT access tokens.

Tokens are HS256-signed with ``settings.SECRET_KEY`` and carry the user
id as a string ``sub`` claim plus ``exp`` / ``iat`` / ``jti`` and a
``type`` marker so only access tokens are accepted by the auth gate.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from article_api.config import settings
from article_api.exceptions import AuthenticationFailure

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Return a signed access token whose subject is *user_id*."""
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    claims = {
        "sub": str(user_id),
        "exp": now + expires_delta,
        "iat": now,
        "jti": str(uuid.uuid4()),
        "type": "access",
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> int:
    """
    Validate *token* and return the user id it was issued for.

    Raises :class:`AuthenticationFailure` for expired, tampered, malformed
    or non-access tokens.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        logger.info("Rejected expired token")
        raise AuthenticationFailure()
    except JWTError as exc:
        logger.warning("Rejected invalid token: %s", exc)
        raise AuthenticationFailure()

    if payload.get("type") != "access":
        logger.warning("Rejected token of type %r", payload.get("type"))
        raise AuthenticationFailure()

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthenticationFailure()


def token_payload(token: str) -> dict:
    """Shape of the token block returned by register / login."""
    return {
        "access_token": token,
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }
