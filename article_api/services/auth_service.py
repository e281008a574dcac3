"""
Auth service: account registration and login.

Passwords are hashed with bcrypt in a worker thread so the event loop is
not blocked by the deliberately slow hash.
"""
import logging
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from article_api.exceptions import AuthenticationFailure, ValidationFailure
from article_api.models import User
from article_api.repositories import UserRepository
from article_api.security import (
    create_access_token,
    hash_password,
    token_payload,
    verify_password,
)
from article_api.validation import (
    Rule,
    email,
    max_length,
    min_length,
    required,
    string,
    unique,
    validate,
)

logger = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 6


def register_rules(db: AsyncSession) -> list[Rule]:
    return [
        required("name"),
        string("name"),
        max_length("name", 255),
        required("email"),
        string("email"),
        email("email"),
        max_length("email", 255),
        unique("email", db, User.email, live_only=False),
        required("password"),
        string("password"),
        min_length("password", PASSWORD_MIN_LENGTH),
    ]


LOGIN_RULES: list[Rule] = [
    required("email"),
    string("email"),
    email("email"),
    required("password"),
    string("password"),
]


def _user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


async def register(db: AsyncSession, payload: Mapping[str, Any]) -> dict:
    """Create an account and return the user together with an access token."""
    try:
        values = await validate(payload, register_rules(db))
    except ValidationFailure as exc:
        logger.warning("Validation failed during registration: %s", exc.errors)
        raise

    hashed = await run_in_threadpool(hash_password, values["password"])
    user = await UserRepository(db).create(
        {"name": values["name"], "email": values["email"], "password": hashed}
    )
    logger.info("User registered: id=%s", user.id)

    data = token_payload(create_access_token(user.id))
    data["user"] = _user_to_dict(user)
    return data


async def login(db: AsyncSession, payload: Mapping[str, Any]) -> dict:
    """
    Exchange credentials for an access token.

    Raises :class:`AuthenticationFailure` for an unknown email, a
    soft-deleted account or a wrong password.
    """
    values = await validate(payload, LOGIN_RULES)

    user = await UserRepository(db).find_by_email(values["email"])
    if user is None or not await run_in_threadpool(
        verify_password, values["password"], user.password
    ):
        logger.warning("Failed login attempt for %s", values["email"])
        raise AuthenticationFailure("Invalid credentials")

    logger.info("User logged in: id=%s", user.id)
    return token_payload(create_access_token(user.id))
