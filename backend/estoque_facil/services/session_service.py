# Overview: Service-layer operations for session; encapsulates business logic and database work.

"""
Bearer token issuance and verification.

Tokens are HS256 JWTs signed with the application SECRET_KEY. They embed
the account id (`sub`), `username` and `isAdmin`, and expire after
TOKEN_EXPIRATION_MINUTES. Nothing is stored server-side; the decorator
re-loads the account on every request so deletions and blocks take effect
immediately.
"""

from dataclasses import dataclass
from datetime import timedelta, timezone

import jwt
from flask import current_app

from ..extensions import db
from ..models import User
from estoque_facil.time_utils import utcnow


TOKEN_ALGORITHM = "HS256"


@dataclass
class SessionContext:
    """Identity recovered from a valid token, plus the freshly loaded account."""
    user: User
    user_id: str
    username: str


def create_token(user: User) -> str:
    """Issue a signed, time-limited token for an authenticated account."""
    now = utcnow().replace(tzinfo=timezone.utc)
    minutes = current_app.config.get("TOKEN_EXPIRATION_MINUTES", 60)
    payload = {
        "sub": user.id,
        "username": user.username,
        "isAdmin": bool(user.is_admin),
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, current_app.config["SECRET_KEY"], algorithm=TOKEN_ALGORITHM)


def decode_token(token: str) -> dict | None:
    """Return the token claims, or None if the signature is bad or it expired."""
    try:
        return jwt.decode(
            token,
            current_app.config["SECRET_KEY"],
            algorithms=[TOKEN_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.PyJWTError:
        return None


def validate_session(token: str) -> SessionContext | None:
    """
    Verify the token and load its account.

    Returns None if the token is invalid/expired or the account no longer
    exists. Block/approval state is left to the caller.
    """
    claims = decode_token(token)
    if not claims:
        return None

    user = db.session.get(User, claims["sub"])
    if not user:
        return None

    return SessionContext(user=user, user_id=user.id, username=user.username)
