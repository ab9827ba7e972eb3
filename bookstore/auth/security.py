"""
Password hashing and bearer tokens.

Tokens are HS256 JWTs whose ``id`` claim is the user's identifier. The
``current_identity`` dependency is what guards the mutating routes; the
identity it returns is an opaque string for the rest of the application.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, Header, HTTPException

from ..config import Settings, get_settings


logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # malformed hash in the database
        return False


def create_access_token(user_id: str, settings: Settings) -> str:
    expires = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expires_minutes)
    payload = {"id": user_id, "exp": expires}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> str:
    """Return the user id carried by ``token``.

    Raises ``jwt.InvalidTokenError`` (or a subclass such as
    ``ExpiredSignatureError``) when the token cannot be trusted.
    """
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    user_id = payload.get("id")
    if not user_id:
        raise jwt.InvalidTokenError("token has no id claim")
    return str(user_id)


def current_identity(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header missing")

    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Invalid Authorization format")

    try:
        return decode_access_token(token.strip(), settings)
    except jwt.InvalidTokenError as exc:
        logger.warning("JWT verify error: %s", exc)
        raise HTTPException(status_code=401, detail="Invalid or expired token")
