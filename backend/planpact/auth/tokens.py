"""Access token issue and verification (HS256 JWT).

Tokens carry only the identity id (``sub``); the email is always read back
from the store so a changed address never lingers in an old token.
"""
from datetime import datetime, timedelta, timezone

import jwt

from planpact.config import settings
from planpact.errors import AuthError


def create_access_token(user_id: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """Return the identity id carried by ``token`` or raise ``AuthError``."""
    try:
        decoded = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.PyJWTError as e:
        raise AuthError("Invalid or expired token") from e
    return decoded["sub"]
