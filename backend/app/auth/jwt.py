"""
Signed session tokens for admin users.

Tokens are HS256 JWTs carrying the user id in ``sub`` and a ``typ`` claim so
that no other token signed with the same key is accepted as a session.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from catalog.config import get_settings

SESSION_TOKEN_TYPE = "admin_session"


def create_session_token(user_id: str, email: str, expires_minutes: int | None = None) -> str:
    settings = get_settings()
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": user_id,
        "email": email,
        "typ": SESSION_TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=expires_minutes or settings.session_expire_minutes),
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str) -> dict[str, Any]:
    """
    Verify signature, expiry and token type.

    Raises:
        ValueError: If any check fails.
    """
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise ValueError("Invalid token") from exc
    if claims.get("typ") != SESSION_TOKEN_TYPE:
        raise ValueError("Not a session token")
    return claims
