"""
Authentication dependencies for admin routes.

Supports both:
- Bearer token in Authorization header (for API clients)
- HttpOnly session cookie (for the browser back office)
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from catalog.config import get_settings
from catalog.db import get_db
from catalog.models import User
from catalog.repositories import UserRepository

from .jwt import decode_session_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_token_from_request(
    request: Request,
    token_header: str | None = Depends(oauth2_scheme),
) -> str:
    """
    Extract the session JWT from the request.

    Checks the Authorization header first, then the session cookie.
    """
    if token_header:
        return token_header

    cookie = request.cookies.get(get_settings().session_cookie_name)
    if cookie:
        return cookie

    raise _unauthorized("Not authenticated")


def get_current_admin(
    token: str = Depends(get_token_from_request),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the signed-in admin or raise 401."""
    try:
        payload = decode_session_token(token)
    except ValueError:
        raise _unauthorized("Invalid authentication credentials") from None

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid authentication credentials")

    user = UserRepository(db).get_by_id(user_id)
    if user is None or not user.is_active:
        raise _unauthorized("User not found or inactive")
    return user
