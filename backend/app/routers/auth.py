"""
Authentication router for the admin back office.

Email/password login issues a signed session token, returned in the body and
set as an HttpOnly cookie.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from catalog.config import get_settings
from catalog.exceptions import AuthenticationError
from catalog.logging import get_logger
from catalog.models import User
from catalog.models.base import utcnow
from catalog.repositories import UserRepository
from catalog.security import verify_dummy_password, verify_password

from ..auth.dependencies import get_current_admin
from ..auth.jwt import create_session_token
from ..dependencies import get_db
from ..schemas import LoginRequest, LoginResponse, UserResponse

logger = get_logger("auth")

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """Authenticate an admin and start a session."""
    settings = get_settings()
    user = UserRepository(db).get_by_email(payload.email)

    if user is None:
        verified = verify_dummy_password(payload.password)
    else:
        verified = verify_password(payload.password, user.password_hash)

    if not verified:
        logger.warning("login_failed", email=payload.email, reason="invalid_credentials")
        raise AuthenticationError("Invalid email or password", code="INVALID_CREDENTIALS")
    if not user.is_active:
        logger.warning("login_failed", email=payload.email, reason="inactive")
        raise AuthenticationError("Account is disabled", code="ACCOUNT_DISABLED")

    user.last_login = utcnow()
    db.commit()

    token = create_session_token(user.id, user.email)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        max_age=settings.session_expire_minutes * 60,
        path="/",
    )

    logger.info("login_succeeded", user_id=user.id)
    return LoginResponse(access_token=token, user=UserResponse.model_validate(user))


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(get_settings().session_cookie_name, path="/")
    return {"message": "Logged out"}


@router.get("/me", response_model=UserResponse)
def me(admin: User = Depends(get_current_admin)):
    return admin
