import logging

import jwt
from fastapi import APIRouter, Cookie, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from mentorship_api.config import settings
from mentorship_api.dependencies import (
    DbSession,
    create_access_token,
    create_refresh_token,
)
from mentorship_api.models.user import User
from mentorship_api.schemas.auth import (
    AccessTokenResponse,
    LoginRequest,
    RegisterRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

REFRESH_COOKIE_NAME = "mentorship_refresh_token"
REFRESH_COOKIE_PATH = "/auth"


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _find_by_email(db: Session, email: str) -> User | None:
    return db.execute(
        select(User).where(User.email == _normalize_email(email))
    ).scalar_one_or_none()


def _start_session(response: Response, user: User) -> AccessTokenResponse:
    """Rotate the refresh cookie and hand back a fresh access token."""
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=create_refresh_token(user),
        httponly=True,
        secure=True,
        samesite="none",
        path=REFRESH_COOKIE_PATH,
        max_age=settings.refresh_token_expire_days * 86400,
    )
    return AccessTokenResponse(access_token=create_access_token(user))


def _user_from_refresh_token(db: Session, token: str | None) -> User | None:
    if token is None:
        return None
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.InvalidTokenError:
        return None
    # Access tokens carry no type claim and must not mint new sessions.
    if payload.get("type") != "refresh":
        return None
    user = db.get(User, int(payload["sub"]))
    if user is None or not user.is_active:
        return None
    return user


@router.post("/login", response_model=AccessTokenResponse)
def login(request: LoginRequest, response: Response, db: DbSession):
    """Exchange email and password for an access token and refresh cookie.

    Raises:
        HTTPException: 401 for unknown, deactivated or wrong-password accounts.
    """
    user = _find_by_email(db, request.email)
    if user is None or not user.is_active or not user.check_password(request.password):
        logger.info("Rejected login for %s", _normalize_email(request.email))
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)

    return _start_session(response, user)


@router.post(
    "/register", response_model=AccessTokenResponse, status_code=status.HTTP_201_CREATED
)
def register(request: RegisterRequest, response: Response, db: DbSession):
    """Open sign-up. Every account can ask for mentorship; mentors opt in.

    New mentors still have to switch on ``available_for_mentoring`` before
    they receive requests.

    Raises:
        HTTPException: 409 if the email is already registered.
    """
    if _find_by_email(db, request.email) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered.",
        )

    user = User(
        email=_normalize_email(request.email),
        name=request.name,
        is_mentor=request.is_mentor,
        password_hash="",
    )
    user.set_password(request.password)
    db.add(user)
    db.flush()
    logger.info("User %s registered (mentor=%s)", user.id, user.is_mentor)

    return _start_session(response, user)


@router.post("/refresh", response_model=AccessTokenResponse)
def refresh(
    response: Response,
    db: DbSession,
    mentorship_refresh_token: str | None = Cookie(default=None),
):
    user = _user_from_refresh_token(db, mentorship_refresh_token)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return _start_session(response, user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(response: Response):
    response.delete_cookie(
        key=REFRESH_COOKIE_NAME,
        httponly=True,
        secure=True,
        samesite="none",
        path=REFRESH_COOKIE_PATH,
    )
