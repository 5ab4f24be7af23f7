from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.security import issue_access_token
from ..crud.users import authenticate_user, create_user
from ..db.session import get_db
from ..deps.auth import CurrentUser, login_rate_limit
from ..models.user import User
from ..schemas.auth import AuthResponse, LoginRequest, MeResponse, SignupRequest, UserOut
from ..schemas.base import MessageOut

router = APIRouter(prefix="/auth", tags=["auth"])


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": settings.COOKIE_SECURE,
        "samesite": settings.COOKIE_SAMESITE,
        "domain": settings.COOKIE_DOMAIN,
        "path": "/",
    }


def _issue_session(response: Response, user: User) -> AuthResponse:
    access = issue_access_token(user.id)
    response.set_cookie(
        settings.COOKIE_NAME,
        access.token,
        max_age=access.expires_in,
        **_cookie_options(),
    )
    return AuthResponse(
        user=UserOut.model_validate(user),
        token=access.token,
        token_type=access.token_type,
        expires_in=access.expires_in,
    )


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED, summary="Register a new user")
def signup(payload: SignupRequest, response: Response, db: Session = Depends(get_db)):
    user = create_user(db, payload.model_dump())
    return _issue_session(response, user)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Exchange username and password for a session token",
    dependencies=[Depends(login_rate_limit)],
)
def login(payload: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = authenticate_user(db, payload.model_dump())
    return _issue_session(response, user)


@router.post("/logout", response_model=MessageOut, summary="Discard the session cookie")
def logout(response: Response):
    # Tokens are stateless; clearing the cookie is all the server can do.
    options = _cookie_options()
    response.delete_cookie(settings.COOKIE_NAME, **options)
    return MessageOut(message="Logged out successfully")


@router.get("/me", response_model=MeResponse, summary="Current user")
def me(user: CurrentUser):
    return MeResponse(user=UserOut.model_validate(user))
