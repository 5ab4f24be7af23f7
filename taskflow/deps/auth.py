from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Request
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ..core.config import settings
from ..core.errors import NotFoundError, Unauthorized
from ..core.ratelimit import AttemptLimiter
from ..core.security import TokenError, decode_token
from ..crud.users import get_user
from ..db.session import get_db
from ..middlewares import bind_user
from ..models.user import User

login_limiter = AttemptLimiter(
    settings.LOGIN_RATE_LIMIT_ATTEMPTS,
    settings.LOGIN_RATE_LIMIT_WINDOW_SECONDS,
    message="Too many login attempts, please try again later",
)


def extract_token(request: Request, authorization: str | None) -> str | None:
    """Cookie first, then an ``Authorization: Bearer`` header."""
    token = request.cookies.get(settings.COOKIE_NAME)
    if token:
        return token
    if authorization:
        scheme, credentials = get_authorization_scheme_param(authorization)
        if scheme.lower() == "bearer" and credentials:
            return credentials
    return None


async def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> User:
    token = extract_token(request, authorization)
    if not token:
        raise Unauthorized("No auth token provided")
    try:
        payload = decode_token(token, verify_type="access")
    except TokenError as exc:
        raise Unauthorized(str(exc)) from exc
    user = await run_in_threadpool(get_user, db, payload.user_id)
    if user is None:
        raise NotFoundError("User not found")
    bind_user(request, user.id)
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def login_rate_limit(request: Request) -> None:
    login_limiter.hit(client_key(request))
