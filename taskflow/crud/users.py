"""Account registration and credential checks."""

from __future__ import annotations

import logging
from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.errors import ConflictError, Unauthorized, ValidationFailed
from ..core.security import hash_password, verify_password
from ..models.user import User
from ..services.timecalc import to_iso, utcnow

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6
# bcrypt refuses secrets longer than this many UTF-8 bytes.
MAX_PASSWORD_BYTES = 72

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.execute(select(User).where(User.username == username)).scalars().first()


def get_user_by_email(db: Session, email: str) -> User | None:
    stmt = select(User).where(func.lower(User.email) == email.lower())
    return db.execute(stmt).scalars().first()


def _normalize_email(raw: str) -> str:
    result = validate_email(raw, check_deliverability=False)
    return result.normalized


def validate_signup(payload: dict) -> tuple[str, str, str]:
    """Check every signup field and report all problems at once."""
    errors: list[dict[str, str]] = []
    email = (payload.get("email") or "").strip()
    username = (payload.get("username") or "").strip()
    password = payload.get("password") or ""

    try:
        email = _normalize_email(email)
    except EmailNotValidError:
        errors.append({"field": "email", "message": "Must be a valid email"})
    if len(username) < MIN_USERNAME_LENGTH:
        errors.append(
            {"field": "username", "message": f"username must be {MIN_USERNAME_LENGTH}+ chars"}
        )
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(
            {"field": "password", "message": f"password must be {MIN_PASSWORD_LENGTH}+ chars"}
        )
    elif len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        errors.append(
            {"field": "password", "message": f"password must be at most {MAX_PASSWORD_BYTES} bytes"}
        )
    if errors:
        raise ValidationFailed(errors)
    return email, username, password


def create_user(db: Session, payload: dict, *, now: datetime | None = None) -> User:
    email, username, password = validate_signup(payload)
    if get_user_by_username(db, username):
        raise ConflictError("Username already taken")
    if get_user_by_email(db, email):
        raise ConflictError("Email already registered")
    user = User(
        email=email,
        username=username,
        password_hash=hash_password(password),
        created_at=to_iso(now or utcnow()),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent signup for the same name or address.
        db.rollback()
        raise ConflictError("Username or email already registered") from exc
    db.refresh(user)
    logger.info("auth.signup", extra={"extra_data": {"user_id": user.id}})
    return user


def authenticate_user(db: Session, payload: dict) -> User:
    username = (payload.get("username") or "").strip()
    password = payload.get("password") or ""
    errors: list[dict[str, str]] = []
    if not username:
        errors.append({"field": "username", "message": "username is required"})
    if not password:
        errors.append({"field": "password", "message": "password is required"})
    if errors:
        raise ValidationFailed(errors)

    user = get_user_by_username(db, username)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("auth.login_failed", extra={"extra_data": {"username": username}})
        raise Unauthorized("Invalid credentials")
    logger.info("auth.login", extra={"extra_data": {"user_id": user.id}})
    return user
