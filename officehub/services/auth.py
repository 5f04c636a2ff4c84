"""Credentials and server-side sessions.

Sessions live in the ``sessions`` table; the browser only ever holds the
session id wrapped in a signed cookie (see ``officehub.core.security``).
Nothing here commits: callers own the transaction.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from officehub.core.errors import AccountDisabled, InvalidCredentials, ValidationError
from officehub.core.security import get_password_hash, new_session_id, read_session_id, verify_password
from officehub.core.settings import settings
from officehub.db.base import as_utc
from officehub.models.enums import Role
from officehub.models.session import UserSession
from officehub.models.user import User

logger = logging.getLogger("security")

# last_seen_at is written at most this often per session.
SESSION_TOUCH_INTERVAL = timedelta(minutes=1)

PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "role",
    "department",
    "title",
    "profile_image_url",
    "organization_id",
    "is_active",
    "must_change_password",
)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def validate_password(password: str, *, field: str = "password") -> str:
    if not password or len(password) < settings.min_password_length:
        raise ValidationError(
            f"Password must be at least {settings.min_password_length} characters long",
            field=field,
        )
    return password


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def register(
    db: Session,
    email: str,
    password: str,
    profile: Optional[Mapping[str, Any]] = None,
) -> User:
    email = normalize_email(email)
    if not email:
        raise ValidationError("Email is required", field="email")
    validate_password(password)
    if get_user_by_email(db, email) is not None:
        raise ValidationError("User with this email already exists", field="email")

    values = {key: value for key, value in (profile or {}).items() if key in PROFILE_FIELDS and value is not None}
    values.setdefault("role", Role.STAFF)
    user = User(email=email, hashed_password=get_password_hash(password), **values)
    db.add(user)
    db.flush()
    return user


def _session_expiry(now: datetime) -> datetime:
    return now + settings.session_lifetime


def authenticate(
    db: Session,
    email: str,
    password: str,
    *,
    user_agent: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> Tuple[User, UserSession]:
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.hashed_password):
        raise InvalidCredentials()
    if not user.is_active:
        raise AccountDisabled()

    purge_expired_sessions(db)
    now = datetime.now(timezone.utc)
    user.last_login_at = now
    session = UserSession(
        id=new_session_id(),
        user_id=user.id,
        created_at=now,
        last_seen_at=now,
        expires_at=_session_expiry(now),
        user_agent=(user_agent or "")[:255] or None,
        ip_address=ip_address,
    )
    db.add(user)
    db.add(session)
    db.flush()
    return user, session


def _load_session(db: Session, cookie_value: Optional[str]) -> Optional[UserSession]:
    session_id = read_session_id(cookie_value)
    if session_id is None:
        return None
    return db.get(UserSession, session_id)


def current_identity(db: Session, cookie_value: Optional[str]) -> Optional[User]:
    """Resolve a session cookie to its user; ``None`` means anonymous."""
    session = _load_session(db, cookie_value)
    if session is None:
        return None
    now = datetime.now(timezone.utc)
    if as_utc(session.expires_at) <= now:
        return None
    user = db.get(User, session.user_id)
    if user is None or not user.is_active:
        return None
    if as_utc(session.last_seen_at) <= now - SESSION_TOUCH_INTERVAL:
        session.last_seen_at = now
    return user


def change_password(
    db: Session,
    user: User,
    current_password: str,
    new_password: str,
    confirm_password: Optional[str] = None,
    *,
    keep_session_id: Optional[str] = None,
) -> None:
    if not verify_password(current_password, user.hashed_password):
        raise InvalidCredentials("Current password is incorrect")
    validate_password(new_password, field="newPassword")
    if confirm_password is not None and confirm_password != new_password:
        raise ValidationError("Passwords do not match", field="confirmPassword")

    user.hashed_password = get_password_hash(new_password)
    user.must_change_password = False
    db.add(user)

    others = db.query(UserSession).filter(UserSession.user_id == user.id)
    if keep_session_id:
        others = others.filter(UserSession.id != keep_session_id)
    revoked = others.delete(synchronize_session=False)
    db.flush()
    if revoked:
        logger.info("revoked %s other session(s) for user %s after password change", revoked, user.id)


def logout(db: Session, cookie_value: Optional[str]) -> None:
    session = _load_session(db, cookie_value)
    if session is None:
        return
    db.delete(session)
    db.flush()


def purge_expired_sessions(db: Session) -> int:
    now = datetime.now(timezone.utc)
    count = db.query(UserSession).filter(UserSession.expires_at <= now).delete(synchronize_session=False)
    db.flush()
    return count
