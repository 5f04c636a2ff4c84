from __future__ import annotations

import secrets
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from officehub.core.settings import settings


pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Malformed or unknown hash format in the store.
        return False


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


def sign_session(session_id: str, user_id: int) -> str:
    """Wrap a server-side session id in a signed, opaque cookie value.

    The user id rides along only so request logs can attribute traffic
    without a database hit; identity is always re-resolved from the
    session row.
    """
    payload: Dict[str, Any] = {"sid": session_id, "sub": str(user_id)}
    return jwt.encode(payload, settings.session_secret, algorithm=settings.session_algorithm)


def decode_session_cookie(value: str) -> Dict[str, Any]:
    return jwt.decode(value, settings.session_secret, algorithms=[settings.session_algorithm])


def read_session_id(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    try:
        payload = decode_session_cookie(value)
    except JWTError:
        return None
    session_id = payload.get("sid")
    if not isinstance(session_id, str) or not session_id:
        return None
    return session_id
