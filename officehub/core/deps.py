from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from officehub.core import rbac
from officehub.core.errors import Unauthorized
from officehub.core.settings import settings
from officehub.db.session import get_db
from officehub.models.user import User
from officehub.services.auth import current_identity

logger = logging.getLogger("security")


def log_auth_event(event: str, *, request: Request, extra: Optional[dict] = None) -> None:
    payload = {
        "event": event,
        "request_id": request.headers.get("x-request-id"),
        "path": request.url.path,
        "method": request.method,
        "client": request.client.host if request.client else None,
    }
    if extra:
        payload.update(extra)
    logger.info(json.dumps(payload, default=str))


def session_cookie(request: Request) -> Optional[str]:
    return request.cookies.get(settings.session_cookie_name)


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    cookie = session_cookie(request)
    if not cookie:
        return None
    user = current_identity(db, cookie)
    if user is None:
        log_auth_event("session_invalid", request=request)
    elif db.dirty:
        db.commit()
    return user


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise Unauthorized("Unauthorized")
    return user


def get_current_admin(user: User = Depends(get_current_user)) -> User:
    rbac.require_admin(user)
    return user
