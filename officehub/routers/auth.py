from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from officehub.core.deps import get_current_user, log_auth_event, session_cookie
from officehub.core.errors import OfficeHubError
from officehub.core.security import read_session_id, sign_session
from officehub.core.settings import settings
from officehub.db.session import get_db
from officehub.models.user import User
from officehub.schemas.auth import ChangePasswordRequest, LoginRequest, MessageResponse, ProfileUpdate, SessionUser
from officehub.schemas.user import UserRead
from officehub.services import auth as auth_service
from officehub.services.activity import log_activity

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _set_session_cookie(response: Response, session_id: str, user_id: int) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=sign_session(session_id, user_id),
        max_age=int(settings.session_lifetime.total_seconds()),
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
        path="/",
    )


def _clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
    )


@router.post("/login", response_model=SessionUser)
def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
) -> SessionUser:
    try:
        user, session = auth_service.authenticate(
            db,
            payload.email,
            payload.password,
            user_agent=request.headers.get("user-agent"),
            ip_address=request.client.host if request.client else None,
        )
    except OfficeHubError as exc:
        log_auth_event(
            "login_failed",
            request=request,
            extra={"email": auth_service.normalize_email(payload.email), "reason": exc.message},
        )
        raise

    log_activity(db, actor_user_id=user.id, activity_type="USER_LOGIN", message=f"Login: {user.email}")
    db.commit()
    _set_session_cookie(response, session.id, user.id)
    log_auth_event("login_success", request=request, extra={"user_id": user.id})
    return SessionUser.model_validate(user)


@router.post("/logout", response_model=MessageResponse)
def logout(request: Request, response: Response, db: Session = Depends(get_db)) -> MessageResponse:
    cookie = session_cookie(request)
    if cookie:
        auth_service.logout(db, cookie)
        db.commit()
        log_auth_event("logout", request=request)
    _clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserRead)
def me(current_user: User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(current_user)


@router.patch("/profile", response_model=UserRead)
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserRead:
    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is None and key in ("first_name", "last_name"):
            continue
        setattr(current_user, key, value)
    db.add(current_user)
    db.commit()
    db.refresh(current_user)
    return UserRead.model_validate(current_user)


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    payload: ChangePasswordRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    auth_service.change_password(
        db,
        current_user,
        payload.current_password,
        payload.new_password,
        payload.confirm_password,
        keep_session_id=read_session_id(session_cookie(request)),
    )
    log_activity(db, actor_user_id=current_user.id, activity_type="PASSWORD_CHANGED")
    db.commit()
    log_auth_event("password_changed", request=request, extra={"user_id": current_user.id})
    return MessageResponse(message="Password changed successfully")
