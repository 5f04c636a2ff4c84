from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from officehub.core.deps import get_current_admin
from officehub.core.errors import NotFound, ValidationError
from officehub.core.scope import apply_scope, ensure_in_scope, resolve_scope
from officehub.core.security import get_password_hash
from officehub.db.session import get_db
from officehub.models.enums import Role
from officehub.models.organization import Organization
from officehub.models.session import UserSession
from officehub.models.user import User
from officehub.schemas.auth import MessageResponse
from officehub.schemas.user import UserCreate, UserRead, UserUpdate
from officehub.services import auth as auth_service
from officehub.services.activity import log_activity

router = APIRouter(prefix="/api/users", tags=["users"])


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def _resolve_organization(db: Session, current_user: User, organization_id: Optional[int]) -> Optional[int]:
    scope = resolve_scope(current_user)
    if not scope.is_global:
        return scope.organization_id
    if organization_id is not None and db.get(Organization, organization_id) is None:
        raise ValidationError("Organization not found", field="organizationId")
    return organization_id


@router.get("", response_model=List[UserRead])
def list_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
    role: Optional[Role] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
) -> List[UserRead]:
    query = apply_scope(db.query(User), current_user, User)
    if role is not None:
        query = query.filter(User.role == role)
    if is_active is not None:
        query = query.filter(User.is_active.is_(is_active))
    users = query.order_by(User.created_at.desc(), User.id.desc()).all()
    return [UserRead.model_validate(u) for u in users]


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> UserRead:
    profile = user_in.model_dump(exclude={"email", "password"})
    profile["organization_id"] = _resolve_organization(db, current_user, user_in.organization_id)
    user = auth_service.register(db, user_in.email, user_in.password, profile)
    log_activity(
        db,
        actor_user_id=current_user.id,
        activity_type="USER_CREATED",
        message=f"User created: {user.email}",
        payload={"user_id": user.id, "role": user.role.value},
    )
    db.commit()
    db.refresh(user)
    return UserRead.model_validate(user)


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> UserRead:
    user = _get_user_or_404(db, user_id)
    ensure_in_scope(current_user, user)
    return UserRead.model_validate(user)


@router.patch("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> UserRead:
    user = _get_user_or_404(db, user_id)
    ensure_in_scope(current_user, user)

    update_data = user_update.model_dump(exclude_unset=True)
    password = update_data.pop("password", None)
    if password:
        auth_service.validate_password(password)
        user.hashed_password = get_password_hash(password)
    if "organization_id" in update_data:
        update_data["organization_id"] = _resolve_organization(db, current_user, update_data["organization_id"])

    for key, value in update_data.items():
        if value is None and key in ("first_name", "last_name", "role", "is_active"):
            continue
        setattr(user, key, value)

    if user.is_active is False:
        db.query(UserSession).filter(UserSession.user_id == user.id).delete(synchronize_session=False)

    db.add(user)
    log_activity(
        db,
        actor_user_id=current_user.id,
        activity_type="USER_UPDATED",
        message=f"User updated: {user.email}",
        payload={"user_id": user.id, "fields": sorted(update_data) + (["password"] if password else [])},
    )
    db.commit()
    db.refresh(user)
    return UserRead.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> MessageResponse:
    user = _get_user_or_404(db, user_id)
    ensure_in_scope(current_user, user)
    if user.id == current_user.id:
        raise ValidationError("You cannot delete your own account")

    email = user.email
    db.delete(user)
    log_activity(
        db,
        actor_user_id=current_user.id,
        activity_type="USER_DELETED",
        message=f"User deleted: {email}",
        payload={"user_id": user_id},
    )
    db.commit()
    return MessageResponse(message="User deleted successfully")
