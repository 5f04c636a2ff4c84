from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, selectinload

from officehub.core.deps import get_current_admin, get_current_user
from officehub.core.errors import NotFound
from officehub.core.scope import apply_scope, ensure_in_scope
from officehub.db.session import get_db
from officehub.models.enums import ApprovalStatus
from officehub.models.leave import Leave
from officehub.models.user import User
from officehub.schemas.leave import LeaveCreate, LeaveRead, StatusUpdate
from officehub.services.activity import log_activity
from officehub.services.approvals import decide

router = APIRouter(prefix="/api/leaves", tags=["leaves"])

_PEOPLE = (selectinload(Leave.user), selectinload(Leave.approved_by))


def _get_leave_or_404(db: Session, leave_id: int) -> Leave:
    leave = db.get(Leave, leave_id)
    if not leave:
        raise NotFound("Leave request not found")
    return leave


@router.get("", response_model=List[LeaveRead])
def list_leaves(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    status_filter: Optional[ApprovalStatus] = Query(None, alias="status"),
) -> List[LeaveRead]:
    """List leave requests: admins see their scope, staff see their own."""
    query = apply_scope(db.query(Leave), current_user, Leave).options(*_PEOPLE)
    if status_filter is not None:
        query = query.filter(Leave.status == status_filter)
    leaves = query.order_by(Leave.created_at.desc(), Leave.id.desc()).all()
    return [LeaveRead.model_validate(l) for l in leaves]


@router.get("/pending", response_model=List[LeaveRead])
def pending_leaves(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> List[LeaveRead]:
    leaves = (
        apply_scope(db.query(Leave), current_user, Leave)
        .options(*_PEOPLE)
        .filter(Leave.status == ApprovalStatus.PENDING)
        .order_by(Leave.created_at.asc(), Leave.id.asc())
        .all()
    )
    return [LeaveRead.model_validate(l) for l in leaves]


@router.post("", response_model=LeaveRead, status_code=status.HTTP_201_CREATED)
def request_leave(
    leave_in: LeaveCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> LeaveRead:
    leave = Leave(
        user_id=current_user.id,
        type=leave_in.type,
        start_date=leave_in.start_date,
        end_date=leave_in.end_date,
        days=leave_in.days,
        reason=leave_in.reason,
        status=ApprovalStatus.PENDING,
        organization_id=current_user.organization_id,
    )
    db.add(leave)
    db.flush()

    log_activity(
        db,
        actor_user_id=current_user.id,
        activity_type="LEAVE_REQUESTED",
        message=f"Leave requested: {leave.type.value}",
        payload={"leave_id": leave.id},
    )
    db.commit()
    db.refresh(leave)
    return LeaveRead.model_validate(leave)


@router.get("/{leave_id}", response_model=LeaveRead)
def get_leave(
    leave_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> LeaveRead:
    leave = _get_leave_or_404(db, leave_id)
    ensure_in_scope(current_user, leave)
    return LeaveRead.model_validate(leave)


@router.patch("/{leave_id}/status", response_model=LeaveRead)
def decide_leave(
    leave_id: int,
    payload: StatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> LeaveRead:
    leave = _get_leave_or_404(db, leave_id)
    decide(db, leave, payload.status, current_user)
    db.commit()
    db.refresh(leave)
    return LeaveRead.model_validate(leave)
