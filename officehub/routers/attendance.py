from __future__ import annotations

from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, selectinload

from officehub.core import rbac
from officehub.core.deps import get_current_admin, get_current_user
from officehub.core.errors import NotFound, ValidationError
from officehub.core.scope import apply_scope, ensure_in_scope
from officehub.db.base import as_utc
from officehub.db.session import get_db
from officehub.models.attendance import Attendance
from officehub.models.enums import AttendanceStatus
from officehub.models.user import User
from officehub.schemas.attendance import AttendanceCreate, AttendanceRead, AttendanceUpdate

router = APIRouter(prefix="/api/attendance", tags=["attendance"])


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _find_record(db: Session, user_id: int, day: date) -> Optional[Attendance]:
    return db.query(Attendance).filter(Attendance.user_id == user_id, Attendance.date == day).first()


def _work_hours(check_in: Optional[datetime], check_out: Optional[datetime]) -> Optional[float]:
    if check_in is None or check_out is None:
        return None
    seconds = (as_utc(check_out) - as_utc(check_in)).total_seconds()
    if seconds < 0:
        raise ValidationError("Check-out cannot be before check-in", field="checkOutTime")
    return round(seconds / 3600, 2)


@router.get("", response_model=List[AttendanceRead])
def list_attendance(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    user_id: Optional[int] = Query(None, alias="userId"),
) -> List[AttendanceRead]:
    query = apply_scope(db.query(Attendance), current_user, Attendance).options(selectinload(Attendance.user))
    if date_from is not None:
        query = query.filter(Attendance.date >= date_from)
    if date_to is not None:
        query = query.filter(Attendance.date <= date_to)
    if user_id is not None:
        query = query.filter(Attendance.user_id == user_id)
    records = query.order_by(Attendance.date.desc(), Attendance.id.desc()).all()
    return [AttendanceRead.model_validate(r) for r in records]


@router.post("", response_model=AttendanceRead, status_code=status.HTTP_201_CREATED)
def mark_attendance(
    record_in: AttendanceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> AttendanceRead:
    owner = current_user
    if record_in.user_id is not None and record_in.user_id != current_user.id and rbac.is_admin(current_user):
        owner = db.get(User, record_in.user_id)
        if not owner:
            raise ValidationError("User not found", field="userId")
        ensure_in_scope(current_user, owner)

    if _find_record(db, owner.id, record_in.date) is not None:
        raise ValidationError("Attendance already recorded for this date", field="date")

    record = Attendance(
        user_id=owner.id,
        date=record_in.date,
        status=record_in.status,
        check_in_time=record_in.check_in_time,
        check_out_time=record_in.check_out_time,
        work_hours=_work_hours(record_in.check_in_time, record_in.check_out_time),
        organization_id=owner.organization_id,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return AttendanceRead.model_validate(record)


@router.get("/today", response_model=Optional[AttendanceRead])
def today_attendance(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Optional[AttendanceRead]:
    record = _find_record(db, current_user.id, _today())
    return AttendanceRead.model_validate(record) if record else None


@router.post("/check-in", response_model=AttendanceRead)
def check_in(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> AttendanceRead:
    now = datetime.now(timezone.utc)
    record = _find_record(db, current_user.id, now.date())
    if record is None:
        record = Attendance(
            user_id=current_user.id,
            date=now.date(),
            status=AttendanceStatus.PRESENT,
            organization_id=current_user.organization_id,
        )
    elif record.check_in_time is not None:
        raise ValidationError("Already checked in today")

    record.check_in_time = now
    db.add(record)
    db.commit()
    db.refresh(record)
    return AttendanceRead.model_validate(record)


@router.post("/check-out", response_model=AttendanceRead)
def check_out(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> AttendanceRead:
    now = datetime.now(timezone.utc)
    record = _find_record(db, current_user.id, now.date())
    if record is None or record.check_in_time is None:
        raise ValidationError("You have not checked in today")
    if record.check_out_time is not None:
        raise ValidationError("Already checked out today")

    record.check_out_time = now
    record.work_hours = _work_hours(record.check_in_time, now)
    db.add(record)
    db.commit()
    db.refresh(record)
    return AttendanceRead.model_validate(record)


@router.patch("/{attendance_id}", response_model=AttendanceRead)
def update_attendance(
    attendance_id: int,
    record_update: AttendanceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> AttendanceRead:
    record = db.get(Attendance, attendance_id)
    if not record:
        raise NotFound("Attendance record not found")
    ensure_in_scope(current_user, record)

    for key, value in record_update.model_dump(exclude_unset=True).items():
        if value is None and key == "status":
            continue
        setattr(record, key, value)
    record.work_hours = _work_hours(record.check_in_time, record.check_out_time)
    db.add(record)
    db.commit()
    db.refresh(record)
    return AttendanceRead.model_validate(record)
