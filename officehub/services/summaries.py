"""Monthly per-user aggregates of tasks, attendance and approved expenses."""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from officehub.core import rbac
from officehub.core.errors import ValidationError
from officehub.core.scope import apply_scope
from officehub.models.attendance import Attendance
from officehub.models.enums import ApprovalStatus, AttendanceStatus, TaskStatus
from officehub.models.expense import Expense
from officehub.models.summary import MonthlySummary
from officehub.models.task import Task
from officehub.models.user import User

logger = logging.getLogger("officehub.summaries")

CENTS = Decimal("0.01")


@dataclass
class SummaryRun:
    month: int
    year: int
    processed: List[int] = field(default_factory=list)
    failed: List[dict] = field(default_factory=list)

    @property
    def message(self) -> str:
        text = f"Generated {len(self.processed)} summaries for {self.month:02d}/{self.year}"
        if self.failed:
            text += f"; {len(self.failed)} failed"
        return text


def validate_period(month: int, year: int) -> None:
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12", field="month")
    if not 1970 <= year <= 9999:
        raise ValidationError("Year must be between 1970 and 9999", field="year")


def month_bounds(month: int, year: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def compute_totals(db: Session, user: User, month: int, year: int) -> dict:
    start, end = month_bounds(month, year)

    task_counts = dict(
        db.query(Task.status, func.count(Task.id))
        .filter(Task.assigned_to_id == user.id)
        .group_by(Task.status)
        .all()
    )

    attendance_counts = dict(
        db.query(Attendance.status, func.count(Attendance.id))
        .filter(
            Attendance.user_id == user.id,
            Attendance.date >= start,
            Attendance.date <= end,
        )
        .group_by(Attendance.status)
        .all()
    )

    amounts = (
        db.query(Expense.amount)
        .filter(
            Expense.user_id == user.id,
            Expense.status == ApprovalStatus.APPROVED,
            Expense.date >= start,
            Expense.date <= end,
        )
        .all()
    )
    total_expenses = sum((Decimal(str(amount)) for (amount,) in amounts), Decimal("0"))

    return {
        "total_tasks": sum(task_counts.values()),
        "completed_tasks": task_counts.get(TaskStatus.COMPLETED, 0),
        "in_progress_tasks": task_counts.get(TaskStatus.IN_PROGRESS, 0),
        "pending_tasks": task_counts.get(TaskStatus.PENDING, 0),
        "attendance_days": attendance_counts.get(AttendanceStatus.PRESENT, 0),
        "leave_days": attendance_counts.get(AttendanceStatus.LEAVE, 0),
        "total_expenses": total_expenses.quantize(CENTS),
    }


def _find_summary(db: Session, user_id: int, month: int, year: int) -> Optional[MonthlySummary]:
    return (
        db.query(MonthlySummary)
        .filter(
            MonthlySummary.user_id == user_id,
            MonthlySummary.month == month,
            MonthlySummary.year == year,
        )
        .first()
    )


def _apply(summary: MonthlySummary, user: User, totals: dict) -> None:
    for key, value in totals.items():
        setattr(summary, key, value)
    summary.organization_id = user.organization_id


def upsert_summary(db: Session, user: User, month: int, year: int, totals: dict) -> MonthlySummary:
    summary = _find_summary(db, user.id, month, year)
    if summary is not None:
        _apply(summary, user, totals)
        db.flush()
        return summary

    summary = MonthlySummary(user_id=user.id, month=month, year=year, organization_id=user.organization_id, **totals)
    try:
        with db.begin_nested():
            db.add(summary)
            db.flush()
    except IntegrityError:
        # A concurrent run inserted the row first.
        summary = _find_summary(db, user.id, month, year)
        if summary is None:
            raise
        _apply(summary, user, totals)
        db.flush()
    return summary


def generate(db: Session, month: int, year: int, actor: User) -> SummaryRun:
    """Recompute summaries for every user the actor can see.

    Each user runs in its own savepoint so one failure does not discard the
    others. Nothing is committed here.
    """
    rbac.require_admin(actor, message="Only admins can generate summaries")
    validate_period(month, year)

    run = SummaryRun(month=month, year=year)
    users = apply_scope(db.query(User), actor, User).order_by(User.id.asc()).all()
    for user in users:
        try:
            with db.begin_nested():
                totals = compute_totals(db, user, month, year)
                upsert_summary(db, user, month, year, totals)
        except Exception as exc:
            logger.exception(
                "summary generation failed for user %s",
                user.id,
                extra={"user_id": user.id, "month": month, "year": year},
            )
            run.failed.append({"userId": user.id, "error": str(exc)})
            continue
        run.processed.append(user.id)

    logger.info(
        "generated %s summaries, %s failed",
        len(run.processed),
        len(run.failed),
        extra={"user_id": actor.id, "month": month, "year": year},
    )
    return run
