from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, selectinload

from officehub.core.deps import get_current_admin, get_current_user
from officehub.core.errors import NotFound
from officehub.core.scope import apply_scope, ensure_in_scope
from officehub.db.session import get_db
from officehub.models.enums import ApprovalStatus
from officehub.models.expense import Expense
from officehub.models.user import User
from officehub.schemas.expense import ExpenseCreate, ExpenseRead
from officehub.schemas.leave import StatusUpdate
from officehub.services.activity import log_activity
from officehub.services.approvals import decide

router = APIRouter(prefix="/api/expenses", tags=["expenses"])

_PEOPLE = (selectinload(Expense.user), selectinload(Expense.approved_by))


def _get_expense_or_404(db: Session, expense_id: int) -> Expense:
    expense = db.get(Expense, expense_id)
    if not expense:
        raise NotFound("Expense not found")
    return expense


@router.get("", response_model=List[ExpenseRead])
def list_expenses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    status_filter: Optional[ApprovalStatus] = Query(None, alias="status"),
) -> List[ExpenseRead]:
    query = apply_scope(db.query(Expense), current_user, Expense).options(*_PEOPLE)
    if status_filter is not None:
        query = query.filter(Expense.status == status_filter)
    expenses = query.order_by(Expense.created_at.desc(), Expense.id.desc()).all()
    return [ExpenseRead.model_validate(e) for e in expenses]


@router.get("/pending", response_model=List[ExpenseRead])
def pending_expenses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> List[ExpenseRead]:
    expenses = (
        apply_scope(db.query(Expense), current_user, Expense)
        .options(*_PEOPLE)
        .filter(Expense.status == ApprovalStatus.PENDING)
        .order_by(Expense.created_at.asc(), Expense.id.asc())
        .all()
    )
    return [ExpenseRead.model_validate(e) for e in expenses]


@router.post("", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
def submit_expense(
    expense_in: ExpenseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ExpenseRead:
    expense = Expense(
        user_id=current_user.id,
        amount=expense_in.amount,
        description=expense_in.description,
        date=expense_in.date,
        category=expense_in.category,
        receipt_url=expense_in.receipt_url,
        status=ApprovalStatus.PENDING,
        organization_id=current_user.organization_id,
    )
    db.add(expense)
    db.flush()

    log_activity(
        db,
        actor_user_id=current_user.id,
        activity_type="EXPENSE_SUBMITTED",
        message=f"Expense submitted: {expense.amount} ({expense.category})",
        payload={"expense_id": expense.id},
    )
    db.commit()
    db.refresh(expense)
    return ExpenseRead.model_validate(expense)


@router.get("/{expense_id}", response_model=ExpenseRead)
def get_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ExpenseRead:
    expense = _get_expense_or_404(db, expense_id)
    ensure_in_scope(current_user, expense)
    return ExpenseRead.model_validate(expense)


@router.patch("/{expense_id}/status", response_model=ExpenseRead)
def decide_expense(
    expense_id: int,
    payload: StatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> ExpenseRead:
    expense = _get_expense_or_404(db, expense_id)
    decide(db, expense, payload.status, current_user)
    db.commit()
    db.refresh(expense)
    return ExpenseRead.model_validate(expense)
