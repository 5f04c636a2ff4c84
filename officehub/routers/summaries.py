from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from officehub.core.deps import get_current_admin, get_current_user
from officehub.core.errors import NotFound
from officehub.core.scope import apply_scope, ensure_in_scope
from officehub.db.session import get_db
from officehub.models.summary import MonthlySummary
from officehub.models.user import User
from officehub.schemas.summary import GenerateRequest, GenerateResponse, MonthlySummaryRead
from officehub.services.activity import log_activity
from officehub.services.summaries import generate

router = APIRouter(prefix="/api/summaries", tags=["summaries"])


def _ordered(query):
    return query.order_by(MonthlySummary.year.desc(), MonthlySummary.month.desc(), MonthlySummary.user_id.asc())


@router.get("", response_model=List[MonthlySummaryRead])
def list_summaries(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1970, le=9999),
) -> List[MonthlySummaryRead]:
    query = apply_scope(db.query(MonthlySummary), current_user, MonthlySummary)
    if month is not None:
        query = query.filter(MonthlySummary.month == month)
    if year is not None:
        query = query.filter(MonthlySummary.year == year)
    return [MonthlySummaryRead.model_validate(s) for s in _ordered(query).all()]


@router.get("/user/{user_id}", response_model=List[MonthlySummaryRead])
def user_summaries(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[MonthlySummaryRead]:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    ensure_in_scope(current_user, user, message="You can only view your own summaries")
    query = db.query(MonthlySummary).filter(MonthlySummary.user_id == user.id)
    return [MonthlySummaryRead.model_validate(s) for s in _ordered(query).all()]


@router.post("/generate", response_model=GenerateResponse, status_code=status.HTTP_201_CREATED)
def generate_summaries(
    payload: GenerateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> GenerateResponse:
    run = generate(db, payload.month, payload.year, current_user)
    log_activity(
        db,
        actor_user_id=current_user.id,
        activity_type="SUMMARIES_GENERATED",
        message=run.message,
        payload={"month": run.month, "year": run.year, "processed": len(run.processed), "failed": len(run.failed)},
    )
    db.commit()
    return GenerateResponse(message=run.message, processed=len(run.processed), failed=run.failed)
