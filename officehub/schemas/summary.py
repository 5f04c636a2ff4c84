from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_serializer

from officehub.schemas.base import ORMModel


class GenerateRequest(ORMModel):
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1970, le=9999)


class FailedSummary(ORMModel):
    user_id: int
    error: str


class GenerateResponse(ORMModel):
    message: str
    processed: int
    failed: List[FailedSummary] = []


class MonthlySummaryRead(ORMModel):
    id: int
    user_id: int
    month: int
    year: int
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    pending_tasks: int
    attendance_days: int
    leave_days: int
    total_expenses: Decimal
    organization_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("total_expenses")
    def serialize_total(self, value: Decimal) -> str:
        return str(Decimal(value).quantize(Decimal("0.01")))
