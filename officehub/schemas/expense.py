from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_serializer

from officehub.models.enums import ApprovalStatus
from officehub.schemas.base import ORMModel
from officehub.schemas.user import UserBrief


class ExpenseCreate(ORMModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    description: str = Field(..., min_length=1)
    date: dt.date
    category: str = Field(..., min_length=1, max_length=100)
    receipt_url: Optional[str] = Field(default=None, max_length=500)


class ExpenseRead(ORMModel):
    id: int
    user_id: int
    amount: Decimal
    description: str
    date: dt.date
    category: str
    receipt_url: Optional[str] = None
    status: ApprovalStatus
    approved_by_id: Optional[int] = None
    approved_at: Optional[dt.datetime] = None
    organization_id: Optional[int] = None
    user: Optional[UserBrief] = None
    approved_by: Optional[UserBrief] = None
    created_at: dt.datetime
    updated_at: dt.datetime

    @field_serializer("amount")
    def serialize_amount(self, value: Decimal) -> str:
        return str(Decimal(value).quantize(Decimal("0.01")))
