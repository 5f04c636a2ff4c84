from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import Field, model_validator

from officehub.models.enums import ApprovalStatus, LeaveType
from officehub.schemas.base import ORMModel
from officehub.schemas.user import UserBrief


class LeaveCreate(ORMModel):
    type: LeaveType
    start_date: date
    end_date: date
    days: Optional[int] = Field(default=None, gt=0)
    reason: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_leave(self) -> "LeaveCreate":
        if self.end_date < self.start_date:
            raise ValueError("endDate cannot be before startDate")
        if self.days is None:
            self.days = (self.end_date - self.start_date).days + 1
        return self


class LeaveRead(ORMModel):
    id: int
    user_id: int
    type: LeaveType
    start_date: date
    end_date: date
    days: int
    reason: str
    status: ApprovalStatus
    approved_by_id: Optional[int] = None
    approved_at: Optional[datetime] = None
    organization_id: Optional[int] = None
    user: Optional[UserBrief] = None
    approved_by: Optional[UserBrief] = None
    created_at: datetime
    updated_at: datetime


class StatusUpdate(ORMModel):
    status: ApprovalStatus
