from __future__ import annotations

import datetime as dt
from typing import Optional

from officehub.models.enums import AttendanceStatus
from officehub.schemas.base import ORMModel
from officehub.schemas.user import UserBrief


class AttendanceCreate(ORMModel):
    date: dt.date
    status: AttendanceStatus = AttendanceStatus.PRESENT
    check_in_time: Optional[dt.datetime] = None
    check_out_time: Optional[dt.datetime] = None
    user_id: Optional[int] = None


class AttendanceUpdate(ORMModel):
    status: Optional[AttendanceStatus] = None
    check_in_time: Optional[dt.datetime] = None
    check_out_time: Optional[dt.datetime] = None


class AttendanceRead(ORMModel):
    id: int
    user_id: int
    date: dt.date
    status: AttendanceStatus
    check_in_time: Optional[dt.datetime] = None
    check_out_time: Optional[dt.datetime] = None
    work_hours: Optional[float] = None
    organization_id: Optional[int] = None
    user: Optional[UserBrief] = None
    created_at: dt.datetime
    updated_at: dt.datetime
