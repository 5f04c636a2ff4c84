from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from officehub.models.enums import TaskPriority, TaskStatus
from officehub.schemas.base import ORMModel
from officehub.schemas.user import UserBrief


class TaskBase(ORMModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None
    completion_level: int = Field(default=0, ge=0, le=100)
    notes: Optional[str] = None


class TaskCreate(TaskBase):
    assigned_to_id: int
    organization_id: Optional[int] = None


class TaskUpdate(ORMModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    assigned_to_id: Optional[int] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    completion_level: Optional[int] = Field(default=None, ge=0, le=100)
    notes: Optional[str] = None


class TaskRead(TaskBase):
    id: int
    assigned_to_id: int
    assigned_by_id: Optional[int] = None
    organization_id: Optional[int] = None
    assignee: Optional[UserBrief] = None
    assigner: Optional[UserBrief] = None
    created_at: datetime
    updated_at: datetime
