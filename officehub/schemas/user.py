from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from officehub.models.enums import Role
from officehub.schemas.base import ORMModel


class UserBase(ORMModel):
    email: str = Field(..., min_length=3, max_length=255)
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)
    role: Role = Role.STAFF
    department: Optional[str] = Field(default=None, max_length=100)
    title: Optional[str] = Field(default=None, max_length=100)
    profile_image_url: Optional[str] = Field(default=None, max_length=500)
    organization_id: Optional[int] = None
    is_active: bool = True

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        value = value.strip().lower()
        if "@" not in value:
            raise ValueError("Invalid email address")
        return value


class UserCreate(UserBase):
    password: str
    must_change_password: bool = False


class UserUpdate(ORMModel):
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    role: Optional[Role] = None
    department: Optional[str] = Field(default=None, max_length=100)
    title: Optional[str] = Field(default=None, max_length=100)
    profile_image_url: Optional[str] = Field(default=None, max_length=500)
    organization_id: Optional[int] = None
    is_active: Optional[bool] = None
    password: Optional[str] = None


class UserRead(UserBase):
    id: int
    must_change_password: bool = False
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class UserBrief(ORMModel):
    """Person attached to a task, leave, expense or attendance record."""

    id: int
    email: str
    first_name: str = ""
    last_name: str = ""
    role: Role
