from __future__ import annotations

from typing import Optional

from pydantic import Field

from officehub.models.enums import Role
from officehub.schemas.base import ORMModel


class LoginRequest(ORMModel):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class ProfileUpdate(ORMModel):
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    department: Optional[str] = Field(default=None, max_length=100)
    title: Optional[str] = Field(default=None, max_length=100)
    profile_image_url: Optional[str] = Field(default=None, max_length=500)


class ChangePasswordRequest(ORMModel):
    current_password: str
    new_password: str
    confirm_password: Optional[str] = None


class MessageResponse(ORMModel):
    message: str


class SessionUser(ORMModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: Role
    organization_id: Optional[int] = None
    must_change_password: bool = False
