from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from pydantic import Field

from officehub.schemas.base import ORMModel


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.strip().lower()).strip("-")
    return slug or "organization"


class OrganizationBase(ORMModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = None


class OrganizationCreate(OrganizationBase):
    slug: Optional[str] = Field(default=None, max_length=255)


class OrganizationUpdate(ORMModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = None


class OrganizationRead(OrganizationBase):
    id: int
    slug: str
    created_at: datetime
    updated_at: datetime
