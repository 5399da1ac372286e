# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid

from pydantic import Field

from onsite.schemas.base import CamelModel


class UpsertMemberPayload(CamelModel):
    """Request body for registering or updating an org member in the directory."""

    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=1, max_length=255)
    role: str = Field(default="employee", pattern=r"^(employee|admin)$")
    hire_date: datetime.date | None = None


class MemberResponse(CamelModel):
    id: uuid.UUID
    org_id: uuid.UUID
    name: str
    email: str
    role: str
    hire_date: datetime.date | None


class MemberListResponse(CamelModel):
    items: list[MemberResponse]
    total: int
