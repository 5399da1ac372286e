# ruff: noqa: TC001, TC003
from __future__ import annotations

import datetime
import uuid

from pydantic import Field

from onsite.models.enums import CompTimeStatus, CompTimeType
from onsite.schemas.base import CamelModel


class GrantCompTimePayload(CamelModel):
    """Admin request body for a manual comp-time grant."""

    user_id: uuid.UUID
    minutes_earned: int = Field(gt=0)
    description: str | None = Field(default=None, max_length=500)
    source_date: datetime.date | None = None


class CompTimeEntryResponse(CamelModel):
    """A comp-time earn event and how much of it has been drawn."""

    id: uuid.UUID
    user_id: uuid.UUID
    org_id: uuid.UUID | None
    type: CompTimeType
    source_id: uuid.UUID | None
    source_date: datetime.date
    minutes_earned: int
    minutes_used: int
    status: CompTimeStatus
    expires_at: datetime.datetime
    description: str | None
    created_at: datetime.datetime


class CompTimeBalanceSummary(CamelModel):
    total_minutes: int
    available_hours: int
    available_remaining_minutes: int
    expiring_minutes: int
    expiring_hours: int
    expiring_within: int


class CompTimeListResponse(CamelModel):
    """All of a user's comp-time entries with the current balance."""

    entries: list[CompTimeEntryResponse]
    balance: CompTimeBalanceSummary
