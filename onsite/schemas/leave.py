# ruff: noqa: TC001, TC003
from __future__ import annotations

import datetime
import uuid
from typing import Self

from pydantic import Field, model_validator

from onsite.models.enums import LeaveStatus, LeaveType
from onsite.schemas.balance import PtoBalanceResponse
from onsite.schemas.base import CamelModel

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateLeavePayload(CamelModel):
    """Request body for recording leave on a day or an inclusive date range."""

    type: LeaveType
    date: datetime.date
    end_date: datetime.date | None = None
    notes: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def _validate_range(self) -> Self:
        if self.end_date is not None and self.end_date < self.date:
            msg = "endDate must not be before date"
            raise ValueError(msg)
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveResponse(CamelModel):
    """A single day of leave."""

    id: uuid.UUID
    user_id: uuid.UUID
    org_id: uuid.UUID | None
    type: LeaveType
    date: datetime.date
    end_date: datetime.date | None
    notes: str | None
    status: LeaveStatus
    created_at: datetime.datetime


class LeaveSummary(CamelModel):
    """Day counts over a listing; every row is one day."""

    total_days: int
    by_type: dict[str, int]


class LeaveListResponse(CamelModel):
    """Leave days for a month or year, with an optional PTO balance."""

    leaves: list[LeaveResponse]
    summary: LeaveSummary
    balance: PtoBalanceResponse | None = None


class CreateLeaveResponse(CamelModel):
    """Rows written by a leave submission."""

    leaves: list[LeaveResponse]
    comp_time_granted: int


class DeleteLeaveResponse(CamelModel):
    success: bool = True
