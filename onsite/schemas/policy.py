# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid

from pydantic import Field

from onsite.schemas.base import CamelModel

# ---------------------------------------------------------------------------
# Org leave policy
# ---------------------------------------------------------------------------


class UpdatePolicyPayload(CamelModel):
    """Partial update of the org policy. Omitted fields keep their value."""

    required_days_per_week: int | None = Field(default=None, ge=0, le=7)
    minimum_minutes_per_day: int | None = Field(default=None, ge=0, le=1440)
    annual_pto_days: int | None = Field(default=None, ge=0, le=365)
    max_carryover_days: int | None = Field(default=None, ge=0, le=365)
    leave_year_start_month: int | None = Field(default=None, ge=1, le=12)
    leave_year_start_day: int | None = Field(default=None, ge=1, le=31)


class PolicyResponse(CamelModel):
    """Active org policy; id is None when the org has never saved one."""

    id: uuid.UUID | None = None
    org_id: uuid.UUID
    name: str = "Default Policy"
    is_active: bool = True
    effective_date: datetime.date | None = None
    required_days_per_week: int = 3
    minimum_minutes_per_day: int = 0
    annual_pto_days: int = 0
    max_carryover_days: int = 0
    leave_year_start_month: int = 1
    leave_year_start_day: int = 1


# ---------------------------------------------------------------------------
# Per-employee allowance overrides
# ---------------------------------------------------------------------------


class AllowanceOverridePayload(CamelModel):
    """Create or replace an employee's PTO allowance for a year (or permanently)."""

    user_id: uuid.UUID
    annual_pto_days: int = Field(ge=0, le=365)
    effective_year: int | None = Field(default=None, ge=2000, le=2100)
    notes: str | None = Field(default=None, max_length=500)


class AllowanceOverrideResponse(CamelModel):
    id: uuid.UUID
    org_id: uuid.UUID
    user_id: uuid.UUID
    annual_pto_days: int
    effective_year: int | None
    notes: str | None
    created_at: datetime.datetime
    updated_at: datetime.datetime


class AllowanceOverrideListResponse(CamelModel):
    items: list[AllowanceOverrideResponse]
    total: int


class SuccessResponse(CamelModel):
    success: bool = True
