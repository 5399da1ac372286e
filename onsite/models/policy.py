# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field

from onsite.models.base import TimestampMixin, UUIDBase, _now_utc


class PolicyConfig(UUIDBase, TimestampMixin, table=True):
    """Org-wide attendance and leave policy. The newest active row applies."""

    __tablename__ = "policy_config"
    __table_args__ = (sa.Index("ix_policy_org_active", "org_id", "is_active"),)

    org_id: uuid.UUID = Field(index=True)
    name: str = Field(default="Default Policy", max_length=255)
    is_active: bool = Field(default=True)
    effective_date: datetime.date = Field(default_factory=datetime.date.today)
    required_days_per_week: int = Field(default=3)
    minimum_minutes_per_day: int = Field(default=0)
    annual_pto_days: int = Field(default=0)
    max_carryover_days: int = Field(default=0)
    leave_year_start_month: int = Field(default=1)
    leave_year_start_day: int = Field(default=1)


class LeaveAllowanceOverride(UUIDBase, TimestampMixin, table=True):
    """Per-employee PTO allowance, either for one year or permanent (no year)."""

    __tablename__ = "leave_allowance_override"
    __table_args__ = (
        sa.UniqueConstraint("org_id", "user_id", "effective_year", name="uq_allowance_override_user_year"),
    )

    org_id: uuid.UUID = Field(index=True)
    user_id: uuid.UUID = Field(index=True)
    annual_pto_days: int
    effective_year: int | None = None
    notes: str | None = Field(default=None, max_length=500)
    updated_at: datetime.datetime = Field(  # type: ignore[call-overload]
        default_factory=_now_utc,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now(), "onupdate": sa.func.now()},
    )
