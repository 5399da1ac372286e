# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field

from onsite.models.base import TimestampMixin, UUIDBase
from onsite.models.enums import CompTimeStatus


class CompTimeEntry(UUIDBase, TimestampMixin, table=True):
    """A single comp-time earn event, drawn down oldest-expiry first."""

    __tablename__ = "comp_time_entry"
    __table_args__ = (
        sa.Index("ix_comp_time_user_status_expiry", "user_id", "status", "expires_at"),
        sa.CheckConstraint("minutes_used <= minutes_earned", name="ck_comp_time_used_le_earned"),
    )

    user_id: uuid.UUID = Field(index=True)
    org_id: uuid.UUID | None = Field(default=None, index=True)
    type: str = Field(max_length=50)
    source_id: uuid.UUID | None = Field(default=None, index=True)
    source_date: datetime.date
    minutes_earned: int
    minutes_used: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    status: str = Field(
        default=CompTimeStatus.AVAILABLE, max_length=50, sa_column_kwargs={"server_default": "AVAILABLE"}
    )
    expires_at: datetime.datetime = Field(sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    description: str | None = Field(default=None, max_length=500)


class CompTimeUsage(UUIDBase, TimestampMixin, table=True):
    """Links minutes drawn from an entry to the leave request they paid for."""

    __tablename__ = "comp_time_usage"
    __table_args__ = (
        sa.UniqueConstraint("comp_time_entry_id", "leave_request_id", name="uq_comp_time_usage_entry_leave"),
    )

    comp_time_entry_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("comp_time_entry.id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    # No FK: usage survives deletion of the leave day it paid for.
    leave_request_id: uuid.UUID = Field(index=True)
    minutes_used: int
