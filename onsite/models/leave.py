# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field

from onsite.models.base import TimestampMixin, UUIDBase
from onsite.models.enums import LeaveStatus


class LeaveRequest(UUIDBase, TimestampMixin, table=True):
    """One calendar day of leave. Multi-day ranges are stored as one row per day."""

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.UniqueConstraint("user_id", "date", name="uq_leave_user_date"),
        sa.Index("ix_leave_user_type_date", "user_id", "type", "date"),
    )

    user_id: uuid.UUID = Field(index=True)
    org_id: uuid.UUID | None = Field(default=None, index=True)
    type: str = Field(max_length=50)
    date: datetime.date
    end_date: datetime.date | None = None
    notes: str | None = Field(default=None, max_length=500)
    status: str = Field(
        default=LeaveStatus.APPROVED, max_length=50, sa_column_kwargs={"server_default": "APPROVED"}
    )
