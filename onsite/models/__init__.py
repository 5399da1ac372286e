from sqlmodel import SQLModel

from onsite.models.audit import AuditLog
from onsite.models.base import TimestampMixin, UUIDBase
from onsite.models.comp_time import CompTimeEntry, CompTimeUsage
from onsite.models.enums import (
    AuditAction,
    AuditEntityType,
    CompTimeStatus,
    CompTimeType,
    LeaveStatus,
    LeaveType,
)
from onsite.models.leave import LeaveRequest
from onsite.models.policy import LeaveAllowanceOverride, PolicyConfig

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "CompTimeEntry",
    "CompTimeStatus",
    "CompTimeType",
    "CompTimeUsage",
    "LeaveAllowanceOverride",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "PolicyConfig",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
]
