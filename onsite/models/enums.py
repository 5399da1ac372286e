from __future__ import annotations

import enum


class LeaveType(enum.StrEnum):
    """Kind of leave recorded for a day."""

    PTO = "PTO"
    SICK = "SICK"
    HOLIDAY = "HOLIDAY"
    PERSONAL = "PERSONAL"
    BEREAVEMENT = "BEREAVEMENT"
    JURY_DUTY = "JURY_DUTY"
    UNPAID = "UNPAID"
    OTHER = "OTHER"
    COMP = "COMP"  # paid from the comp-time ledger
    TRAVEL = "TRAVEL"  # weekend travel days earn comp time


class LeaveStatus(enum.StrEnum):
    """Status of a leave day. Leave is recorded as approved on creation."""

    APPROVED = "APPROVED"


class CompTimeType(enum.StrEnum):
    """Origin of a comp-time earn event."""

    TRAVEL = "TRAVEL"
    MANUAL = "MANUAL"


class CompTimeStatus(enum.StrEnum):
    """Consumption state of a comp-time entry.

    Derived from minutes_used vs minutes_earned and only moves forward.
    Expiry is not a status: entries past expires_at are filtered at read time.
    """

    AVAILABLE = "AVAILABLE"
    PARTIALLY_USED = "PARTIALLY_USED"
    FULLY_USED = "FULLY_USED"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    LEAVE_REQUEST = "LEAVE_REQUEST"
    COMP_TIME_ENTRY = "COMP_TIME_ENTRY"
    POLICY = "POLICY"
    ALLOWANCE_OVERRIDE = "ALLOWANCE_OVERRIDE"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    GRANT = "GRANT"
    DEDUCT = "DEDUCT"
