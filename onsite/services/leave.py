# ruff: noqa: TC003
from __future__ import annotations

import calendar
import logging
import uuid
from collections import Counter
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import col

from onsite.config import get_settings
from onsite.db import supports_advisory_locks
from onsite.exceptions import (
    AppError,
    EmployeeDirectoryError,
    InsufficientBalanceError,
    InsufficientCompTimeError,
)
from onsite.models.enums import AuditAction, AuditEntityType, LeaveStatus, LeaveType
from onsite.models.leave import LeaveRequest
from onsite.schemas.leave import (
    CreateLeaveResponse,
    DeleteLeaveResponse,
    LeaveListResponse,
    LeaveResponse,
    LeaveSummary,
)
from onsite.services.audit import model_to_audit_dict, write_audit_log
from onsite.services.balance import calculate_pto_balance
from onsite.services.comp_time import deduct_comp_time, get_comp_time_balance, grant_travel_comp_time

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from onsite.schemas.auth import AuthContext
    from onsite.schemas.balance import PtoBalanceResponse
    from onsite.schemas.leave import CreateLeavePayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def expand_days(start: date, end: date) -> list[date]:
    """Every calendar day from start to end, inclusive."""
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def month_bounds(month: str) -> tuple[date, date]:
    """First and last day of a ``YYYY-MM`` month."""
    try:
        year_str, month_str = month.split("-")
        year, month_num = int(year_str), int(month_str)
        last_day = calendar.monthrange(year, month_num)[1]
        return date(year, month_num, 1), date(year, month_num, last_day)
    except ValueError:
        raise AppError("month must be YYYY-MM", status_code=400) from None


def summarize(leaves: Sequence[LeaveRequest]) -> LeaveSummary:
    """Count days per leave type."""
    by_type = Counter(leave.type for leave in leaves)
    return LeaveSummary(total_days=len(leaves), by_type=dict(by_type))


def _build_leave_response(leave: LeaveRequest) -> LeaveResponse:
    """Map a leave model to its response schema."""
    return LeaveResponse(
        id=leave.id,
        user_id=leave.user_id,
        org_id=leave.org_id,
        type=LeaveType(leave.type),
        date=leave.date,
        end_date=leave.end_date,
        notes=leave.notes,
        status=LeaveStatus(leave.status),
        created_at=leave.created_at,
    )


def _advisory_lock_key(user_id: uuid.UUID) -> int:
    return int.from_bytes(user_id.bytes[:8], "big", signed=True)


async def _lock_user_leave(session: AsyncSession, user_id: uuid.UUID) -> None:
    """Serialize leave writes per user until the transaction ends.

    Without advisory locks the (user_id, date) unique constraint is the only guard.
    """
    if supports_advisory_locks(session):
        await session.execute(select(func.pg_advisory_xact_lock(_advisory_lock_key(user_id))))


async def _try_pto_balance(session: AsyncSession, auth: AuthContext) -> PtoBalanceResponse | None:
    """Run the balance calculator in a savepoint.

    A database or employee-directory failure yields None and the PTO check is skipped.
    """
    if auth.org_id is None:
        return None
    try:
        async with session.begin_nested():
            return await calculate_pto_balance(session, auth.user_id, auth.org_id)
    except (SQLAlchemyError, EmployeeDirectoryError):
        logger.warning("PTO balance calculation failed for user %s; skipping check", auth.user_id, exc_info=True)
        return None


async def _check_pto_balance(session: AsyncSession, auth: AuthContext, days_requested: int) -> None:
    balance = await _try_pto_balance(session, auth)
    if balance is None or balance.annual_allowance <= 0:
        return
    if days_requested > balance.remaining:
        shortfall = days_requested - balance.remaining
        raise InsufficientBalanceError(
            f"Insufficient PTO balance: {balance.remaining} day(s) remaining, "
            f"{days_requested} requested ({shortfall} short)"
        )


async def _check_comp_time_balance(session: AsyncSession, auth: AuthContext, minutes_needed: int) -> None:
    available = await get_comp_time_balance(session, auth.user_id)
    if available < minutes_needed:
        raise InsufficientCompTimeError(
            f"Insufficient comp time: {available // 60}h available, {minutes_needed // 60}h needed"
        )


async def _upsert_leave_days(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateLeavePayload,
    days: Sequence[date],
) -> list[LeaveRequest]:
    """Write one row per day keyed on (user_id, date); later writes overwrite."""
    result = await session.execute(
        select(LeaveRequest).where(
            col(LeaveRequest.user_id) == auth.user_id,
            col(LeaveRequest.date).in_(list(days)),
        )
    )
    existing = {leave.date: leave for leave in result.scalars().all()}

    written: list[tuple[LeaveRequest, dict[str, Any] | None]] = []
    for day in days:
        leave = existing.get(day)
        before_dict = model_to_audit_dict(leave) if leave is not None else None
        if leave is None:
            leave = LeaveRequest(user_id=auth.user_id, date=day, type=payload.type.value)
            session.add(leave)
        leave.org_id = auth.org_id
        leave.type = payload.type.value
        leave.end_date = payload.end_date
        leave.notes = payload.notes
        leave.status = LeaveStatus.APPROVED.value
        written.append((leave, before_dict))

    await session.flush()

    for leave, before_dict in written:
        await write_audit_log(
            session,
            org_id=auth.org_id,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.LEAVE_REQUEST,
            entity_id=leave.id,
            action=AuditAction.CREATE if before_dict is None else AuditAction.UPDATE,
            before_json=before_dict,
            after_json=model_to_audit_dict(leave),
        )

    return [leave for leave, _ in written]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def list_leaves(
    session: AsyncSession,
    auth: AuthContext,
    month: str | None = None,
    year: int | None = None,
) -> LeaveListResponse:
    """List the caller's leave days for a month (preferred) or calendar year.

    With ``year`` the current PTO balance is attached when it can be computed.
    """
    query = select(LeaveRequest).where(col(LeaveRequest.user_id) == auth.user_id)

    if month is not None:
        start, end = month_bounds(month)
        query = query.where(col(LeaveRequest.date) >= start, col(LeaveRequest.date) <= end)
    elif year is not None:
        query = query.where(
            col(LeaveRequest.date) >= date(year, 1, 1),
            col(LeaveRequest.date) <= date(year, 12, 31),
        )

    result = await session.execute(query.order_by(col(LeaveRequest.date)))
    leaves = list(result.scalars().all())

    balance = await _try_pto_balance(session, auth) if year is not None else None

    return LeaveListResponse(
        leaves=[_build_leave_response(leave) for leave in leaves],
        summary=summarize(leaves),
        balance=balance,
    )


async def create_leave(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateLeavePayload,
) -> CreateLeaveResponse:
    """Record leave for every day in the payload's range.

    Flow, in one transaction:
    1. Expand the range into days
    2. Lock the user's leave writes
    3. PTO: check remaining allowance (fails open on read errors)
    4. COMP: check comp-time balance
    5. Upsert one row per day
    6. COMP: deduct comp time against the rows
    7. TRAVEL: grant comp time for weekend days
    8. Commit
    """
    settings = get_settings()
    days = expand_days(payload.date, payload.end_date or payload.date)
    minutes_needed = len(days) * settings.comp_day_minutes

    await _lock_user_leave(session, auth.user_id)

    if payload.type == LeaveType.PTO:
        await _check_pto_balance(session, auth, len(days))
    elif payload.type == LeaveType.COMP:
        await _check_comp_time_balance(session, auth, minutes_needed)

    try:
        leaves = await _upsert_leave_days(session, auth, payload, days)
    except IntegrityError:
        await session.rollback()
        raise AppError("Leave was changed by another request; please retry", status_code=409) from None

    comp_time_granted = 0
    if payload.type == LeaveType.COMP and leaves:
        await deduct_comp_time(session, auth, minutes_needed, [leave.id for leave in leaves])
    elif payload.type == LeaveType.TRAVEL and leaves:
        comp_time_granted = len(await grant_travel_comp_time(session, auth, leaves))

    await session.commit()

    logger.info("Recorded %d %s day(s) for user %s", len(leaves), payload.type.value, auth.user_id)
    return CreateLeaveResponse(
        leaves=[_build_leave_response(leave) for leave in leaves],
        comp_time_granted=comp_time_granted,
    )


async def delete_leave(
    session: AsyncSession,
    auth: AuthContext,
    leave_id: uuid.UUID | None = None,
    day: date | None = None,
) -> DeleteLeaveResponse:
    """Delete the caller's leave by id or by date.

    Comp time spent on a deleted COMP day is not refunded; its usage rows stay.
    """
    if leave_id is None and day is None:
        raise AppError("Date or ID required", status_code=400)

    query = select(LeaveRequest).where(col(LeaveRequest.user_id) == auth.user_id)
    if leave_id is not None:
        query = query.where(col(LeaveRequest.id) == leave_id)
    else:
        query = query.where(col(LeaveRequest.date) == day)

    result = await session.execute(query)
    leaves = list(result.scalars().all())

    for leave in leaves:
        await write_audit_log(
            session,
            org_id=leave.org_id,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.LEAVE_REQUEST,
            entity_id=leave.id,
            action=AuditAction.DELETE,
            before_json=model_to_audit_dict(leave),
        )
        await session.delete(leave)

    await session.commit()

    if leaves:
        logger.info("Deleted %d leave day(s) for user %s", len(leaves), auth.user_id)
    return DeleteLeaveResponse()
