"""PTO balance calculator.

Balances are derived, never stored: the allowance for the leave year that
contains the reference date, plus capped carryover from the prior leave year,
minus the PTO days already recorded inside the current window.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from onsite.exceptions import AppError
from onsite.models.enums import LeaveStatus, LeaveType
from onsite.models.leave import LeaveRequest
from onsite.schemas.balance import PtoBalanceResponse
from onsite.services.employee import get_employee_service
from onsite.services.policy import get_active_policy, load_allowance_overrides

if TYPE_CHECKING:
    import uuid
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from onsite.models.policy import LeaveAllowanceOverride
    from onsite.schemas.auth import AuthContext


@dataclass(frozen=True)
class LeaveYear:
    """Inclusive date window of one leave year."""

    start: date
    end: date

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def length_days(self) -> int:
        return (self.end - self.start).days + 1


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def _anchor(year: int, month: int, day: int) -> date:
    """Leave-year start in a given calendar year, clamping day 29-31 to the month's end."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def leave_year_containing(reference: date, start_month: int = 1, start_day: int = 1) -> LeaveYear:
    """Return the leave year that contains ``reference``."""
    start = _anchor(reference.year, start_month, start_day)
    if reference < start:
        start = _anchor(reference.year - 1, start_month, start_day)
    next_start = _anchor(start.year + 1, start_month, start_day)
    return LeaveYear(start=start, end=next_start - timedelta(days=1))


def previous_leave_year(current: LeaveYear, start_month: int = 1, start_day: int = 1) -> LeaveYear:
    """Return the leave year immediately before ``current``."""
    start = _anchor(current.start.year - 1, start_month, start_day)
    return LeaveYear(start=start, end=current.start - timedelta(days=1))


def resolve_allowance(
    overrides: Sequence[LeaveAllowanceOverride],
    year: int,
    default_days: int,
) -> tuple[int, bool]:
    """Pick the allowance for ``year``: year-scoped override, then permanent, then org default.

    Returns (days, override_applied).
    """
    year_specific = next((o for o in overrides if o.effective_year == year), None)
    if year_specific is not None:
        return year_specific.annual_pto_days, True
    permanent = next((o for o in overrides if o.effective_year is None), None)
    if permanent is not None:
        return permanent.annual_pto_days, True
    return default_days, False


def prorate_allowance(allowance: int, window: LeaveYear, hire_date: date | None) -> tuple[int, bool]:
    """Scale the allowance for someone hired part-way through the leave year.

    The fraction is days remaining from the hire date over the window length,
    floored to whole days. Returns (days, prorated).
    """
    if hire_date is None or hire_date <= window.start or hire_date not in window:
        return allowance, False
    remaining_days = (window.end - hire_date).days + 1
    return allowance * remaining_days // window.length_days, True


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def _count_pto_days(session: AsyncSession, user_id: uuid.UUID, window: LeaveYear) -> int:
    result = await session.execute(
        select(func.count())
        .select_from(LeaveRequest)
        .where(
            col(LeaveRequest.user_id) == user_id,
            col(LeaveRequest.type) == LeaveType.PTO.value,
            col(LeaveRequest.status) == LeaveStatus.APPROVED.value,
            col(LeaveRequest.date) >= window.start,
            col(LeaveRequest.date) <= window.end,
        )
    )
    return int(result.scalar_one())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def calculate_pto_balance(
    session: AsyncSession,
    user_id: uuid.UUID,
    org_id: uuid.UUID,
    reference_date: date | None = None,
) -> PtoBalanceResponse:
    """Compute the PTO balance for a member in the leave year containing ``reference_date``.

    An org without a policy row gets a zero allowance and a calendar leave
    year. Database errors propagate; the caller decides whether they block.
    """
    reference = reference_date or date.today()

    policy = await get_active_policy(session, org_id)
    default_days = policy.annual_pto_days if policy is not None else 0
    max_carryover = policy.max_carryover_days if policy is not None else 0
    start_month = policy.leave_year_start_month if policy is not None else 1
    start_day = policy.leave_year_start_day if policy is not None else 1

    current = leave_year_containing(reference, start_month, start_day)
    prior = previous_leave_year(current, start_month, start_day)

    overrides = await load_allowance_overrides(session, org_id, user_id)
    allowance, override_applied = resolve_allowance(overrides, current.start.year, default_days)

    member = await get_employee_service().get_employee(org_id, user_id)
    hire_date = member.hire_date if member is not None else None
    allowance, prorated = prorate_allowance(allowance, current, hire_date)

    used = await _count_pto_days(session, user_id, current)

    carryover = 0
    if max_carryover > 0 and (hire_date is None or hire_date <= prior.end):
        prior_allowance, _ = resolve_allowance(overrides, prior.start.year, default_days)
        prior_allowance, _ = prorate_allowance(prior_allowance, prior, hire_date)
        prior_used = await _count_pto_days(session, user_id, prior)
        carryover = min(max(0, prior_allowance - prior_used), max_carryover)

    return PtoBalanceResponse(
        annual_allowance=allowance,
        carryover=carryover,
        used=used,
        remaining=max(0, allowance + carryover - used),
        leave_year_start=current.start,
        leave_year_end=current.end,
        prior_year_start=prior.start,
        prior_year_end=prior.end,
        override_applied=override_applied,
        prorated=prorated,
    )


async def get_pto_balance(
    session: AsyncSession,
    auth: AuthContext,
    user_id: uuid.UUID | None = None,
) -> PtoBalanceResponse:
    """Balance for the caller, or for another member when the caller is an admin."""
    if auth.org_id is None:
        raise AppError("No organization found", status_code=403)
    target = user_id or auth.user_id
    if target != auth.user_id and not auth.is_admin:
        raise AppError("Admin access required", status_code=403)
    return await calculate_pto_balance(session, target, auth.org_id)
