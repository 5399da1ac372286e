# ruff: noqa: TC003
"""Org leave policy and per-employee allowance overrides."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from onsite.exceptions import AppError
from onsite.models.enums import AuditAction, AuditEntityType
from onsite.models.policy import LeaveAllowanceOverride, PolicyConfig
from onsite.schemas.policy import (
    AllowanceOverrideListResponse,
    AllowanceOverrideResponse,
    PolicyResponse,
    SuccessResponse,
)
from onsite.services.audit import model_to_audit_dict, write_audit_log
from onsite.services.employee import get_employee_service

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from onsite.schemas.auth import AuthContext
    from onsite.schemas.policy import AllowanceOverridePayload, UpdatePolicyPayload


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_policy_response(policy: PolicyConfig) -> PolicyResponse:
    return PolicyResponse(
        id=policy.id,
        org_id=policy.org_id,
        name=policy.name,
        is_active=policy.is_active,
        effective_date=policy.effective_date,
        required_days_per_week=policy.required_days_per_week,
        minimum_minutes_per_day=policy.minimum_minutes_per_day,
        annual_pto_days=policy.annual_pto_days,
        max_carryover_days=policy.max_carryover_days,
        leave_year_start_month=policy.leave_year_start_month,
        leave_year_start_day=policy.leave_year_start_day,
    )


def _build_override_response(override: LeaveAllowanceOverride) -> AllowanceOverrideResponse:
    return AllowanceOverrideResponse(
        id=override.id,
        org_id=override.org_id,
        user_id=override.user_id,
        annual_pto_days=override.annual_pto_days,
        effective_year=override.effective_year,
        notes=override.notes,
        created_at=override.created_at,
        updated_at=override.updated_at,
    )


def _require_org(auth: AuthContext) -> uuid.UUID:
    if auth.org_id is None:
        raise AppError("No organization found", status_code=403)
    return auth.org_id


async def get_active_policy(session: AsyncSession, org_id: uuid.UUID) -> PolicyConfig | None:
    """Return the org's newest active policy row, if any."""
    result = await session.execute(
        select(PolicyConfig)
        .where(
            col(PolicyConfig.org_id) == org_id,
            col(PolicyConfig.is_active).is_(True),
        )
        .order_by(col(PolicyConfig.effective_date).desc(), col(PolicyConfig.created_at).desc())
        .limit(1)
    )
    return result.scalars().first()


async def load_allowance_overrides(
    session: AsyncSession,
    org_id: uuid.UUID,
    user_id: uuid.UUID,
) -> list[LeaveAllowanceOverride]:
    """All overrides for a member: year-scoped ones and the permanent one."""
    result = await session.execute(
        select(LeaveAllowanceOverride).where(
            col(LeaveAllowanceOverride.org_id) == org_id,
            col(LeaveAllowanceOverride.user_id) == user_id,
        )
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


async def get_policy(session: AsyncSession, auth: AuthContext) -> PolicyResponse:
    """Return the active policy, or the defaults when the org has none."""
    org_id = _require_org(auth)
    policy = await get_active_policy(session, org_id)
    if policy is None:
        return PolicyResponse(org_id=org_id)
    return _build_policy_response(policy)


async def update_policy(
    session: AsyncSession,
    auth: AuthContext,
    payload: UpdatePolicyPayload,
) -> PolicyResponse:
    """Patch the active policy in place, creating it on first save."""
    org_id = _require_org(auth)
    changes = payload.model_dump(exclude_none=True)
    policy = await get_active_policy(session, org_id)

    if policy is None:
        policy = PolicyConfig(org_id=org_id, **changes)
        session.add(policy)
        await session.flush()
        action = AuditAction.CREATE
        before_dict = None
    else:
        before_dict = model_to_audit_dict(policy)
        for field, value in changes.items():
            setattr(policy, field, value)
        await session.flush()
        action = AuditAction.UPDATE

    await write_audit_log(
        session,
        org_id=org_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.POLICY,
        entity_id=policy.id,
        action=action,
        before_json=before_dict,
        after_json=model_to_audit_dict(policy),
    )

    await session.commit()
    await session.refresh(policy)
    return _build_policy_response(policy)


# ---------------------------------------------------------------------------
# Allowance overrides
# ---------------------------------------------------------------------------


async def list_allowance_overrides(session: AsyncSession, auth: AuthContext) -> AllowanceOverrideListResponse:
    """List every override in the org, newest first."""
    org_id = _require_org(auth)
    base_filter = [col(LeaveAllowanceOverride.org_id) == org_id]

    count_result = await session.execute(
        select(func.count()).select_from(LeaveAllowanceOverride).where(*base_filter)
    )
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveAllowanceOverride).where(*base_filter).order_by(col(LeaveAllowanceOverride.created_at).desc())
    )
    overrides = list(result.scalars().all())
    return AllowanceOverrideListResponse(
        items=[_build_override_response(o) for o in overrides],
        total=total,
    )


async def upsert_allowance_override(
    session: AsyncSession,
    auth: AuthContext,
    payload: AllowanceOverridePayload,
) -> AllowanceOverrideResponse:
    """Create or replace the override keyed on (user, effective year)."""
    org_id = _require_org(auth)

    member = await get_employee_service().get_employee(org_id, payload.user_id)
    if member is None:
        raise AppError("User is not a member of this organization", status_code=400)

    year_filter = (
        col(LeaveAllowanceOverride.effective_year).is_(None)
        if payload.effective_year is None
        else col(LeaveAllowanceOverride.effective_year) == payload.effective_year
    )
    result = await session.execute(
        select(LeaveAllowanceOverride).where(
            col(LeaveAllowanceOverride.org_id) == org_id,
            col(LeaveAllowanceOverride.user_id) == payload.user_id,
            year_filter,
        )
    )
    override = result.scalar_one_or_none()

    if override is None:
        override = LeaveAllowanceOverride(
            org_id=org_id,
            user_id=payload.user_id,
            annual_pto_days=payload.annual_pto_days,
            effective_year=payload.effective_year,
            notes=payload.notes,
        )
        session.add(override)
        action = AuditAction.CREATE
        before_dict = None
    else:
        before_dict = model_to_audit_dict(override)
        override.annual_pto_days = payload.annual_pto_days
        override.notes = payload.notes
        override.updated_at = datetime.now(UTC)
        action = AuditAction.UPDATE

    await session.flush()

    await write_audit_log(
        session,
        org_id=org_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.ALLOWANCE_OVERRIDE,
        entity_id=override.id,
        action=action,
        before_json=before_dict,
        after_json=model_to_audit_dict(override),
    )

    await session.commit()
    await session.refresh(override)
    return _build_override_response(override)


async def delete_allowance_override(
    session: AsyncSession,
    auth: AuthContext,
    override_id: uuid.UUID,
) -> SuccessResponse:
    """Remove an override; the member falls back to the next applicable allowance."""
    org_id = _require_org(auth)
    result = await session.execute(
        select(LeaveAllowanceOverride).where(
            col(LeaveAllowanceOverride.id) == override_id,
            col(LeaveAllowanceOverride.org_id) == org_id,
        )
    )
    override = result.scalar_one_or_none()
    if override is None:
        raise AppError("Override not found", status_code=404)

    await write_audit_log(
        session,
        org_id=org_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.ALLOWANCE_OVERRIDE,
        entity_id=override.id,
        action=AuditAction.DELETE,
        before_json=model_to_audit_dict(override),
    )

    await session.delete(override)
    await session.commit()
    return SuccessResponse()
