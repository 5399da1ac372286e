# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query

from onsite.api.deps import AdminDep, OrgDep
from onsite.db import SessionDep
from onsite.schemas.policy import (
    AllowanceOverrideListResponse,
    AllowanceOverridePayload,
    AllowanceOverrideResponse,
    PolicyResponse,
    SuccessResponse,
    UpdatePolicyPayload,
)
from onsite.services import policy as policy_service

policy_router = APIRouter(
    prefix="/api/org/policy",
    tags=["policy"],
)

allowance_router = APIRouter(
    prefix="/api/org/leave-allowances",
    tags=["policy"],
)


@policy_router.get("", response_model=PolicyResponse)
async def get_policy(
    session: SessionDep,
    auth: OrgDep,
) -> PolicyResponse:
    """Get the org's active leave policy."""
    return await policy_service.get_policy(session, auth)


@policy_router.patch("", response_model=PolicyResponse)
async def update_policy(
    payload: UpdatePolicyPayload,
    session: SessionDep,
    auth: AdminDep,
) -> PolicyResponse:
    """Update the org's leave policy (admin only)."""
    return await policy_service.update_policy(session, auth, payload)


@allowance_router.get("", response_model=AllowanceOverrideListResponse)
async def list_allowance_overrides(
    session: SessionDep,
    auth: AdminDep,
) -> AllowanceOverrideListResponse:
    """List per-employee allowance overrides (admin only)."""
    return await policy_service.list_allowance_overrides(session, auth)


@allowance_router.post("", response_model=AllowanceOverrideResponse)
async def upsert_allowance_override(
    payload: AllowanceOverridePayload,
    session: SessionDep,
    auth: AdminDep,
) -> AllowanceOverrideResponse:
    """Create or replace an employee's allowance override (admin only)."""
    return await policy_service.upsert_allowance_override(session, auth, payload)


@allowance_router.delete("", response_model=SuccessResponse)
async def delete_allowance_override(
    session: SessionDep,
    auth: AdminDep,
    override_id: uuid.UUID = Query(alias="id"),
) -> SuccessResponse:
    """Remove an allowance override (admin only)."""
    return await policy_service.delete_allowance_override(session, auth, override_id)
