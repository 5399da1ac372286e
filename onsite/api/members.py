# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter

from onsite.api.deps import AdminDep, OrgDep
from onsite.exceptions import AppError
from onsite.schemas.auth import AuthContext
from onsite.schemas.member import MemberListResponse, MemberResponse, UpsertMemberPayload
from onsite.services.employee import EmployeeInfo, get_employee_service

members_router = APIRouter(
    prefix="/api/org/members",
    tags=["members"],
)


def _org_id(auth: AuthContext) -> uuid.UUID:
    if auth.org_id is None:
        raise AppError("Organization not found", status_code=403)
    return auth.org_id


def _build_member_response(member: EmployeeInfo) -> MemberResponse:
    return MemberResponse(
        id=member.id,
        org_id=member.org_id,
        name=member.name,
        email=member.email,
        role=member.role,
        hire_date=member.hire_date,
    )


@members_router.put("/{user_id}", response_model=MemberResponse)
async def upsert_member(
    user_id: uuid.UUID,
    payload: UpsertMemberPayload,
    auth: AdminDep,
) -> MemberResponse:
    """Register or update a member of the caller's org in the directory (admin only)."""
    member = EmployeeInfo(
        id=user_id,
        org_id=_org_id(auth),
        name=payload.name,
        email=payload.email,
        role=payload.role,
        hire_date=payload.hire_date,
    )
    get_employee_service().seed(member)  # ty: ignore[unresolved-attribute]
    return _build_member_response(member)


@members_router.get("/{user_id}", response_model=MemberResponse)
async def get_member(
    user_id: uuid.UUID,
    auth: OrgDep,
) -> MemberResponse:
    """Look up one member of the caller's org."""
    member = await get_employee_service().get_employee(_org_id(auth), user_id)
    if member is None:
        raise AppError("Member not found", status_code=404)
    return _build_member_response(member)


@members_router.get("", response_model=MemberListResponse)
async def list_members(
    auth: AdminDep,
) -> MemberListResponse:
    """List every member of the caller's org (admin only)."""
    members = await get_employee_service().list_employees(_org_id(auth))
    items = [_build_member_response(m) for m in members]
    return MemberListResponse(items=items, total=len(items))
