# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

from fastapi import APIRouter, status

from onsite.api.deps import AdminDep, OrgDep
from onsite.db import SessionDep
from onsite.schemas.comp_time import CompTimeEntryResponse, CompTimeListResponse, GrantCompTimePayload
from onsite.services import comp_time as comp_time_service

comp_time_router = APIRouter(
    prefix="/api/comp-time",
    tags=["comp-time"],
)


@comp_time_router.get("", response_model=CompTimeListResponse)
async def list_comp_time(
    session: SessionDep,
    auth: OrgDep,
) -> CompTimeListResponse:
    """The caller's comp-time entries and spendable balance."""
    return await comp_time_service.list_comp_time(session, auth)


@comp_time_router.post("", response_model=CompTimeEntryResponse, status_code=status.HTTP_201_CREATED)
async def grant_comp_time(
    payload: GrantCompTimePayload,
    session: SessionDep,
    auth: AdminDep,
) -> CompTimeEntryResponse:
    """Manually grant comp time to a member (admin only)."""
    return await comp_time_service.grant_manual_comp_time(session, auth, payload)
