# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query, status

from onsite.api.deps import AuthDep, OrgDep
from onsite.db import SessionDep
from onsite.schemas.balance import PtoBalanceResponse
from onsite.schemas.leave import (
    CreateLeavePayload,
    CreateLeaveResponse,
    DeleteLeaveResponse,
    LeaveListResponse,
)
from onsite.services import balance as balance_service
from onsite.services import leave as leave_service

leave_router = APIRouter(
    prefix="/api/leave",
    tags=["leave"],
)


@leave_router.get("", response_model=LeaveListResponse)
async def list_leaves(
    session: SessionDep,
    auth: AuthDep,
    month: str | None = Query(default=None, pattern=r"^\d{4}-\d{2}$"),
    year: int | None = Query(default=None, ge=1900, le=2999),
) -> LeaveListResponse:
    """List the caller's leave days for a month or year."""
    return await leave_service.list_leaves(session, auth, month, year)


@leave_router.post("", response_model=CreateLeaveResponse, status_code=status.HTTP_201_CREATED)
async def create_leave(
    payload: CreateLeavePayload,
    session: SessionDep,
    auth: AuthDep,
) -> CreateLeaveResponse:
    """Record leave for a day or an inclusive date range."""
    return await leave_service.create_leave(session, auth, payload)


@leave_router.delete("", response_model=DeleteLeaveResponse)
async def delete_leave(
    session: SessionDep,
    auth: AuthDep,
    leave_id: uuid.UUID | None = Query(default=None, alias="id"),
    day: date | None = Query(default=None, alias="date"),
) -> DeleteLeaveResponse:
    """Delete one of the caller's leave days by id or by date."""
    return await leave_service.delete_leave(session, auth, leave_id, day)


@leave_router.get("/balance", response_model=PtoBalanceResponse)
async def get_pto_balance(
    session: SessionDep,
    auth: OrgDep,
    user_id: uuid.UUID | None = Query(default=None, alias="userId"),
) -> PtoBalanceResponse:
    """PTO balance for the caller, or for another member (admin only)."""
    return await balance_service.get_pto_balance(session, auth, user_id)
