"""Tests for the comp-time ledger: FIFO deduction, lazy expiry, grants, listing."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select
from sqlmodel import col

from onsite.models.comp_time import CompTimeEntry, CompTimeUsage
from onsite.models.enums import CompTimeStatus, CompTimeType, LeaveType
from onsite.models.leave import LeaveRequest
from onsite.schemas.auth import AuthContext
from onsite.services.comp_time import (
    deduct_comp_time,
    derive_status,
    get_comp_time_balance,
    grant_travel_comp_time,
    is_weekend,
    plan_fifo_deduction,
    split_minutes,
)

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

ORG_ID = uuid.uuid4()
USER_ID = uuid.uuid4()
ADMIN_ID = uuid.uuid4()

AUTH = AuthContext(user_id=USER_ID, org_id=ORG_ID)
EMPLOYEE_HEADERS = {"X-User-Id": str(USER_ID), "X-Org-Id": str(ORG_ID)}
ADMIN_HEADERS = {"X-User-Id": str(ADMIN_ID), "X-Org-Id": str(ORG_ID), "X-Role": "admin"}
COMP_TIME_URL = "/api/comp-time"


async def _add_entry(
    session: AsyncSession,
    *,
    minutes_earned: int = 480,
    minutes_used: int = 0,
    expires_in: timedelta = timedelta(days=30),
    status: CompTimeStatus | None = None,
    user_id: uuid.UUID = USER_ID,
) -> CompTimeEntry:
    entry = CompTimeEntry(
        user_id=user_id,
        org_id=ORG_ID,
        type=CompTimeType.MANUAL.value,
        source_date=date.today(),
        minutes_earned=minutes_earned,
        minutes_used=minutes_used,
        status=(status or derive_status(minutes_earned, minutes_used)).value,
        expires_at=datetime.now(UTC) + expires_in,
    )
    session.add(entry)
    await session.flush()
    return entry


async def _usages(session: AsyncSession, entry_id: uuid.UUID) -> list[CompTimeUsage]:
    result = await session.execute(
        select(CompTimeUsage).where(col(CompTimeUsage.comp_time_entry_id) == entry_id)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("earned", "used", "expected"),
    [
        (480, 0, CompTimeStatus.AVAILABLE),
        (480, 1, CompTimeStatus.PARTIALLY_USED),
        (480, 479, CompTimeStatus.PARTIALLY_USED),
        (480, 480, CompTimeStatus.FULLY_USED),
    ],
)
def test_derive_status(earned: int, used: int, expected: CompTimeStatus) -> None:
    assert derive_status(earned, used) == expected


def test_plan_fifo_takes_oldest_first() -> None:
    assert plan_fifo_deduction([240, 480], 300) == [240, 60]


def test_plan_fifo_stops_when_covered() -> None:
    assert plan_fifo_deduction([480, 480, 480], 480) == [480, 0, 0]


def test_plan_fifo_exhausts_when_short() -> None:
    takes = plan_fifo_deduction([100, 50], 480)
    assert takes == [100, 50]
    assert sum(takes) == 150


def test_split_minutes_assigns_remainder_to_first_shares() -> None:
    assert split_minutes(100, 3) == [34, 33, 33]
    assert split_minutes(960, 2) == [480, 480]
    assert split_minutes(2, 3) == [1, 1, 0]


def test_split_minutes_always_sums_to_total() -> None:
    for total in (1, 59, 100, 481):
        for parts in (1, 2, 3, 7):
            assert sum(split_minutes(total, parts)) == total


def test_split_minutes_without_parts() -> None:
    assert split_minutes(100, 0) == []


def test_is_weekend() -> None:
    assert not is_weekend(date(2025, 6, 6))  # Friday
    assert is_weekend(date(2025, 6, 7))
    assert is_weekend(date(2025, 6, 8))
    assert not is_weekend(date(2025, 6, 9))


# ---------------------------------------------------------------------------
# Balance and expiry
# ---------------------------------------------------------------------------


async def test_balance_sums_unused_minutes(db_session: AsyncSession) -> None:
    await _add_entry(db_session, minutes_earned=480)
    await _add_entry(db_session, minutes_earned=480, minutes_used=120)

    assert await get_comp_time_balance(db_session, USER_ID) == 840


async def test_balance_excludes_expired_entries(db_session: AsyncSession) -> None:
    await _add_entry(db_session, minutes_earned=480, expires_in=timedelta(days=-1), status=CompTimeStatus.AVAILABLE)

    assert await get_comp_time_balance(db_session, USER_ID) == 0


async def test_balance_excludes_fully_used_and_other_users(db_session: AsyncSession) -> None:
    await _add_entry(db_session, minutes_earned=480, minutes_used=480)
    await _add_entry(db_session, minutes_earned=480, user_id=uuid.uuid4())

    assert await get_comp_time_balance(db_session, USER_ID) == 0


# ---------------------------------------------------------------------------
# Deduction
# ---------------------------------------------------------------------------


async def test_deduct_consumes_soonest_expiring_first(db_session: AsyncSession) -> None:
    later = await _add_entry(db_session, minutes_earned=480, expires_in=timedelta(days=30))
    sooner = await _add_entry(db_session, minutes_earned=240, expires_in=timedelta(days=5))
    leave_id = uuid.uuid4()

    deducted = await deduct_comp_time(db_session, AUTH, 300, [leave_id])

    assert deducted == 300
    assert sooner.minutes_used == 240
    assert sooner.status == CompTimeStatus.FULLY_USED
    assert later.minutes_used == 60
    assert later.status == CompTimeStatus.PARTIALLY_USED

    sooner_usage = await _usages(db_session, sooner.id)
    later_usage = await _usages(db_session, later.id)
    assert [(u.leave_request_id, u.minutes_used) for u in sooner_usage] == [(leave_id, 240)]
    assert [(u.leave_request_id, u.minutes_used) for u in later_usage] == [(leave_id, 60)]


async def test_deduct_skips_expired_entries(db_session: AsyncSession) -> None:
    expired = await _add_entry(db_session, minutes_earned=480, expires_in=timedelta(days=-1))
    live = await _add_entry(db_session, minutes_earned=480, expires_in=timedelta(days=60))

    deducted = await deduct_comp_time(db_session, AUTH, 240, [uuid.uuid4()])

    assert deducted == 240
    assert expired.minutes_used == 0
    assert live.minutes_used == 240


async def test_deduct_splits_across_leave_requests_without_losing_minutes(db_session: AsyncSession) -> None:
    entry = await _add_entry(db_session, minutes_earned=480)
    leave_ids = [uuid.uuid4(), uuid.uuid4(), uuid.uuid4()]

    await deduct_comp_time(db_session, AUTH, 100, leave_ids)

    usages = {u.leave_request_id: u.minutes_used for u in await _usages(db_session, entry.id)}
    assert usages == {leave_ids[0]: 34, leave_ids[1]: 33, leave_ids[2]: 33}
    assert entry.minutes_used == 100


async def test_deduct_charges_an_entry_once_per_leave_request(db_session: AsyncSession) -> None:
    entry = await _add_entry(db_session, minutes_earned=480)
    leave_id = uuid.uuid4()

    await deduct_comp_time(db_session, AUTH, 60, [leave_id])
    await deduct_comp_time(db_session, AUTH, 60, [leave_id])

    usages = await _usages(db_session, entry.id)
    assert len(usages) == 1
    assert usages[0].minutes_used == 60


async def test_deduct_returns_short_amount_when_balance_insufficient(db_session: AsyncSession) -> None:
    entry = await _add_entry(db_session, minutes_earned=120)

    deducted = await deduct_comp_time(db_session, AUTH, 480, [uuid.uuid4()])

    assert deducted == 120
    assert entry.status == CompTimeStatus.FULLY_USED
    assert entry.minutes_used <= entry.minutes_earned


async def test_deduct_with_no_entries_deducts_nothing(db_session: AsyncSession) -> None:
    assert await deduct_comp_time(db_session, AUTH, 480, [uuid.uuid4()]) == 0


# ---------------------------------------------------------------------------
# Travel grants
# ---------------------------------------------------------------------------


async def _add_travel_days(session: AsyncSession, days: list[date]) -> list[LeaveRequest]:
    leaves = [LeaveRequest(user_id=USER_ID, org_id=ORG_ID, type=LeaveType.TRAVEL.value, date=d) for d in days]
    session.add_all(leaves)
    await session.flush()
    return leaves


async def test_travel_grant_only_for_weekend_days(db_session: AsyncSession) -> None:
    leaves = await _add_travel_days(db_session, [date(2025, 6, 6) + timedelta(days=i) for i in range(4)])
    now = datetime.now(UTC)

    granted = await grant_travel_comp_time(db_session, AUTH, leaves, now=now)

    assert sorted(e.source_date for e in granted) == [date(2025, 6, 7), date(2025, 6, 8)]
    for entry in granted:
        assert entry.type == CompTimeType.TRAVEL
        assert entry.minutes_earned == 480
        assert entry.minutes_used == 0
        assert entry.expires_at == now + timedelta(days=90)


async def test_travel_grant_is_idempotent_per_leave_day(db_session: AsyncSession) -> None:
    leaves = await _add_travel_days(db_session, [date(2025, 6, 14)])

    first = await grant_travel_comp_time(db_session, AUTH, leaves)
    second = await grant_travel_comp_time(db_session, AUTH, leaves)

    assert len(first) == 1
    assert second == []
    result = await db_session.execute(
        select(CompTimeEntry).where(col(CompTimeEntry.source_id) == leaves[0].id)
    )
    assert len(result.scalars().all()) == 1


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


async def test_admin_grants_manual_comp_time(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        COMP_TIME_URL,
        json={"userId": str(USER_ID), "minutesEarned": 240},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["type"] == "MANUAL"
    assert data["minutesEarned"] == 240
    assert data["status"] == "AVAILABLE"
    assert data["description"] == "Manual grant by admin"


async def test_employee_cannot_grant_comp_time(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        COMP_TIME_URL,
        json={"userId": str(USER_ID), "minutesEarned": 240},
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 403


async def test_manual_grant_rejects_non_positive_minutes(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        COMP_TIME_URL,
        json={"userId": str(USER_ID), "minutesEarned": 0},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationError"


async def test_list_comp_time_reports_balance_and_expiring(
    async_client: AsyncClient, db_session: AsyncSession
) -> None:
    await _add_entry(db_session, minutes_earned=480, minutes_used=30, expires_in=timedelta(days=3))
    await _add_entry(db_session, minutes_earned=480, expires_in=timedelta(days=60))
    await _add_entry(db_session, minutes_earned=480, expires_in=timedelta(days=-2))

    resp = await async_client.get(COMP_TIME_URL, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["entries"]) == 3
    assert data["balance"] == {
        "totalMinutes": 930,
        "availableHours": 15,
        "availableRemainingMinutes": 30,
        "expiringMinutes": 450,
        "expiringHours": 7,
        "expiringWithin": 14,
    }


async def test_list_comp_time_requires_org(async_client: AsyncClient) -> None:
    resp = await async_client.get(COMP_TIME_URL, headers={"X-User-Id": str(USER_ID)})
    assert resp.status_code == 403
