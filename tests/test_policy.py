"""Tests for org leave policy and per-employee allowance override endpoints."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import pytest

from onsite.services.employee import EmployeeInfo, InMemoryEmployeeService, set_employee_service

if TYPE_CHECKING:
    from collections.abc import Iterator

    from httpx import AsyncClient

ORG_ID = uuid.uuid4()
ADMIN_ID = uuid.uuid4()
MEMBER_ID = uuid.uuid4()

ADMIN_HEADERS = {"X-User-Id": str(ADMIN_ID), "X-Org-Id": str(ORG_ID), "X-Role": "admin"}
EMPLOYEE_HEADERS = {"X-User-Id": str(MEMBER_ID), "X-Org-Id": str(ORG_ID)}

POLICY_URL = "/api/org/policy"
ALLOWANCES_URL = "/api/org/leave-allowances"


@pytest.fixture(autouse=True)
def _seed_members() -> Iterator[None]:
    service = InMemoryEmployeeService()
    service.seed(EmployeeInfo(id=MEMBER_ID, org_id=ORG_ID, name="Sam Lee", email="sam@example.com"))
    set_employee_service(service)
    yield
    set_employee_service(InMemoryEmployeeService())


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


async def test_get_policy_defaults_when_unset(async_client: AsyncClient) -> None:
    resp = await async_client.get(POLICY_URL, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] is None
    assert data["orgId"] == str(ORG_ID)
    assert data["annualPtoDays"] == 0
    assert data["maxCarryoverDays"] == 0
    assert data["leaveYearStartMonth"] == 1
    assert data["leaveYearStartDay"] == 1


async def test_admin_creates_policy_on_first_update(async_client: AsyncClient) -> None:
    resp = await async_client.patch(
        POLICY_URL, json={"annualPtoDays": 20, "maxCarryoverDays": 5}, headers=ADMIN_HEADERS
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] is not None
    assert data["annualPtoDays"] == 20
    assert data["maxCarryoverDays"] == 5

    get_resp = await async_client.get(POLICY_URL, headers=EMPLOYEE_HEADERS)
    assert get_resp.json()["id"] == data["id"]


async def test_update_keeps_omitted_fields(async_client: AsyncClient) -> None:
    first = await async_client.patch(POLICY_URL, json={"annualPtoDays": 20}, headers=ADMIN_HEADERS)
    second = await async_client.patch(POLICY_URL, json={"leaveYearStartMonth": 4}, headers=ADMIN_HEADERS)

    assert second.json()["id"] == first.json()["id"]
    assert second.json()["annualPtoDays"] == 20
    assert second.json()["leaveYearStartMonth"] == 4


async def test_update_rejects_out_of_range_values(async_client: AsyncClient) -> None:
    resp = await async_client.patch(POLICY_URL, json={"leaveYearStartMonth": 13}, headers=ADMIN_HEADERS)
    assert resp.status_code == 400


async def test_employee_cannot_update_policy(async_client: AsyncClient) -> None:
    resp = await async_client.patch(POLICY_URL, json={"annualPtoDays": 20}, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Admin access required"


async def test_policy_requires_org(async_client: AsyncClient) -> None:
    resp = await async_client.get(POLICY_URL, headers={"X-User-Id": str(MEMBER_ID)})
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Allowance overrides
# ---------------------------------------------------------------------------


async def test_override_requires_membership(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        ALLOWANCES_URL, json={"userId": str(uuid.uuid4()), "annualPtoDays": 25}, headers=ADMIN_HEADERS
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "User is not a member of this organization"


async def test_override_upsert_replaces_same_year(async_client: AsyncClient) -> None:
    first = await async_client.post(
        ALLOWANCES_URL,
        json={"userId": str(MEMBER_ID), "annualPtoDays": 25, "effectiveYear": 2025},
        headers=ADMIN_HEADERS,
    )
    second = await async_client.post(
        ALLOWANCES_URL,
        json={"userId": str(MEMBER_ID), "annualPtoDays": 30, "effectiveYear": 2025, "notes": "tenure"},
        headers=ADMIN_HEADERS,
    )
    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["annualPtoDays"] == 30
    assert second.json()["notes"] == "tenure"


async def test_permanent_and_year_overrides_coexist(async_client: AsyncClient) -> None:
    await async_client.post(
        ALLOWANCES_URL, json={"userId": str(MEMBER_ID), "annualPtoDays": 22}, headers=ADMIN_HEADERS
    )
    await async_client.post(
        ALLOWANCES_URL,
        json={"userId": str(MEMBER_ID), "annualPtoDays": 25, "effectiveYear": 2025},
        headers=ADMIN_HEADERS,
    )
    await async_client.post(
        ALLOWANCES_URL, json={"userId": str(MEMBER_ID), "annualPtoDays": 24}, headers=ADMIN_HEADERS
    )

    resp = await async_client.get(ALLOWANCES_URL, headers=ADMIN_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    by_year = {item["effectiveYear"]: item["annualPtoDays"] for item in data["items"]}
    assert by_year == {None: 24, 2025: 25}


async def test_delete_override(async_client: AsyncClient) -> None:
    created = await async_client.post(
        ALLOWANCES_URL, json={"userId": str(MEMBER_ID), "annualPtoDays": 22}, headers=ADMIN_HEADERS
    )
    override_id = created.json()["id"]

    resp = await async_client.delete(ALLOWANCES_URL, params={"id": override_id}, headers=ADMIN_HEADERS)
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    again = await async_client.delete(ALLOWANCES_URL, params={"id": override_id}, headers=ADMIN_HEADERS)
    assert again.status_code == 404
    assert again.json()["detail"] == "Override not found"


async def test_override_applies_to_member_balance(async_client: AsyncClient) -> None:
    await async_client.patch(POLICY_URL, json={"annualPtoDays": 15}, headers=ADMIN_HEADERS)
    await async_client.post(
        ALLOWANCES_URL, json={"userId": str(MEMBER_ID), "annualPtoDays": 21}, headers=ADMIN_HEADERS
    )

    resp = await async_client.get("/api/leave/balance", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["annualAllowance"] == 21
    assert resp.json()["overrideApplied"] is True


async def test_employee_cannot_manage_overrides(async_client: AsyncClient) -> None:
    list_resp = await async_client.get(ALLOWANCES_URL, headers=EMPLOYEE_HEADERS)
    post_resp = await async_client.post(
        ALLOWANCES_URL, json={"userId": str(MEMBER_ID), "annualPtoDays": 99}, headers=EMPLOYEE_HEADERS
    )
    assert list_resp.status_code == 403
    assert post_resp.status_code == 403
