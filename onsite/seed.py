"""Seed script for development data.

Run with:  python -m onsite.seed [base_url]
Inside Docker:  docker compose exec api python -m onsite.seed
"""

from __future__ import annotations

import asyncio
import sys
from datetime import date, timedelta

import httpx

BASE_URL = "http://localhost:8000"
ORG_ID = "00000000-0000-0000-0000-000000000001"
ADMIN_USER_ID = "00000000-0000-0000-0000-000000000001"

# Well-known employee UUIDs
ALICE_ID = "00000000-0000-0000-0000-000000000002"
BOB_ID = "00000000-0000-0000-0000-000000000003"

ADMIN_HEADERS = {
    "Content-Type": "application/json",
    "X-Org-Id": ORG_ID,
    "X-User-Id": ADMIN_USER_ID,
    "X-Role": "admin",
}

MEMBERS = [
    {"id": ALICE_ID, "name": "Alice Johnson", "email": "alice.johnson@example.com", "hireDate": "2023-01-15"},
    {"id": BOB_ID, "name": "Bob Smith", "email": "bob.smith@example.com", "hireDate": "2024-06-01"},
]

POLICY = {
    "annualPtoDays": 20,
    "maxCarryoverDays": 5,
    "leaveYearStartMonth": 1,
    "leaveYearStartDay": 1,
    "requiredDaysPerWeek": 3,
}

# Allowance overrides: (employee_id, days, effective_year or None for permanent)
OVERRIDES = [
    (ALICE_ID, 25, None),
]

# Manual grants: (employee_id, minutes, description)
COMP_GRANTS = [
    (ALICE_ID, 480, "Covered Saturday release"),
    (BOB_ID, 240, "Late-night incident response"),
]


def _employee_headers(user_id: str) -> dict[str, str]:
    return {"Content-Type": "application/json", "X-Org-Id": ORG_ID, "X-User-Id": user_id}


def _next_weekday(start: date, weekday: int) -> date:
    """First date on or after start falling on weekday (Mon=0)."""
    return start + timedelta(days=(weekday - start.weekday()) % 7)


async def _send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    json: dict,
    headers: dict[str, str],
    label: str,
) -> dict | None:
    resp = await client.request(method, url, json=json, headers=headers)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def seed_members(client: httpx.AsyncClient) -> None:
    """Register members in the directory via PUT (upsert)."""
    print("\n--- Seeding members ---")
    for member in MEMBERS:
        body = {k: v for k, v in member.items() if k != "id"}
        await _send(client, "PUT", f"/api/org/members/{member['id']}", body, ADMIN_HEADERS, str(member["name"]))


async def seed_policy(client: httpx.AsyncClient) -> dict | None:
    """Create or patch the org leave policy. PATCH is naturally idempotent."""
    print("\n--- Seeding policy ---")
    return await _send(client, "PATCH", "/api/org/policy", POLICY, ADMIN_HEADERS, "Org leave policy")


async def seed_overrides(client: httpx.AsyncClient) -> None:
    """Per-employee allowance overrides. Members must be registered first."""
    print("\n--- Seeding allowance overrides ---")
    for employee_id, days, year in OVERRIDES:
        await _send(
            client,
            "POST",
            "/api/org/leave-allowances",
            {"userId": employee_id, "annualPtoDays": days, "effectiveYear": year},
            ADMIN_HEADERS,
            f"Override {employee_id[:12]}... {days} days",
        )


async def seed_comp_time(client: httpx.AsyncClient) -> None:
    """Grant starting comp time to each employee."""
    print("\n--- Seeding comp time ---")
    for employee_id, minutes, description in COMP_GRANTS:
        await _send(
            client,
            "POST",
            "/api/comp-time",
            {"userId": employee_id, "minutesEarned": minutes, "description": description},
            ADMIN_HEADERS,
            f"Grant {employee_id[:12]}... +{minutes}m",
        )


async def seed_leave(client: httpx.AsyncClient, today: date | None = None) -> None:
    """Record a PTO block, a weekend trip and a comp day.

    Leave days are keyed on (user, date), so re-running overwrites instead of
    duplicating. Travel grants are keyed on the leave day and are not repeated.
    """
    print("\n--- Seeding leave ---")
    today = today or date.today()

    # Alice: PTO Tuesday to Thursday two weeks out
    pto_start = _next_weekday(today + timedelta(days=14), 1)
    await _send(
        client,
        "POST",
        "/api/leave",
        {
            "type": "PTO",
            "date": pto_start.isoformat(),
            "endDate": (pto_start + timedelta(days=2)).isoformat(),
            "notes": "Family vacation",
        },
        _employee_headers(ALICE_ID),
        "Leave: Alice 3-day PTO",
    )

    # Bob: travels Friday through Sunday; the weekend earns two comp days
    trip_start = _next_weekday(today, 4)
    await _send(
        client,
        "POST",
        "/api/leave",
        {
            "type": "TRAVEL",
            "date": trip_start.isoformat(),
            "endDate": (trip_start + timedelta(days=2)).isoformat(),
            "notes": "Customer site visit",
        },
        _employee_headers(BOB_ID),
        "Leave: Bob weekend travel",
    )

    # Bob: spends one earned day the following Monday
    comp_day = trip_start + timedelta(days=3)
    await _send(
        client,
        "POST",
        "/api/leave",
        {"type": "COMP", "date": comp_day.isoformat()},
        _employee_headers(BOB_ID),
        "Leave: Bob comp day",
    )


async def seed(client: httpx.AsyncClient) -> None:
    await seed_members(client)
    await seed_policy(client)
    await seed_overrides(client)
    await seed_comp_time(client)
    await seed_leave(client)


async def main(base_url: str = BASE_URL) -> None:
    """Run all seed steps."""
    print(f"Seeding data against {base_url}")

    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        try:
            resp = await client.get("/health")
            if resp.status_code != 200:
                print(f"API not healthy: {resp.status_code}")
                sys.exit(1)
        except httpx.ConnectError:
            print(f"Cannot connect to API at {base_url}")
            sys.exit(1)

        await seed(client)

    print("\nSeed complete!")


if __name__ == "__main__":
    asyncio.run(main(*sys.argv[1:2]))
