from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from onsite.db import get_session
from onsite.main import app

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


async def test_health_reports_ok(async_client: AsyncClient) -> None:
    response = await async_client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data == {
        "status": "ok",
        "service": "OnSite Leave",
        "version": "0.1.0",
        "environment": "development",
        "ledger": "reachable",
    }


async def test_health_degraded_on_db_failure() -> None:
    """GET /health returns degraded status when the database is unreachable."""
    mock_session = AsyncMock(spec=AsyncSession)
    mock_session.execute.side_effect = ConnectionError("DB unreachable")

    async def _broken_session() -> AsyncIterator[AsyncSession]:
        yield mock_session

    app.dependency_overrides[get_session] = _broken_session
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["ledger"] == "unreachable"
    finally:
        app.dependency_overrides.clear()


async def test_unknown_route_is_404(async_client: AsyncClient) -> None:
    response = await async_client.get("/api/nope")
    assert response.status_code == 404


async def test_cors_preflight_allows_identity_headers(async_client: AsyncClient) -> None:
    response = await async_client.options(
        "/api/leave",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "X-User-Id, X-Org-Id",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert "x-user-id" in response.headers["access-control-allow-headers"].lower()


async def test_cors_rejects_unknown_origin(async_client: AsyncClient) -> None:
    response = await async_client.options(
        "/api/leave",
        headers={"Origin": "https://evil.example", "Access-Control-Request-Method": "POST"},
    )
    assert response.status_code == 400
