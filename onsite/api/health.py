"""Liveness plus a read against the leave ledger."""

import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col

from onsite.config import get_settings
from onsite.db import SessionDep
from onsite.models.leave import LeaveRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"]
    service: str
    version: str
    environment: str
    ledger: Literal["reachable", "unreachable"]


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Report the service and whether the leave ledger can be read.

    A failed read degrades the status; the endpoint still answers 200.
    """
    settings = get_settings()
    ledger: Literal["reachable", "unreachable"] = "reachable"

    try:
        await session.execute(select(col(LeaveRequest.id)).limit(1))
    except (SQLAlchemyError, OSError):
        logger.exception("Health check: leave ledger read failed")
        ledger = "unreachable"

    return HealthResponse(
        status="ok" if ledger == "reachable" else "degraded",
        service=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        ledger=ledger,
    )
