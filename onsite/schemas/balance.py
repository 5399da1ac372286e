# ruff: noqa: TC003
from __future__ import annotations

import datetime

from onsite.schemas.base import CamelModel


class PtoBalanceResponse(CamelModel):
    """PTO position for the leave year containing the reference date (days)."""

    annual_allowance: int
    carryover: int
    used: int
    remaining: int
    leave_year_start: datetime.date
    leave_year_end: datetime.date
    prior_year_start: datetime.date
    prior_year_end: datetime.date
    override_applied: bool
    prorated: bool
