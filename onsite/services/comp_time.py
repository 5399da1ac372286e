"""Comp-time ledger: earn events with expiry, drawn down soonest-expiring first.

Expiry is lazy. An entry past ``expires_at`` keeps its stored status and is
simply left out of every balance and deduction query.
"""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlmodel import col

from onsite.config import get_settings
from onsite.exceptions import AppError
from onsite.models.base import as_utc
from onsite.models.comp_time import CompTimeEntry, CompTimeUsage
from onsite.models.enums import AuditAction, AuditEntityType, CompTimeStatus, CompTimeType
from onsite.schemas.comp_time import (
    CompTimeBalanceSummary,
    CompTimeEntryResponse,
    CompTimeListResponse,
)
from onsite.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from onsite.models.leave import LeaveRequest
    from onsite.schemas.auth import AuthContext
    from onsite.schemas.comp_time import GrantCompTimePayload

logger = logging.getLogger(__name__)

_SPENDABLE_STATUSES = [CompTimeStatus.AVAILABLE.value, CompTimeStatus.PARTIALLY_USED.value]


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def derive_status(minutes_earned: int, minutes_used: int) -> CompTimeStatus:
    """Status implied by how much of an entry has been drawn."""
    if minutes_used >= minutes_earned:
        return CompTimeStatus.FULLY_USED
    if minutes_used > 0:
        return CompTimeStatus.PARTIALLY_USED
    return CompTimeStatus.AVAILABLE


def plan_fifo_deduction(available: Sequence[int], minutes: int) -> list[int]:
    """Minutes to take from each entry, in the given (expiry) order.

    Each entry gives ``min(available, remaining)`` until nothing remains;
    entries after that give 0. The sum is less than ``minutes`` only when the
    entries cannot cover it.
    """
    remaining = max(0, minutes)
    takes: list[int] = []
    for amount in available:
        take = min(max(0, amount), remaining)
        takes.append(take)
        remaining -= take
    return takes


def split_minutes(total: int, parts: int) -> list[int]:
    """Split ``total`` into ``parts`` integer shares that sum to ``total``.

    Every share gets ``total // parts``; the first ``total % parts`` shares
    get one extra minute.
    """
    if parts <= 0:
        return []
    base, extra = divmod(total, parts)
    return [base + 1 if i < extra else base for i in range(parts)]


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def _build_entry_response(entry: CompTimeEntry) -> CompTimeEntryResponse:
    return CompTimeEntryResponse(
        id=entry.id,
        user_id=entry.user_id,
        org_id=entry.org_id,
        type=CompTimeType(entry.type),
        source_id=entry.source_id,
        source_date=entry.source_date,
        minutes_earned=entry.minutes_earned,
        minutes_used=entry.minutes_used,
        status=CompTimeStatus(entry.status),
        expires_at=entry.expires_at,
        description=entry.description,
        created_at=entry.created_at,
    )


async def _spendable_entries(
    session: AsyncSession,
    user_id: uuid.UUID,
    now: datetime,
    *,
    for_update: bool = False,
) -> list[CompTimeEntry]:
    """Unexpired entries with minutes left, soonest-expiring first."""
    query = (
        select(CompTimeEntry)
        .where(
            col(CompTimeEntry.user_id) == user_id,
            col(CompTimeEntry.status).in_(_SPENDABLE_STATUSES),
            col(CompTimeEntry.expires_at) > now,
        )
        .order_by(col(CompTimeEntry.expires_at), col(CompTimeEntry.created_at))
    )
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Balance
# ---------------------------------------------------------------------------


async def get_comp_time_balance(
    session: AsyncSession,
    user_id: uuid.UUID,
    now: datetime | None = None,
) -> int:
    """Total spendable comp-time minutes for a user."""
    now = now or datetime.now(UTC)
    entries = await _spendable_entries(session, user_id, now)
    return sum(e.minutes_earned - e.minutes_used for e in entries)


async def list_comp_time(
    session: AsyncSession,
    auth: AuthContext,
    now: datetime | None = None,
) -> CompTimeListResponse:
    """Every entry for the caller plus the spendable balance and what expires soon."""
    settings = get_settings()
    now = now or datetime.now(UTC)
    window_days = settings.comp_time_expiring_window_days
    expiring_cutoff = now + timedelta(days=window_days)

    result = await session.execute(
        select(CompTimeEntry)
        .where(col(CompTimeEntry.user_id) == auth.user_id)
        .order_by(col(CompTimeEntry.source_date).desc(), col(CompTimeEntry.created_at).desc())
    )
    entries = list(result.scalars().all())

    spendable = [
        e for e in entries if e.status in _SPENDABLE_STATUSES and as_utc(e.expires_at) > now
    ]
    total_minutes = sum(e.minutes_earned - e.minutes_used for e in spendable)
    expiring_minutes = sum(
        e.minutes_earned - e.minutes_used for e in spendable if as_utc(e.expires_at) <= expiring_cutoff
    )

    return CompTimeListResponse(
        entries=[_build_entry_response(e) for e in entries],
        balance=CompTimeBalanceSummary(
            total_minutes=total_minutes,
            available_hours=total_minutes // 60,
            available_remaining_minutes=total_minutes % 60,
            expiring_minutes=expiring_minutes,
            expiring_hours=expiring_minutes // 60,
            expiring_within=window_days,
        ),
    )


# ---------------------------------------------------------------------------
# Deduction
# ---------------------------------------------------------------------------


async def deduct_comp_time(
    session: AsyncSession,
    auth: AuthContext,
    minutes: int,
    leave_request_ids: Sequence[uuid.UUID],
    now: datetime | None = None,
) -> int:
    """Draw ``minutes`` from the user's entries, soonest-expiring first.

    Entries are locked for the rest of the caller's transaction. Each entry's
    draw is recorded as CompTimeUsage rows split across ``leave_request_ids``;
    an (entry, leave request) pair that already has a usage row is skipped.
    Every touched entry gets a DEDUCT audit row. Returns the minutes actually
    deducted, which is short of ``minutes`` only when the balance could not
    cover it.
    """
    user_id = auth.user_id
    now = now or datetime.now(UTC)
    entries = await _spendable_entries(session, user_id, now, for_update=True)
    takes = plan_fifo_deduction([e.minutes_earned - e.minutes_used for e in entries], minutes)

    touched = [(entry, take) for entry, take in zip(entries, takes, strict=True) if take > 0]
    if not touched:
        if minutes > 0:
            logger.warning("No comp time available to deduct %d minutes for user %s", minutes, user_id)
        return 0

    existing_result = await session.execute(
        select(col(CompTimeUsage.comp_time_entry_id), col(CompTimeUsage.leave_request_id)).where(
            col(CompTimeUsage.comp_time_entry_id).in_([entry.id for entry, _ in touched]),
            col(CompTimeUsage.leave_request_id).in_(list(leave_request_ids)),
        )
    )
    already_charged = {(row[0], row[1]) for row in existing_result.all()}

    deducted = 0
    before: dict[uuid.UUID, dict[str, Any]] = {}
    for entry, take in touched:
        before[entry.id] = model_to_audit_dict(entry)
        entry.minutes_used += take
        entry.status = derive_status(entry.minutes_earned, entry.minutes_used).value
        deducted += take

        for leave_request_id, share in zip(
            leave_request_ids, split_minutes(take, len(leave_request_ids)), strict=True
        ):
            if share <= 0 or (entry.id, leave_request_id) in already_charged:
                continue
            session.add(
                CompTimeUsage(
                    comp_time_entry_id=entry.id,
                    leave_request_id=leave_request_id,
                    minutes_used=share,
                )
            )

    await session.flush()

    for entry, _ in touched:
        await write_audit_log(
            session,
            org_id=entry.org_id,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.COMP_TIME_ENTRY,
            entity_id=entry.id,
            action=AuditAction.DEDUCT,
            before_json=before[entry.id],
            after_json=model_to_audit_dict(entry),
        )

    if deducted < minutes:
        logger.warning(
            "Comp time deduction short for user %s: requested=%d deducted=%d", user_id, minutes, deducted
        )
    return deducted


# ---------------------------------------------------------------------------
# Grants
# ---------------------------------------------------------------------------


async def grant_travel_comp_time(
    session: AsyncSession,
    auth: AuthContext,
    leaves: Sequence[LeaveRequest],
    now: datetime | None = None,
) -> list[CompTimeEntry]:
    """Grant one comp day for every weekend TRAVEL leave day not already granted.

    Grants are keyed on the leave row id, so re-submitting a day that already
    earned comp time creates nothing.
    """
    settings = get_settings()
    now = now or datetime.now(UTC)

    weekend_leaves = [leave for leave in leaves if is_weekend(leave.date)]
    if not weekend_leaves:
        return []

    existing_result = await session.execute(
        select(col(CompTimeEntry.source_id)).where(
            col(CompTimeEntry.type) == CompTimeType.TRAVEL.value,
            col(CompTimeEntry.source_id).in_([leave.id for leave in weekend_leaves]),
        )
    )
    already_granted = set(existing_result.scalars().all())

    expires_at = now + timedelta(days=settings.comp_time_expiry_days)
    granted: list[CompTimeEntry] = []
    for leave in weekend_leaves:
        if leave.id in already_granted:
            continue
        entry = CompTimeEntry(
            user_id=leave.user_id,
            org_id=leave.org_id,
            type=CompTimeType.TRAVEL.value,
            source_id=leave.id,
            source_date=leave.date,
            minutes_earned=settings.comp_day_minutes,
            expires_at=expires_at,
            description=f"Weekend travel on {leave.date:%a %Y-%m-%d}",
        )
        session.add(entry)
        granted.append(entry)

    await session.flush()

    for entry in granted:
        await write_audit_log(
            session,
            org_id=entry.org_id,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.COMP_TIME_ENTRY,
            entity_id=entry.id,
            action=AuditAction.GRANT,
            after_json=model_to_audit_dict(entry),
        )

    if granted:
        logger.info("Granted %d weekend travel comp day(s) to user %s", len(granted), auth.user_id)
    return granted


async def grant_manual_comp_time(
    session: AsyncSession,
    auth: AuthContext,
    payload: GrantCompTimePayload,
) -> CompTimeEntryResponse:
    """Admin grant of comp time to a member, expiring on the standard schedule."""
    if auth.org_id is None:
        raise AppError("Organization not found", status_code=403)

    settings = get_settings()
    now = datetime.now(UTC)
    entry = CompTimeEntry(
        user_id=payload.user_id,
        org_id=auth.org_id,
        type=CompTimeType.MANUAL.value,
        source_date=payload.source_date or now.date(),
        minutes_earned=payload.minutes_earned,
        expires_at=now + timedelta(days=settings.comp_time_expiry_days),
        description=payload.description or "Manual grant by admin",
    )
    session.add(entry)
    await session.flush()

    await write_audit_log(
        session,
        org_id=auth.org_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.COMP_TIME_ENTRY,
        entity_id=entry.id,
        action=AuditAction.GRANT,
        after_json=model_to_audit_dict(entry),
    )

    await session.commit()
    await session.refresh(entry)
    logger.info("Admin %s granted %d comp minutes to user %s", auth.user_id, entry.minutes_earned, entry.user_id)
    return _build_entry_response(entry)
