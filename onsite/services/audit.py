from __future__ import annotations

import enum
import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from sqlmodel import col, select

from onsite.models.audit import AuditLog

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlmodel import SQLModel

    from onsite.models.enums import AuditAction, AuditEntityType

# Row bookkeeping; the audit row carries its own timestamp.
_UNAUDITED_FIELDS = frozenset({"created_at", "updated_at"})


def _json_safe(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def model_to_audit_dict(model: SQLModel) -> dict[str, Any]:
    """Snapshot a leave, comp-time or policy row as JSON for the audit trail."""
    dumped = model.model_dump(exclude=set(_UNAUDITED_FIELDS))
    return {key: _json_safe(value) for key, value in dumped.items()}


async def write_audit_log(
    session: AsyncSession,
    *,
    org_id: uuid.UUID | None,
    actor_id: uuid.UUID,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID,
    action: AuditAction,
    before_json: dict[str, Any] | None = None,
    after_json: dict[str, Any] | None = None,
) -> AuditLog:
    """Stage an audit row in the caller's transaction.

    Comp-time entries belong to no organization, so ``org_id`` may be None.
    """
    entry = AuditLog(
        org_id=org_id,
        actor_id=actor_id,
        entity_type=entity_type.value,
        entity_id=entity_id,
        action=action.value,
        before_json=before_json,
        after_json=after_json,
    )
    session.add(entry)
    return entry


async def entity_history(
    session: AsyncSession, entity_type: AuditEntityType, entity_id: uuid.UUID
) -> Sequence[AuditLog]:
    """Audit rows for one ledger entity, oldest first."""
    result = await session.execute(
        select(AuditLog)
        .where(col(AuditLog.entity_type) == entity_type.value, col(AuditLog.entity_id) == entity_id)
        .order_by(col(AuditLog.created_at))
    )
    return result.scalars().all()
