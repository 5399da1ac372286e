# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel


class AuthContext(BaseModel):
    """Request-scoped identity extracted from gateway headers."""

    user_id: uuid.UUID
    org_id: uuid.UUID | None = None
    role: str = "employee"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
