# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header, status

from onsite.exceptions import AppError
from onsite.schemas.auth import AuthContext


async def get_auth_context(
    x_user_id: uuid.UUID | None = Header(default=None),
    x_org_id: uuid.UUID | None = Header(default=None),
    x_role: str = Header(default="employee"),
) -> AuthContext:
    """Build the request's identity from headers set by the auth gateway."""
    if x_user_id is None:
        raise AppError("Unauthorized", status_code=status.HTTP_401_UNAUTHORIZED)
    return AuthContext(user_id=x_user_id, org_id=x_org_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_org(
    auth: AuthDep,
) -> AuthContext:
    """Require the caller to belong to an organization."""
    if auth.org_id is None:
        raise AppError("Organization not found", status_code=status.HTTP_403_FORBIDDEN)
    return auth


OrgDep = Annotated[AuthContext, Depends(require_org)]


async def require_admin(
    auth: OrgDep,
) -> AuthContext:
    """Require admin role within the caller's organization."""
    if not auth.is_admin:
        raise AppError("Admin access required", status_code=status.HTTP_403_FORBIDDEN)
    return auth


AdminDep = Annotated[AuthContext, Depends(require_admin)]
