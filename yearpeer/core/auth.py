"""Resolve the calling user for a request.

Identity is owned by the upstream identity provider; by the time a request
reaches this service the gateway has verified the session and forwarded the
user id in the ``X-User-Id`` header.
"""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import Header

from yearpeer.core.context import user_id_ctx_var
from yearpeer.services.results import AuthorizationError


async def get_current_user_id(x_user_id: Optional[str] = Header(default=None, alias="X-User-Id")) -> UUID:
    """FastAPI dependency returning the caller's user id or raising ``AuthorizationError``."""
    if not x_user_id:
        raise AuthorizationError("Unauthorized")
    try:
        user_id = UUID(x_user_id)
    except ValueError as exc:
        raise AuthorizationError("Unauthorized") from exc
    user_id_ctx_var.set(str(user_id))
    return user_id
