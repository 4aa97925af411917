"""
auth/ownership.py -- Existence and ownership checks for mutating handlers.

Every update or delete on a user-owned resource runs, in this order:
  1. require_found()  -- absent resource -> 404, nothing else revealed
  2. require_owner()  -- someone else's resource -> 403, nothing written
  3. the single write

Both checks finish before the first write, so a rejected request never leaves
a partial mutation behind.

Layer rule: no imports from api/ or social/.
"""

from __future__ import annotations

from typing import TypeVar

from auth.models import AuthContext
from core.errors import ForbiddenError, NotFoundError

T = TypeVar("T")


def require_found(resource: T | None, message: str) -> T:
    """Return resource, or raise NotFoundError(message) if it is None."""
    if resource is None:
        raise NotFoundError(message)
    return resource


def require_owner(owner_id: str, ctx: AuthContext, message: str = "User not authorized") -> None:
    """Raise ForbiddenError unless the authenticated user owns the resource."""
    if owner_id != ctx.user_id:
        raise ForbiddenError(message)
