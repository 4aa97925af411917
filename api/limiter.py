"""
api/limiter.py -- Shared slowapi rate limiter instance.

Import this in api/main.py (to mount as middleware) and in the route modules
that apply per-route limits with @limiter.limit().

A single shared instance means all routes share one in-memory counter store.
Instantiated per module, each would get its own isolated counter and the
limits would never trigger.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")


def login_limit() -> str:
    """Limit string for POST /api/auth, read from settings at request time."""
    return get_settings().login_rate_limit


def register_limit() -> str:
    """Limit string for POST /api/users."""
    return get_settings().register_rate_limit
