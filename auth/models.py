"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in social/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/ or social/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    email is unique and is the login identifier. hashed_password is the full
    bcrypt string (algorithm, cost, salt and digest), so it is all that is
    needed to verify a password later.

    id is None before the record is written to the database.
    """

    name: str
    email: str
    hashed_password: str
    avatar: str = ""
    id: str | None = None
    date: str | None = None  # ISO 8601, set by store on insert


@dataclass(frozen=True)
class AuthContext:
    """Identity derived from a verified token. Lives for one request only."""

    user_id: str
