"""
auth/passwords.py -- Salted one-way password hashing and credential checks.

bcrypt is used directly (no passlib wrapper). The stored string is bcrypt's
modular-crypt format ("$2b$<cost>$<salt><digest>"), so the algorithm, cost
and salt travel with the digest and verification needs no other state.

Timing equalization: authenticate() runs exactly one bcrypt check whether or
not the email exists. An unknown email is checked against a dummy hash made
with the same cost, so response time does not reveal which emails are
registered. The response body and status are identical in both cases too;
that part is the route's job.

Layer rule: no imports from api/ or social/.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import bcrypt

from core.errors import InternalError

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("devconnector.auth")

DEFAULT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes; newer releases reject longer input.
# The API layer caps password length in bytes so hash() never sees more.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """bcrypt hashing with a tunable work factor.

    Usage:
        hasher = PasswordHasher(rounds=10)
        stored = hasher.hash("secret1")
        hasher.verify("secret1", stored)  # True
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        if not 4 <= rounds <= 31:
            raise ValueError(f"bcrypt rounds must be between 4 and 31, got {rounds}")
        self.rounds = rounds
        # Computed once so the first unknown-email login is not measurably
        # slower than later ones.
        self._dummy_hash = self.hash("devconnector_timing_dummy")

    def hash(self, plain: str) -> str:
        """Return a fresh salted bcrypt hash of plain.

        Raises InternalError if hashing fails (e.g. no entropy source, or input
        past bcrypt's length limit slipping through validation).
        """
        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")
        except (ValueError, TypeError, OSError) as exc:
            logger.error("Password hashing failed: %s", type(exc).__name__)
            raise InternalError("Server Error") from exc

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if plain matches hashed. Never raises."""
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
        except (ValueError, TypeError, AttributeError, UnicodeError):
            return False

    def authenticate(self, store: UserStore, email: str, password: str) -> User | None:
        """Return the User whose email and password match, else None.

        Always runs bcrypt. Do NOT return early before the check -- that
        reintroduces the email-enumeration timing leak.
        """
        user = store.get_by_email(email)
        if user is None:
            self.verify(password, self._dummy_hash)
            return None
        if not self.verify(password, user.hashed_password):
            return None
        return user
