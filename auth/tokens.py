"""
auth/tokens.py -- Signed, time-limited identity tokens.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry {"user": {"id": ...}} plus iat and
       exp. That payload shape is what existing clients decode, so it stays.

  Config: TokenIssuer receives a TokenConfig at construction. It never reads
       settings or environment itself; api/main.py lifespan builds it from
       core.config.get_settings() once at startup. A missing secret is a
       startup failure, not a per-request one.

  Verification returns None on any failure -- bad structure, bad signature,
       missing or past exp, unexpected payload shape. The auth gate turns None
       into a 401 without saying which of those it was.

  Canonical encoding: each segment must be the exact base64url encoding of
       the bytes it decodes to. The final character of a segment can carry
       unused bits that base64 decoders drop, so without this check several
       spellings of one signature would all verify.

  No revocation: tokens are stateless and valid until exp.

Layer rule: no imports from api/ or social/.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from core.config import DEFAULT_TOKEN_TTL_SECONDS

logger = logging.getLogger("devconnector.auth")


@dataclass(frozen=True)
class TokenConfig:
    secret_key: str
    ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS
    algorithm: str = "HS256"


class TokenIssuer:
    """Issue and verify JWTs for a single signing configuration.

    Usage:
        tokens = TokenIssuer(TokenConfig(secret_key=settings.secret_key))
        token = tokens.issue(user.id)
        tokens.verify(token)  # -> user.id, or None
    """

    def __init__(self, config: TokenConfig) -> None:
        if not config.secret_key:
            raise ValueError("TokenIssuer requires a non-empty secret_key.")
        if config.ttl_seconds <= 0:
            raise ValueError("TokenIssuer ttl_seconds must be positive.")
        self.config = config

    def issue(self, user_id: str, now: datetime | None = None) -> str:
        """Encode a signed token for user_id, expiring ttl_seconds after now.

        Args:
            user_id: Opaque user identifier stored as user.id in the payload.
            now:     Issuance time (UTC). Defaults to the current time; tests
                     pass an earlier value to get an already-expired token.
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "user": {"id": user_id},
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self.config.ttl_seconds),
        }
        return jwt.encode(payload, self.config.secret_key, algorithm=self.config.algorithm)

    def verify(self, token: str) -> str | None:
        """Return the user id carried by token, or None if it is not fully valid."""
        if not _is_canonical(token):
            return None
        try:
            payload = jwt.decode(
                token,
                self.config.secret_key,
                algorithms=[self.config.algorithm],
                options={"require_exp": True},
            )
        except JWTError:
            return None
        user = payload.get("user")
        if not isinstance(user, dict):
            return None
        user_id = user.get("id")
        if not isinstance(user_id, str) or not user_id:
            return None
        return user_id


def _is_canonical(token: str) -> bool:
    """True if token has three segments, each in canonical unpadded base64url."""
    segments = token.split(".")
    if len(segments) != 3:
        return False
    for segment in segments:
        try:
            raw = base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))
        except (binascii.Error, ValueError):
            return False
        if base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii") != segment:
            return False
    return True
