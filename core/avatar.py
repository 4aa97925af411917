"""
core/avatar.py -- Gravatar URL builder used at registration.

Gravatar addresses images by the md5 of the trimmed, lower-cased email. md5 is
Gravatar's addressing scheme here, not a security primitive.
"""

import hashlib
from urllib.parse import urlencode

GRAVATAR_BASE = "//www.gravatar.com/avatar/"


def gravatar_url(email: str, size: int = 200, rating: str = "pg", default: str = "mm") -> str:
    """Return a protocol-relative Gravatar URL for email.

    Defaults match what registered users have always received: 200px,
    PG-rated, "mystery man" fallback image.
    """
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()  # noqa: S324 # nosec B324
    query = urlencode({"s": str(size), "r": rating, "d": default})
    return f"{GRAVATAR_BASE}{digest}?{query}"
