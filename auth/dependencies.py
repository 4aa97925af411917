"""
auth/dependencies.py -- The auth gate, as FastAPI Depends() helpers.

Per request: NoToken -> TokenPresent -> {Verified, Rejected}.

Token sources, checked in order:
  1. x-auth-token header -- the header existing clients send.
  2. Authorization: Bearer <token> -- standard API clients.

No token at all is rejected with "No token, authorization denied". A token
that fails verification for any reason (malformed, forged, expired) is
rejected with the same "Token is not valid" message, so callers cannot tell
which check failed.

On success the AuthContext is stored on request.state.auth and returned to
the handler. Nothing outside the request is touched.

Layer rule: no imports from api/ or social/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import AuthContext
from auth.tokens import TokenIssuer
from core.errors import UnauthorizedError

TOKEN_HEADER = "x-auth-token"


def extract_token(request: Request) -> str | None:
    """Return the raw token from the request headers, or None if absent."""
    token = request.headers.get(TOKEN_HEADER, "").strip()
    if token:
        return token
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        if token:
            return token
    return None


def require_auth(request: Request) -> AuthContext:
    """Require a valid token. Raises UnauthorizedError (401) otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(ctx: AuthContext = Depends(require_auth)): ...
    """
    token = extract_token(request)
    if token is None:
        raise UnauthorizedError("No token, authorization denied")
    tokens: TokenIssuer = request.app.state.tokens
    user_id = tokens.verify(token)
    if user_id is None:
        raise UnauthorizedError("Token is not valid")
    ctx = AuthContext(user_id=user_id)
    request.state.auth = ctx
    return ctx
