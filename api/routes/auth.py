"""
api/routes/auth.py -- Login and current-user endpoints.

Routes:
  GET /api/auth           -- current user, without the password hash (requires auth)
  POST /api/auth          -- password login; returns a signed token
  PUT /api/auth/password  -- change own password (requires auth)

Security:
  POST /api/auth is rate-limited per IP (Settings.login_rate_limit).
  PasswordHasher.authenticate() equalizes timing between unknown email and
  wrong password -- use it, never get_by_email() + verify() inline.
  Both failures return the identical 401 body below.
  Cache-Control: no-store on token-bearing responses.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter, login_limit
from api.models import LoginRequest, MessageResponse, PasswordChange, TokenResponse, UserResponse
from auth.dependencies import require_auth
from auth.models import AuthContext
from auth.passwords import PasswordHasher
from auth.store import UserStore
from auth.tokens import TokenIssuer
from core.errors import NotFoundError, UnauthorizedError

logger = logging.getLogger("devconnector.api.auth")

# Auth policy:
# - GET  /api/auth:           requires auth (require_auth)
# - POST /api/auth:           public -- login endpoint must be unauthenticated
# - PUT  /api/auth/password:  requires auth + current password
router = APIRouter()


def _bad_credentials() -> UnauthorizedError:
    return UnauthorizedError("Invalid Credentials", code="bad_credentials")


@router.get("/auth", response_model=UserResponse)
def current_user(request: Request, ctx: AuthContext = Depends(require_auth)) -> UserResponse:
    """Return the authenticated user's account details."""
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(ctx.user_id)
    if user is None:
        # Valid token for an account deleted since it was issued.
        raise NotFoundError("User not found")
    return UserResponse.from_user(user)


@router.post("/auth", response_model=TokenResponse)
@limiter.limit(login_limit)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return a token.

    Unknown email and wrong password produce the same status, code and
    message.
    """
    user_store: UserStore = request.app.state.user_store
    hasher: PasswordHasher = request.app.state.hasher
    tokens: TokenIssuer = request.app.state.tokens

    user = hasher.authenticate(user_store, body.email, body.password)
    if user is None:
        raise _bad_credentials()

    logger.info("Login: %s", user.id)
    resp = JSONResponse(content=TokenResponse(token=tokens.issue(user.id)).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.put("/auth/password", response_model=MessageResponse)
def change_password(
    request: Request,
    body: PasswordChange,
    ctx: AuthContext = Depends(require_auth),
) -> MessageResponse:
    """Replace the caller's password hash after re-checking the current password.

    Tokens already issued stay valid until they expire; there is no
    server-side revocation.
    """
    user_store: UserStore = request.app.state.user_store
    hasher: PasswordHasher = request.app.state.hasher

    user = user_store.get_by_id(ctx.user_id)
    if user is None:
        raise NotFoundError("User not found")
    if not hasher.verify(body.current_password, user.hashed_password):
        raise _bad_credentials()

    user_store.update_user(user.id, hashed_password=hasher.hash(body.new_password))
    logger.info("Password changed: %s", user.id)
    return MessageResponse(msg="Password updated")
