"""
api/routes/users.py -- Account registration.

Routes:
  POST /api/users  -- register; returns a signed token

Security:
  Rate-limited per IP (Settings.register_rate_limit).
  Cache-Control: no-store on the token-bearing response.
  Duplicate email -> 400 conflict. The store's UNIQUE(email) turns a
  registration race into the same response instead of a second account.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from api.limiter import limiter, register_limit
from api.models import RegisterRequest, TokenResponse
from auth.models import User
from auth.passwords import PasswordHasher
from auth.store import UserStore
from auth.tokens import TokenIssuer
from core.avatar import gravatar_url
from core.errors import ConflictError

logger = logging.getLogger("devconnector.api.users")

# Auth policy:
# - POST /api/users: public -- registration must be unauthenticated
router = APIRouter()


@router.post("/users", response_model=TokenResponse)
@limiter.limit(register_limit)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create an account and return a token for it.

    Sync handler: bcrypt is CPU-bound, so FastAPI runs this in its thread
    pool rather than on the event loop.
    """
    user_store: UserStore = request.app.state.user_store
    hasher: PasswordHasher = request.app.state.hasher
    tokens: TokenIssuer = request.app.state.tokens

    if user_store.get_by_email(body.email) is not None:
        raise ConflictError("User already exists")

    user = User(
        name=body.name,
        email=body.email,
        avatar=gravatar_url(body.email),
        hashed_password=hasher.hash(body.password),
    )
    try:
        user_id = user_store.create_user(user)
    except IntegrityError as exc:
        raise ConflictError("User already exists") from exc

    logger.info("Registered user %s", user_id)
    resp = JSONResponse(content=TokenResponse(token=tokens.issue(user_id)).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp
