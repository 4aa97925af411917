"""
api/routes/profile.py -- Developer profile endpoints.

Routes:
  GET    /api/profile/me                    -- own profile (requires auth)
  POST   /api/profile                       -- create or update own profile (requires auth)
  GET    /api/profile                       -- all profiles (public)
  GET    /api/profile/user/{user_id}        -- one user's profile (public)
  DELETE /api/profile                       -- delete own profile, posts and account (requires auth)
  PUT    /api/profile/experience            -- add an experience entry (requires auth)
  DELETE /api/profile/experience/{exp_id}   -- remove an experience entry (requires auth)
  GET    /api/profile/github/{username}     -- user's public GitHub repos (public)

Ownership: every write is addressed through ctx.user_id, so a caller can only
ever reach their own profile. Experience removal still runs the existence
check before the write.

Handlers are plain def: store calls and the GitHub request block, so FastAPI
runs them in its thread pool.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from api.models import ExperienceCreate, MessageResponse, ProfileResponse, ProfileUpsert
from auth.dependencies import require_auth
from auth.models import AuthContext
from auth.ownership import require_found
from auth.store import UserStore
from core.config import get_settings
from core.github import fetch_github_repos
from social.models import Experience, Profile, SocialLinks
from social.store import SocialStore

logger = logging.getLogger("devconnector.api.profile")

# Auth policy:
# - GET    /api/profile/me:                  requires auth
# - POST   /api/profile:                     requires auth
# - GET    /api/profile:                     public -- read-only listing
# - GET    /api/profile/user/{user_id}:      public -- single-resource fetch
# - DELETE /api/profile:                     requires auth
# - PUT    /api/profile/experience:          requires auth
# - DELETE /api/profile/experience/{exp_id}: requires auth + existence check
# - GET    /api/profile/github/{username}:   public -- upstream proxy
router = APIRouter()

_NO_PROFILE = "There is no profile for this user"


def _with_owner(request: Request, profile: Profile) -> ProfileResponse:
    user_store: UserStore = request.app.state.user_store
    return ProfileResponse.from_profile(profile, user_store.get_by_id(profile.user))


@router.get("/profile/me", response_model=ProfileResponse)
def my_profile(request: Request, ctx: AuthContext = Depends(require_auth)) -> ProfileResponse:
    social: SocialStore = request.app.state.social_store
    profile = require_found(social.get_profile_by_user(ctx.user_id), _NO_PROFILE)
    return _with_owner(request, profile)


@router.post("/profile", response_model=ProfileResponse)
def upsert_profile(
    request: Request,
    body: ProfileUpsert,
    ctx: AuthContext = Depends(require_auth),
) -> ProfileResponse:
    """Create the caller's profile, or update it.

    Optional fields left empty keep their stored value on update. Social
    links are rebuilt from the request every time. skills is split on commas
    and trimmed; empty items are dropped.
    """
    social: SocialStore = request.app.state.social_store

    fields: dict = {"status": body.status}
    for name in ("company", "website", "location", "bio", "githubusername"):
        value = getattr(body, name)
        if value:
            fields[name] = value
    fields["skills"] = [s.strip() for s in body.skills.split(",") if s.strip()]
    fields["social"] = SocialLinks(
        youtube=body.youtube or None,
        twitter=body.twitter or None,
        facebook=body.facebook or None,
        linkedin=body.linkedin or None,
        instagram=body.instagram or None,
    )

    profile = social.upsert_profile(ctx.user_id, fields)
    return _with_owner(request, profile)


@router.get("/profile", response_model=list[ProfileResponse])
def list_profiles(request: Request) -> list[ProfileResponse]:
    """Return every profile with its owner's name and avatar."""
    social: SocialStore = request.app.state.social_store
    user_store: UserStore = request.app.state.user_store

    profiles = social.list_profiles()
    owners = user_store.get_many(p.user for p in profiles)
    return [ProfileResponse.from_profile(p, owners.get(p.user)) for p in profiles]


@router.get("/profile/user/{user_id}", response_model=ProfileResponse)
def profile_by_user(request: Request, user_id: str) -> ProfileResponse:
    social: SocialStore = request.app.state.social_store
    profile = require_found(social.get_profile_by_user(user_id), "Profile not found")
    return _with_owner(request, profile)


@router.delete("/profile", response_model=MessageResponse)
def delete_account(request: Request, ctx: AuthContext = Depends(require_auth)) -> MessageResponse:
    """Delete the caller's profile, their posts, then the account itself.

    The user record goes last so a failure part-way leaves an account that
    can still sign in and retry.
    """
    social: SocialStore = request.app.state.social_store
    user_store: UserStore = request.app.state.user_store

    social.delete_profile_by_user(ctx.user_id)
    removed = social.delete_posts_by_user(ctx.user_id)
    user_store.delete_user(ctx.user_id)
    logger.info("Deleted account %s (%d posts)", ctx.user_id, removed)
    return MessageResponse(msg="User deleted")


@router.put("/profile/experience", response_model=ProfileResponse)
def add_experience(
    request: Request,
    body: ExperienceCreate,
    ctx: AuthContext = Depends(require_auth),
) -> ProfileResponse:
    """Prepend an experience entry to the caller's profile."""
    social: SocialStore = request.app.state.social_store
    entry = Experience(
        title=body.title,
        company=body.company,
        from_date=body.from_date,
        to_date=body.to_date,
        location=body.location,
        current=body.current,
        description=body.description,
    )
    profile = social.update_experience(ctx.user_id, lambda p: p.experience.insert(0, entry))
    return _with_owner(request, require_found(profile, _NO_PROFILE))


@router.delete("/profile/experience/{exp_id}", response_model=ProfileResponse)
def remove_experience(
    request: Request,
    exp_id: str,
    ctx: AuthContext = Depends(require_auth),
) -> ProfileResponse:
    """Remove one experience entry from the caller's profile.

    An id that is not on the caller's profile is a 404 and nothing changes.
    """
    social: SocialStore = request.app.state.social_store

    def _remove(profile: Profile) -> None:
        entry = require_found(next((e for e in profile.experience if e.id == exp_id), None), "Experience not found")
        profile.experience.remove(entry)

    profile = social.update_experience(ctx.user_id, _remove)
    return _with_owner(request, require_found(profile, _NO_PROFILE))


@router.get("/profile/github/{username}")
def github_repos(username: str) -> list[dict]:
    """Proxy the user's public GitHub repositories.

    Sync handler: the upstream call blocks, so FastAPI runs it in the thread
    pool. The call is bounded by Settings.github_timeout_seconds.
    """
    settings = get_settings()
    repos = fetch_github_repos(
        username,
        client_id=settings.github_client_id,
        client_secret=settings.github_client_secret,
        timeout=settings.github_timeout_seconds,
    )
    return require_found(repos, "No Github profile found")
