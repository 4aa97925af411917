"""
api/routes/posts.py -- Posts, likes and comments.

Routes:
  POST   /api/posts                                -- create a post
  GET    /api/posts                                -- all posts, newest first
  GET    /api/posts/{post_id}                      -- one post
  DELETE /api/posts/{post_id}                      -- delete own post
  PUT    /api/posts/like/{post_id}                 -- like a post
  PUT    /api/posts/unlike/{post_id}               -- remove own like (alias: /dislike/)
  POST   /api/posts/comment/{post_id}              -- comment on a post
  DELETE /api/posts/comment/{post_id}/{comment_id} -- delete own comment

Every route requires auth (router-level dependency).

Mutations follow the same order everywhere: load the post (404), find the
sub-document if any (404), check ownership (403), then one write. Like and
comment changes run inside SocialStore.update_post(), so those checks and the
write see the same version of the post. A rejected request never writes.

Handlers are plain def: store calls block, so FastAPI runs them in its
thread pool.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from api.models import CommentResponse, LikeResponse, MessageResponse, PostResponse, TextBody
from auth.dependencies import require_auth
from auth.models import AuthContext
from auth.ownership import require_found, require_owner
from auth.store import UserStore
from core.errors import ValidationError
from social.models import Comment, Like, Post
from social.store import SocialStore

logger = logging.getLogger("devconnector.api.posts")

# Auth policy:
# - all routes: requires auth -- router-level dependency; handlers that need
#   the identity declare require_auth again (FastAPI caches it per request)
# - DELETE /posts/{id} and DELETE /posts/comment/{id}/{cid}: + ownership check
router = APIRouter(dependencies=[Depends(require_auth)])

_POST_NOT_FOUND = "Post not found"


def _load_post(request: Request, post_id: str) -> Post:
    social: SocialStore = request.app.state.social_store
    return require_found(social.get_post(post_id), _POST_NOT_FOUND)


def _author(request: Request, ctx: AuthContext):
    """The caller's account; a token for a deleted account cannot post."""
    user_store: UserStore = request.app.state.user_store
    return require_found(user_store.get_by_id(ctx.user_id), "User not found")


@router.post("/posts", response_model=PostResponse)
def create_post(request: Request, body: TextBody, ctx: AuthContext = Depends(require_auth)) -> PostResponse:
    social: SocialStore = request.app.state.social_store
    user = _author(request, ctx)

    post_id = social.create_post(Post(user=ctx.user_id, text=body.text, name=user.name, avatar=user.avatar))
    return PostResponse.from_post(social.get_post(post_id))


@router.get("/posts", response_model=list[PostResponse])
def list_posts(request: Request) -> list[PostResponse]:
    social: SocialStore = request.app.state.social_store
    return [PostResponse.from_post(p) for p in social.list_posts()]


@router.get("/posts/{post_id}", response_model=PostResponse)
def get_post(request: Request, post_id: str) -> PostResponse:
    return PostResponse.from_post(_load_post(request, post_id))


@router.delete("/posts/{post_id}", response_model=MessageResponse)
def delete_post(request: Request, post_id: str, ctx: AuthContext = Depends(require_auth)) -> MessageResponse:
    social: SocialStore = request.app.state.social_store
    post = _load_post(request, post_id)
    require_owner(post.user, ctx)

    social.delete_post(post.id)
    logger.info("Post %s deleted by %s", post.id, ctx.user_id)
    return MessageResponse(msg="Post removed")


@router.put("/posts/like/{post_id}", response_model=list[LikeResponse])
def like_post(request: Request, post_id: str, ctx: AuthContext = Depends(require_auth)) -> list[LikeResponse]:
    """Add the caller's like. A second like is rejected and changes nothing."""
    social: SocialStore = request.app.state.social_store

    def _like(post: Post) -> None:
        if any(like.user == ctx.user_id for like in post.likes):
            raise ValidationError("Post already liked")
        post.likes.insert(0, Like(user=ctx.user_id))

    post = require_found(social.update_post(post_id, _like), _POST_NOT_FOUND)
    return [LikeResponse(user=like.user) for like in post.likes]


@router.put("/posts/unlike/{post_id}", response_model=list[LikeResponse])
@router.put("/posts/dislike/{post_id}", response_model=list[LikeResponse], include_in_schema=False)
def unlike_post(request: Request, post_id: str, ctx: AuthContext = Depends(require_auth)) -> list[LikeResponse]:
    """Remove the caller's like. Only the caller's own like can be removed."""
    social: SocialStore = request.app.state.social_store

    def _unlike(post: Post) -> None:
        remaining = [like for like in post.likes if like.user != ctx.user_id]
        if len(remaining) == len(post.likes):
            raise ValidationError("Post has not yet been liked")
        post.likes = remaining

    post = require_found(social.update_post(post_id, _unlike), _POST_NOT_FOUND)
    return [LikeResponse(user=like.user) for like in post.likes]


@router.post("/posts/comment/{post_id}", response_model=list[CommentResponse])
def add_comment(
    request: Request,
    post_id: str,
    body: TextBody,
    ctx: AuthContext = Depends(require_auth),
) -> list[CommentResponse]:
    """Prepend the caller's comment; returns the post's comments, newest first."""
    social: SocialStore = request.app.state.social_store
    user = _author(request, ctx)

    def _comment(post: Post) -> None:
        post.comments.insert(0, Comment(user=ctx.user_id, text=body.text, name=user.name, avatar=user.avatar))

    post = require_found(social.update_post(post_id, _comment), _POST_NOT_FOUND)
    return [CommentResponse.from_comment(c) for c in post.comments]


@router.delete("/posts/comment/{post_id}/{comment_id}", response_model=list[CommentResponse])
def delete_comment(
    request: Request,
    post_id: str,
    comment_id: str,
    ctx: AuthContext = Depends(require_auth),
) -> list[CommentResponse]:
    """Delete one of the caller's own comments."""
    social: SocialStore = request.app.state.social_store

    def _uncomment(post: Post) -> None:
        comment = require_found(
            next((c for c in post.comments if c.id == comment_id), None), "Comment does not exist"
        )
        require_owner(comment.user, ctx)
        post.comments.remove(comment)

    post = require_found(social.update_post(post_id, _uncomment), _POST_NOT_FOUND)
    return [CommentResponse.from_comment(c) for c in post.comments]
