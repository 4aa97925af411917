"""
social/store.py -- SQLAlchemy-backed persistence for profiles and posts.

Uses SQLAlchemy Core (not ORM) so the dataclasses in social/models.py remain
the authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change.

Document shape: a profile or post is one row. Its nested sub-documents
(skills, social links, experience entries, likes, comments) are JSON text
columns, so every read returns the whole document and every save writes it
back in one conditional UPDATE. A write either lands completely or not at
all, and a write based on a stale read does not land.

Pattern: Repository + Data Mapper. SocialStore is the repository; the
_row_to_* / _*_to_json functions are the mappers. Route handlers never touch
SQL directly.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = SocialStore()                               # SQLite default
    store = SocialStore("postgresql://user:pw@host/db") # PostgreSQL
    post_id = store.create_post(Post(user=uid, text="hello"))
    store.update_post(post_id, lambda post: post.likes.insert(0, Like(user=other_uid)))
    store.close()
"""

import json
import logging
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine

from core.errors import InternalError
from social.models import Comment, Experience, Like, Post, Profile, SocialLinks

logger = logging.getLogger("devconnector.social")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).parent / 'devconnector_social.db'}"

# Conditional writes that lose a race re-read and retry this many times.
_MAX_UPDATE_ATTEMPTS = 5

# Top-level profile fields upsert_profile() may set. Nested lists are managed
# through update_experience().
_PROFILE_FIELDS: frozenset = frozenset(
    {"status", "skills", "company", "website", "location", "bio", "githubusername", "social"}
)

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_profiles = Table(
    "profiles",
    metadata,
    Column("id", String(32), primary_key=True),
    Column("user", String(32), nullable=False, unique=True),  # one profile per user
    Column("status", String(255), nullable=False),
    Column("company", String(255)),
    Column("website", String(255)),
    Column("location", String(255)),
    Column("bio", Text),
    Column("githubusername", String(39)),
    Column("skills", Text, nullable=False, server_default="[]"),  # JSON array
    Column("social", Text, nullable=False, server_default="{}"),  # JSON object
    Column("experience", Text, nullable=False, server_default="[]"),  # JSON array
    Column("date", String(32), nullable=False),
)

_posts = Table(
    "posts",
    metadata,
    Column("id", String(32), primary_key=True),
    Column("user", String(32), nullable=False, index=True),
    Column("text", Text, nullable=False),
    Column("name", String(255)),
    Column("avatar", Text),
    Column("likes", Text, nullable=False, server_default="[]"),  # JSON array
    Column("comments", Text, nullable=False, server_default="[]"),  # JSON array
    Column("date", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


def _profile_values(fields: dict[str, Any]) -> dict[str, Any]:
    """Translate domain field values into column values."""
    values = dict(fields)
    if "skills" in values:
        values["skills"] = json.dumps(list(values["skills"]))
    if "social" in values:
        values["social"] = json.dumps(asdict(values["social"]))
    return values


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class SocialStore:
    """Repository for Profile and Post documents."""

    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def get_profile_by_user(self, user_id: str) -> Optional[Profile]:
        with self.engine.connect() as conn:
            row = conn.execute(_profiles.select().where(_profiles.c.user == user_id)).fetchone()
        return _row_to_profile(row) if row is not None else None

    def list_profiles(self) -> list[Profile]:
        """Return every profile, oldest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(_profiles.select().order_by(_profiles.c.date)).fetchall()
        return [_row_to_profile(r) for r in rows]

    def upsert_profile(self, user_id: str, fields: dict[str, Any]) -> Profile:
        """Create the user's profile, or update the given fields on the existing one.

        Only keys present in `fields` are written on update; absent keys keep
        their stored values. Experience entries are never touched here.
        Unknown keys raise ValueError before any SQL runs.
        """
        unknown = set(fields) - _PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Unknown profile fields: {unknown!r}")
        values = _profile_values(fields)
        with self.engine.connect() as conn:
            existing = conn.execute(_profiles.select().where(_profiles.c.user == user_id)).fetchone()
            if existing is None:
                conn.execute(_profiles.insert().values(id=_new_id(), user=user_id, date=_now_iso(), **values))
            elif values:
                conn.execute(_profiles.update().where(_profiles.c.user == user_id).values(**values))
            conn.commit()
            row = conn.execute(_profiles.select().where(_profiles.c.user == user_id)).fetchone()
        return _row_to_profile(row)

    def update_experience(self, user_id: str, mutate: Callable[[Profile], None]) -> Optional[Profile]:
        """Apply mutate to the user's profile and write its experience list back atomically.

        mutate edits profile.experience in place. The write only lands if the
        stored list is still the one mutate saw; otherwise the profile is
        re-read and mutate runs again. Exceptions raised by mutate propagate
        and nothing is written. Entries without an id get one here.

        Returns the updated profile, or None if the user has no profile.
        """
        for _ in range(_MAX_UPDATE_ATTEMPTS):
            with self.engine.connect() as conn:
                row = conn.execute(_profiles.select().where(_profiles.c.user == user_id)).fetchone()
            if row is None:
                return None
            profile = _row_to_profile(row)
            mutate(profile)
            for entry in profile.experience:
                if not entry.id:
                    entry.id = _new_id()
            with self.engine.connect() as conn:
                result = conn.execute(
                    _profiles.update()
                    .where(_profiles.c.id == row.id, _profiles.c.experience == row.experience)
                    .values(experience=json.dumps([asdict(e) for e in profile.experience]))
                )
                conn.commit()
            if result.rowcount == 1:
                return profile
            logger.info("Profile %s changed during update; retrying", row.id)
        raise InternalError("Server Error")

    def delete_profile_by_user(self, user_id: str) -> bool:
        """Delete the user's profile. Returns True if one existed."""
        with self.engine.connect() as conn:
            result = conn.execute(_profiles.delete().where(_profiles.c.user == user_id))
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def create_post(self, post: Post) -> str:
        """Insert a new post and return its id."""
        post_id = _new_id()
        with self.engine.connect() as conn:
            conn.execute(
                _posts.insert().values(
                    id=post_id,
                    user=post.user,
                    text=post.text,
                    name=post.name,
                    avatar=post.avatar,
                    likes="[]",
                    comments="[]",
                    date=_now_iso(),
                )
            )
            conn.commit()
        return post_id

    def get_post(self, post_id: str) -> Optional[Post]:
        with self.engine.connect() as conn:
            row = conn.execute(_posts.select().where(_posts.c.id == post_id)).fetchone()
        return _row_to_post(row) if row is not None else None

    def list_posts(self) -> list[Post]:
        """Return every post, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(_posts.select().order_by(_posts.c.date.desc())).fetchall()
        return [_row_to_post(r) for r in rows]

    def update_post(self, post_id: str, mutate: Callable[[Post], None]) -> Optional[Post]:
        """Apply mutate to the post and write likes and comments back atomically.

        The UPDATE is conditional on likes and comments still matching what
        mutate saw, so a check made inside mutate (already liked, comment
        owner) holds for the write it guards. On a lost race the post is
        re-read and mutate runs again. Exceptions raised by mutate propagate
        and nothing is written. Comments without an id or date get them here.

        Returns the updated post, or None if it does not exist.
        """
        for _ in range(_MAX_UPDATE_ATTEMPTS):
            with self.engine.connect() as conn:
                row = conn.execute(_posts.select().where(_posts.c.id == post_id)).fetchone()
            if row is None:
                return None
            post = _row_to_post(row)
            mutate(post)
            for comment in post.comments:
                if not comment.id:
                    comment.id = _new_id()
                if not comment.date:
                    comment.date = _now_iso()
            with self.engine.connect() as conn:
                result = conn.execute(
                    _posts.update()
                    .where(_posts.c.id == post_id, _posts.c.likes == row.likes, _posts.c.comments == row.comments)
                    .values(
                        likes=json.dumps([asdict(like) for like in post.likes]),
                        comments=json.dumps([asdict(c) for c in post.comments]),
                    )
                )
                conn.commit()
            if result.rowcount == 1:
                return post
            logger.info("Post %s changed during update; retrying", post_id)
        raise InternalError("Server Error")

    def delete_post(self, post_id: str) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(_posts.delete().where(_posts.c.id == post_id))
            conn.commit()
        return result.rowcount > 0

    def delete_posts_by_user(self, user_id: str) -> int:
        """Delete every post the user authored. Returns the number removed."""
        with self.engine.connect() as conn:
            result = conn.execute(_posts.delete().where(_posts.c.user == user_id))
            conn.commit()
        return result.rowcount

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_profile(row) -> Profile:
    return Profile(
        id=row.id,
        user=row.user,
        status=row.status,
        company=row.company,
        website=row.website,
        location=row.location,
        bio=row.bio,
        githubusername=row.githubusername,
        skills=json.loads(row.skills or "[]"),
        social=SocialLinks(**json.loads(row.social or "{}")),
        experience=[Experience(**e) for e in json.loads(row.experience or "[]")],
        date=row.date,
    )


def _row_to_post(row) -> Post:
    return Post(
        id=row.id,
        user=row.user,
        text=row.text,
        name=row.name or "",
        avatar=row.avatar or "",
        likes=[Like(**like) for like in json.loads(row.likes or "[]")],
        comments=[Comment(**c) for c in json.loads(row.comments or "[]")],
        date=row.date,
    )
