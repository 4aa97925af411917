"""
social/models.py -- Domain dataclasses for profiles and posts.

These are pure data containers with zero logic. Persistence lives in
social/store.py; authorization lives in the routes.

Every mutable resource carries the id of the user who owns it in `user`.
Sub-documents (experience entries, likes, comments) are stored inside their
parent document and addressed by their own id.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class SocialLinks:
    youtube: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None


@dataclass
class Experience:
    """One job on a profile. from_date/to_date are client-supplied date strings."""

    title: str
    company: str
    from_date: str
    id: str = ""
    location: Optional[str] = None
    to_date: Optional[str] = None
    current: bool = False
    description: Optional[str] = None


@dataclass
class Profile:
    """A developer profile. One per user; `user` is the owner's id.

    id is None before the record is written to the database.
    """

    user: str
    status: str
    skills: list[str] = field(default_factory=list)
    id: Optional[str] = None
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    githubusername: Optional[str] = None
    social: SocialLinks = field(default_factory=SocialLinks)
    experience: list[Experience] = field(default_factory=list)  # newest first
    date: str = ""  # ISO 8601, set by store on insert


@dataclass
class Like:
    user: str


@dataclass
class Comment:
    """A comment on a post. name/avatar are copied from the author at write time."""

    user: str
    text: str
    id: str = ""
    name: str = ""
    avatar: str = ""
    date: str = ""


@dataclass
class Post:
    """A post. name/avatar are copied from the author at write time.

    id is None before the record is written to the database.
    """

    user: str
    text: str
    name: str = ""
    avatar: str = ""
    id: Optional[str] = None
    likes: list[Like] = field(default_factory=list)  # newest first
    comments: list[Comment] = field(default_factory=list)  # newest first
    date: str = ""
