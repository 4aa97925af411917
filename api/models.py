"""
API request and response models for DevConnector REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
social/models.py, which own the internal domain representation. Route handlers
map between the two.

Separation of concerns: domain models = domain truth; api/ models = API contract.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from auth.models import User
from auth.passwords import MAX_PASSWORD_BYTES
from social.models import Comment, Experience, Post, Profile

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _check_password_bytes(value: str) -> str:
    """bcrypt reads at most 72 bytes; reject longer input instead of truncating."""
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


# ---------------------------------------------------------------------------
# Request models -- accounts
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/users."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6, description="Please enter a password with 6 or more characters")

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def password_bytes(cls, value: str) -> str:
        return _check_password_bytes(value)


class LoginRequest(BaseModel):
    """Request body for POST /api/auth.

    The password is not stripped or length-checked: any string is a valid
    attempt, it just will not match.
    """

    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.strip().lower()


class PasswordChange(BaseModel):
    """Request body for PUT /api/auth/password."""

    current_password: str
    new_password: str = Field(min_length=6)

    @field_validator("new_password")
    @classmethod
    def password_bytes(cls, value: str) -> str:
        return _check_password_bytes(value)


# ---------------------------------------------------------------------------
# Request models -- profiles and posts
# ---------------------------------------------------------------------------


class ProfileUpsert(BaseModel):
    """Request body for POST /api/profile.

    skills is a comma-separated string ("python, go,sql"); the route splits
    and trims it. Social handles are flattened at the top level.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    status: str = Field(min_length=1, max_length=255)
    skills: str = Field(min_length=1, max_length=1000)
    company: Optional[str] = Field(default=None, max_length=255)
    website: Optional[str] = Field(default=None, max_length=255)
    location: Optional[str] = Field(default=None, max_length=255)
    bio: Optional[str] = Field(default=None, max_length=5000)
    githubusername: Optional[str] = Field(default=None, max_length=39)
    youtube: Optional[str] = Field(default=None, max_length=255)
    twitter: Optional[str] = Field(default=None, max_length=255)
    facebook: Optional[str] = Field(default=None, max_length=255)
    linkedin: Optional[str] = Field(default=None, max_length=255)
    instagram: Optional[str] = Field(default=None, max_length=255)

    @field_validator("skills")
    @classmethod
    def skills_not_empty(cls, value: str) -> str:
        if not any(item.strip() for item in value.split(",")):
            raise ValueError("Skills is required")
        return value


class ExperienceCreate(BaseModel):
    """Request body for PUT /api/profile/experience. JSON keys are "from" and "to"."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    title: str = Field(min_length=1, max_length=255)
    company: str = Field(min_length=1, max_length=255)
    from_date: str = Field(alias="from", min_length=1, max_length=32)
    to_date: Optional[str] = Field(default=None, alias="to", max_length=32)
    location: Optional[str] = Field(default=None, max_length=255)
    current: bool = False
    description: Optional[str] = Field(default=None, max_length=5000)


class TextBody(BaseModel):
    """Request body for POST /api/posts and POST /api/posts/comment/{id}."""

    model_config = ConfigDict(str_strip_whitespace=True)

    text: str = Field(min_length=1, max_length=10000, description="Text is required")


# ---------------------------------------------------------------------------
# Response models -- accounts
# ---------------------------------------------------------------------------


class TokenResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    msg: str


class UserResponse(BaseModel):
    """The current user, as returned by GET /api/auth. Never includes the hash."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str
    avatar: str
    date: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, name=user.name, email=user.email, avatar=user.avatar, date=user.date or "")


class UserRef(BaseModel):
    """The public slice of a user embedded in profile responses."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    avatar: str


# ---------------------------------------------------------------------------
# Response models -- profiles
# ---------------------------------------------------------------------------


class SocialResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    youtube: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None


class ExperienceResponse(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    company: str
    from_date: str = Field(alias="from")
    to_date: Optional[str] = Field(default=None, alias="to")
    location: Optional[str] = None
    current: bool = False
    description: Optional[str] = None

    @classmethod
    def from_experience(cls, exp: Experience) -> "ExperienceResponse":
        return cls(
            id=exp.id,
            title=exp.title,
            company=exp.company,
            from_date=exp.from_date,
            to_date=exp.to_date,
            location=exp.location,
            current=exp.current,
            description=exp.description,
        )


class ProfileResponse(BaseModel):
    """A profile with its owner's public details populated.

    user is None only when the owning account vanished between reads.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    user: Optional[UserRef]
    status: str
    skills: list[str]
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    githubusername: Optional[str] = None
    social: SocialResponse
    experience: list[ExperienceResponse] = Field(default_factory=list)
    date: str

    @classmethod
    def from_profile(cls, profile: Profile, owner: Optional[User]) -> "ProfileResponse":
        return cls(
            id=profile.id,
            user=UserRef(id=owner.id, name=owner.name, avatar=owner.avatar) if owner else None,
            status=profile.status,
            skills=profile.skills,
            company=profile.company,
            website=profile.website,
            location=profile.location,
            bio=profile.bio,
            githubusername=profile.githubusername,
            social=SocialResponse(**vars(profile.social)),
            experience=[ExperienceResponse.from_experience(e) for e in profile.experience],
            date=profile.date,
        )


# ---------------------------------------------------------------------------
# Response models -- posts
# ---------------------------------------------------------------------------


class LikeResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: str


class CommentResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user: str
    text: str
    name: str
    avatar: str
    date: str

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            user=comment.user,
            text=comment.text,
            name=comment.name,
            avatar=comment.avatar,
            date=comment.date,
        )


class PostResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user: str
    text: str
    name: str
    avatar: str
    likes: list[LikeResponse]
    comments: list[CommentResponse]
    date: str

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            user=post.user,
            text=post.text,
            name=post.name,
            avatar=post.avatar,
            likes=[LikeResponse(user=like.user) for like in post.likes],
            comments=[CommentResponse.from_comment(c) for c in post.comments],
            date=post.date,
        )


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
