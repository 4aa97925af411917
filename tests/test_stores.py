"""Unit tests for auth/store.py and social/store.py.

Covers:
- UserStore: create/get by email and id, unique email, get_many, update
  whitelist, delete
- SocialStore profiles: upsert create vs partial update, experience update
  assigns ids, survives profile updates and writes nothing on error
- SocialStore posts: newest-first listing, likes/comments persisted as one
  document, comment ids assigned, stale writes re-applied, delete by user
"""

import pytest
from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.store import UserStore
from core.errors import ValidationError
from social.models import Comment, Experience, Like, Post, SocialLinks
from social.store import SocialStore


@pytest.fixture
def users():
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def social():
    s = SocialStore("sqlite:///:memory:")
    yield s
    s.close()


def _user(email: str = "a@x.com", name: str = "Alice") -> User:
    return User(name=name, email=email, hashed_password="$2b$04$placeholder", avatar="//gravatar/x")


# ---------------------------------------------------------------------------
# UserStore
# ---------------------------------------------------------------------------


class TestUserStore:
    def test_create_and_lookup(self, users: UserStore) -> None:
        uid = users.create_user(_user())
        assert len(uid) == 32

        by_email = users.get_by_email("a@x.com")
        by_id = users.get_by_id(uid)
        assert by_email == by_id
        assert by_id.name == "Alice"
        assert by_id.date

    def test_missing_returns_none(self, users: UserStore) -> None:
        assert users.get_by_email("nobody@x.com") is None
        assert users.get_by_id("0" * 32) is None

    def test_duplicate_email_raises(self, users: UserStore) -> None:
        users.create_user(_user())
        with pytest.raises(IntegrityError):
            users.create_user(_user(name="Other"))

    def test_get_many(self, users: UserStore) -> None:
        a = users.create_user(_user("a@x.com", "A"))
        b = users.create_user(_user("b@x.com", "B"))
        found = users.get_many([a, b, a, "missing"])
        assert set(found) == {a, b}
        assert found[b].name == "B"
        assert users.get_many([]) == {}

    def test_update_password(self, users: UserStore) -> None:
        uid = users.create_user(_user())
        assert users.update_user(uid, hashed_password="$2b$04$new") is True
        assert users.get_by_id(uid).hashed_password == "$2b$04$new"
        assert users.update_user("missing", name="x") is False

    def test_update_rejects_unknown_fields(self, users: UserStore) -> None:
        uid = users.create_user(_user())
        with pytest.raises(ValueError):
            users.update_user(uid, email="b@x.com")

    def test_delete(self, users: UserStore) -> None:
        uid = users.create_user(_user())
        assert users.delete_user(uid) is True
        assert users.get_by_id(uid) is None
        assert users.delete_user(uid) is False

    def test_ping(self, users: UserStore) -> None:
        assert users.ping() is True


# ---------------------------------------------------------------------------
# SocialStore -- profiles
# ---------------------------------------------------------------------------


class TestProfiles:
    def test_upsert_creates(self, social: SocialStore) -> None:
        profile = social.upsert_profile(
            "u1",
            {"status": "Developer", "skills": ["python", "sql"], "social": SocialLinks(twitter="@a")},
        )
        assert profile.id
        assert profile.user == "u1"
        assert profile.skills == ["python", "sql"]
        assert profile.social.twitter == "@a"
        assert social.get_profile_by_user("u1") == profile

    def test_upsert_updates_only_given_fields(self, social: SocialStore) -> None:
        social.upsert_profile("u1", {"status": "Developer", "skills": ["python"], "company": "Acme"})
        updated = social.upsert_profile("u1", {"status": "Senior Developer", "skills": ["go"]})
        assert updated.status == "Senior Developer"
        assert updated.skills == ["go"]
        assert updated.company == "Acme"
        assert len(social.list_profiles()) == 1

    def test_upsert_rejects_unknown_fields(self, social: SocialStore) -> None:
        with pytest.raises(ValueError):
            social.upsert_profile("u1", {"status": "x", "skills": [], "user": "u2"})

    def test_experience_saved_with_ids_and_kept_on_update(self, social: SocialStore) -> None:
        social.upsert_profile("u1", {"status": "Developer", "skills": ["python"]})
        entry = Experience(title="Engineer", company="Acme", from_date="2020-01-01")
        social.update_experience("u1", lambda p: p.experience.insert(0, entry))

        stored = social.get_profile_by_user("u1")
        assert len(stored.experience) == 1
        assert stored.experience[0].id
        assert stored.experience[0].from_date == "2020-01-01"

        social.upsert_profile("u1", {"status": "Lead", "skills": ["python"]})
        assert social.get_profile_by_user("u1").experience == stored.experience

    def test_update_experience_without_profile(self, social: SocialStore) -> None:
        assert social.update_experience("nobody", lambda p: p.experience.clear()) is None

    def test_update_experience_error_writes_nothing(self, social: SocialStore) -> None:
        social.upsert_profile("u1", {"status": "Developer", "skills": ["python"]})
        social.update_experience("u1", lambda p: p.experience.append(Experience("A", "B", "2020")))

        def _fail(profile) -> None:
            profile.experience.clear()
            raise LookupError("stop")

        with pytest.raises(LookupError):
            social.update_experience("u1", _fail)
        assert len(social.get_profile_by_user("u1").experience) == 1

    def test_delete_by_user(self, social: SocialStore) -> None:
        social.upsert_profile("u1", {"status": "Developer", "skills": []})
        assert social.delete_profile_by_user("u1") is True
        assert social.get_profile_by_user("u1") is None
        assert social.delete_profile_by_user("u1") is False


# ---------------------------------------------------------------------------
# SocialStore -- posts
# ---------------------------------------------------------------------------


class TestPosts:
    def test_create_and_list_newest_first(self, social: SocialStore) -> None:
        first = social.create_post(Post(user="u1", text="first", name="A"))
        second = social.create_post(Post(user="u2", text="second", name="B"))
        assert [p.id for p in social.list_posts()] == [second, first]

    def test_update_likes_and_comments(self, social: SocialStore) -> None:
        post_id = social.create_post(Post(user="u1", text="hello"))

        def _mutate(post: Post) -> None:
            post.likes.insert(0, Like(user="u2"))
            post.comments.insert(0, Comment(user="u2", text="nice", name="B"))

        returned = social.update_post(post_id, _mutate)
        stored = social.get_post(post_id)
        assert stored == returned
        assert stored.likes == [Like(user="u2")]
        assert len(stored.comments) == 1
        assert stored.comments[0].id
        assert stored.comments[0].date
        assert stored.comments[0].text == "nice"

    def test_update_missing_post(self, social: SocialStore) -> None:
        assert social.update_post("missing", lambda post: post.likes.clear()) is None

    def test_update_rejected_by_mutation_writes_nothing(self, social: SocialStore) -> None:
        post_id = social.create_post(Post(user="u1", text="hello"))
        social.update_post(post_id, lambda post: post.likes.insert(0, Like(user="u2")))

        def _like_once(post: Post) -> None:
            if any(like.user == "u2" for like in post.likes):
                raise ValidationError("Post already liked")
            post.likes.insert(0, Like(user="u2"))

        with pytest.raises(ValidationError):
            social.update_post(post_id, _like_once)
        assert social.get_post(post_id).likes == [Like(user="u2")]

    def test_concurrent_change_is_reapplied(self, social: SocialStore) -> None:
        """A write based on a stale read does not land; the mutation reruns on fresh data."""
        post_id = social.create_post(Post(user="u1", text="hello"))
        seen: list[list[str]] = []

        def _like_as(user: str):
            def _mutate(post: Post) -> None:
                seen.append([like.user for like in post.likes])
                if user == "u2" and len(seen) == 1:
                    # Another writer lands between this read and this write.
                    social.update_post(post_id, _like_as("u3"))
                if any(like.user == user for like in post.likes):
                    raise ValidationError("Post already liked")
                post.likes.insert(0, Like(user=user))

            return _mutate

        social.update_post(post_id, _like_as("u2"))
        assert seen == [[], [], ["u3"]]
        assert [like.user for like in social.get_post(post_id).likes] == ["u2", "u3"]

    def test_concurrent_duplicate_like_rejected(self, social: SocialStore) -> None:
        """Two likes from one user racing each other: only one lands."""
        post_id = social.create_post(Post(user="u1", text="hello"))
        calls = []

        def _like(post: Post) -> None:
            calls.append(1)
            if len(calls) == 1:
                social.update_post(post_id, _like)
            if any(like.user == "u2" for like in post.likes):
                raise ValidationError("Post already liked")
            post.likes.insert(0, Like(user="u2"))

        with pytest.raises(ValidationError):
            social.update_post(post_id, _like)
        assert social.get_post(post_id).likes == [Like(user="u2")]

    def test_delete_post(self, social: SocialStore) -> None:
        post_id = social.create_post(Post(user="u1", text="bye"))
        assert social.delete_post(post_id) is True
        assert social.get_post(post_id) is None
        assert social.delete_post(post_id) is False

    def test_delete_posts_by_user(self, social: SocialStore) -> None:
        social.create_post(Post(user="u1", text="a"))
        social.create_post(Post(user="u1", text="b"))
        keep = social.create_post(Post(user="u2", text="c"))
        assert social.delete_posts_by_user("u1") == 2
        assert [p.id for p in social.list_posts()] == [keep]
