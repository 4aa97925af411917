"""Unit tests for auth/tokens.py -- JWT issue and verify.

Covers:
- issue/verify round trip returns the user id
- payload shape {"user": {"id": ...}} and the 360000-second lifetime
- expired tokens, altered tokens, foreign-secret tokens and garbage are rejected
- tokens missing exp or carrying an unexpected payload are rejected
- construction fails fast without a secret
"""

import string
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.tokens import TokenConfig, TokenIssuer

SECRET = "unit-test-secret-0123456789abcdef0123456789"
_BASE64URL = string.ascii_letters + string.digits + "-_"


@pytest.fixture
def tokens() -> TokenIssuer:
    return TokenIssuer(TokenConfig(secret_key=SECRET))


def _alter(token: str, segment: int) -> str:
    """Change one character in the middle of the given dot-separated segment."""
    parts = token.split(".")
    seg = parts[segment]
    i = len(seg) // 2
    replacement = "A" if seg[i] != "A" else "B"
    parts[segment] = seg[:i] + replacement + seg[i + 1 :]
    return ".".join(parts)


class TestIssueVerify:
    def test_round_trip(self, tokens: TokenIssuer) -> None:
        assert tokens.verify(tokens.issue("abc123")) == "abc123"

    def test_payload_shape_and_ttl(self, tokens: TokenIssuer) -> None:
        claims = jwt.get_unverified_claims(tokens.issue("abc123"))
        assert claims["user"] == {"id": "abc123"}
        assert claims["exp"] - claims["iat"] == 360000

    def test_custom_ttl(self) -> None:
        short = TokenIssuer(TokenConfig(secret_key=SECRET, ttl_seconds=60))
        claims = jwt.get_unverified_claims(short.issue("abc123"))
        assert claims["exp"] - claims["iat"] == 60

    def test_expired_token_rejected(self, tokens: TokenIssuer) -> None:
        issued = datetime.now(timezone.utc) - timedelta(seconds=360000 + 5)
        assert tokens.verify(tokens.issue("abc123", now=issued)) is None

    def test_token_just_inside_ttl_accepted(self, tokens: TokenIssuer) -> None:
        issued = datetime.now(timezone.utc) - timedelta(seconds=360000 - 60)
        assert tokens.verify(tokens.issue("abc123", now=issued)) == "abc123"

    @pytest.mark.parametrize("segment", [0, 1, 2])
    def test_altered_token_rejected(self, tokens: TokenIssuer, segment: int) -> None:
        token = tokens.issue("abc123")
        assert tokens.verify(_alter(token, segment)) is None

    @pytest.mark.parametrize("segment", [0, 1, 2])
    def test_any_final_character_change_rejected(self, tokens: TokenIssuer, segment: int) -> None:
        """Swapping a segment's last character for any other base64url character must fail.

        The final character can hold unused low bits; a decoder that ignores
        them would map several spellings to the same bytes.
        """
        parts = tokens.issue("abc123").split(".")
        last = parts[segment][-1]
        accepted = []
        for ch in _BASE64URL.replace(last, ""):
            altered = list(parts)
            altered[segment] = parts[segment][:-1] + ch
            if tokens.verify(".".join(altered)) is not None:
                accepted.append(ch)
        assert accepted == []

    def test_other_secret_rejected(self, tokens: TokenIssuer) -> None:
        other = TokenIssuer(TokenConfig(secret_key="another-secret-0123456789abcdef0123"))
        assert tokens.verify(other.issue("abc123")) is None

    @pytest.mark.parametrize("garbage", ["", "abc", "a.b.c", "not.a.token.at.all"])
    def test_garbage_rejected(self, tokens: TokenIssuer, garbage: str) -> None:
        assert tokens.verify(garbage) is None

    def test_missing_exp_rejected(self, tokens: TokenIssuer) -> None:
        token = jwt.encode({"user": {"id": "abc123"}}, SECRET, algorithm="HS256")
        assert tokens.verify(token) is None

    @pytest.mark.parametrize(
        "payload",
        [
            {"user_id": "abc123"},
            {"user": "abc123"},
            {"user": {"id": ""}},
            {"user": {"id": 42}},
        ],
    )
    def test_unexpected_payload_rejected(self, tokens: TokenIssuer, payload: dict) -> None:
        payload = {**payload, "exp": datetime.now(timezone.utc) + timedelta(hours=1)}
        token = jwt.encode(payload, SECRET, algorithm="HS256")
        assert tokens.verify(token) is None

    def test_none_algorithm_rejected(self, tokens: TokenIssuer) -> None:
        header = jwt.get_unverified_header(tokens.issue("abc123"))
        assert header["alg"] == "HS256"
        forged = tokens.issue("abc123").rsplit(".", 1)[0] + "."
        assert tokens.verify(forged) is None


class TestConfig:
    def test_empty_secret_rejected(self) -> None:
        with pytest.raises(ValueError):
            TokenIssuer(TokenConfig(secret_key=""))

    def test_non_positive_ttl_rejected(self) -> None:
        with pytest.raises(ValueError):
            TokenIssuer(TokenConfig(secret_key=SECRET, ttl_seconds=0))
