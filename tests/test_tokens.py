from datetime import timedelta

import jwt
import pytest

from models.role import Role
from models.user import User
from utils.tokens import (
    ACCESS,
    REFRESH,
    InvalidTokenError,
    MalformedTokenError,
    TokenExpiredError,
    TokenService,
)

SECRET = "unit-test-secret-key-with-32-bytes-or-more"


@pytest.fixture
def tokens():
    return TokenService(SECRET)


@pytest.fixture
def user():
    return User(id=1700000000000, email="a@x.com", password_hash="x", role=Role.ADMIN)


def test_access_token_round_trip(tokens, user):
    claims = tokens.verify(tokens.issue_access_token(user))
    assert claims.id == user.id
    assert claims.email == "a@x.com"
    assert claims.role is Role.ADMIN
    assert claims.token_type == ACCESS
    assert claims.expires_at - claims.issued_at == timedelta(hours=1)


def test_refresh_token_carries_id_only(tokens, user):
    claims = tokens.verify(tokens.issue_refresh_token(user.id), expected_type=REFRESH)
    assert claims.id == user.id
    assert claims.email is None
    assert claims.role is None
    assert claims.expires_at - claims.issued_at == timedelta(days=1)


def test_tokens_are_unique(tokens, user):
    assert tokens.issue_access_token(user) != tokens.issue_access_token(user)


def test_expired_token_fails(user):
    expired = TokenService(SECRET, access_ttl=timedelta(seconds=-5))
    with pytest.raises(TokenExpiredError):
        expired.verify(expired.issue_access_token(user))


def test_wrong_secret_is_malformed(tokens, user):
    other = TokenService("another-secret-key-with-32-bytes-or-more")
    with pytest.raises(MalformedTokenError):
        tokens.verify(other.issue_access_token(user))


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_garbage_is_malformed(tokens, token):
    with pytest.raises(MalformedTokenError):
        tokens.verify(token)


def test_expected_type_is_enforced(tokens, user):
    with pytest.raises(MalformedTokenError):
        tokens.verify(tokens.issue_refresh_token(user.id), expected_type=ACCESS)


def test_both_failures_are_invalid_token_errors():
    assert issubclass(TokenExpiredError, InvalidTokenError)
    assert issubclass(MalformedTokenError, InvalidTokenError)


def test_unknown_role_decodes_to_none(tokens):
    token = jwt.encode(
        {"sub": "1", "iat": 0, "exp": 4102444800, "iss": tokens.issuer, "role": "root", "type": ACCESS},
        SECRET,
        algorithm="HS256",
    )
    assert tokens.verify(token).role is None


def test_allow_expired_still_checks_signature(user):
    expired = TokenService(SECRET, access_ttl=timedelta(seconds=-5))
    claims = expired.verify(expired.issue_access_token(user), allow_expired=True)
    assert claims.id == user.id

    forged = TokenService("another-secret-key-with-32-bytes-or-more", access_ttl=timedelta(seconds=-5))
    with pytest.raises(MalformedTokenError):
        expired.verify(forged.issue_access_token(user), allow_expired=True)


def test_missing_secret_is_rejected():
    with pytest.raises(ValueError):
        TokenService("")
