from datetime import timedelta
from types import SimpleNamespace

import jwt
import pytest

from subsapi.errors import InvalidToken
from subsapi.services.auth_service import AuthProvider, Identity
from subsapi.utils.dates import now_utc

pytestmark = pytest.mark.unit

USER = SimpleNamespace(id=7, username="alice")


def test_password_hash_is_salted_and_verifiable(auth):
    h1 = auth.hash_password("s3cret")
    h2 = auth.hash_password("s3cret")
    assert h1 != h2
    assert "s3cret" not in h1
    assert auth.verify_password("s3cret", h1)
    assert not auth.verify_password("wrong", h1)


def test_verify_against_plaintext_storage_fails(auth):
    assert auth.verify_password("hashed_password_here", "hashed_password_here") is False


def test_issue_then_validate(auth):
    token = auth.issue(USER)
    assert auth.validate(token) == Identity(user_id=7, username="alice")


def test_token_claims(auth):
    claims = jwt.decode(
        auth.issue(USER),
        auth.secret,
        algorithms=["HS256"],
        audience=auth.audience,
    )
    assert claims["sub"] == "7"
    assert claims["name"] == "alice"
    assert claims["iss"] == auth.issuer
    assert claims["exp"] - claims["iat"] == 30 * 60


def test_expired_token_rejected(auth):
    past = AuthProvider(
        auth.secret,
        issuer=auth.issuer,
        audience=auth.audience,
        expire_minutes=5,
        clock=lambda: now_utc() - timedelta(minutes=10),
    )
    with pytest.raises(InvalidToken, match="expired"):
        auth.validate(past.issue(USER))


def test_wrong_audience_rejected(auth):
    other = AuthProvider(auth.secret, issuer=auth.issuer, audience="someone-else")
    with pytest.raises(InvalidToken):
        auth.validate(other.issue(USER))


def test_wrong_secret_rejected(auth):
    other = AuthProvider("another-secret-key-of-decent-length-99", issuer=auth.issuer, audience=auth.audience)
    with pytest.raises(InvalidToken):
        auth.validate(other.issue(USER))


def test_garbage_token_rejected(auth):
    with pytest.raises(InvalidToken):
        auth.validate("not-a-jwt")


def test_non_positive_subject_rejected(auth):
    with pytest.raises(InvalidToken):
        auth.validate(auth.issue(SimpleNamespace(id=0, username="ghost")))
