from datetime import timedelta

import pytest
from jose import jwt

from instalike.core.exceptions import InvalidTokenError
from instalike.core.security import CredentialService


@pytest.fixture
def credentials():
    return CredentialService(secret_key="unit-test-key", password_hash_rounds=4)


def test_password_hash_round_trip(credentials):
    hashed = credentials.hash_password("secret123")

    assert hashed != "secret123"
    assert credentials.verify_password("secret123", hashed)
    assert not credentials.verify_password("secret124", hashed)


def test_token_round_trip(credentials):
    token = credentials.create_access_token(7, "alice")

    payload = credentials.verify_token(token)
    assert payload.id == 7
    assert payload.username == "alice"


def test_token_from_other_key_rejected(credentials):
    other = CredentialService(secret_key="another-key", password_hash_rounds=4)

    with pytest.raises(InvalidTokenError):
        credentials.verify_token(other.create_access_token(7, "alice"))


def test_expired_token_rejected(credentials):
    token = credentials.create_access_token(7, "alice", expires_delta=timedelta(seconds=-1))

    with pytest.raises(InvalidTokenError):
        credentials.verify_token(token)


@pytest.mark.parametrize("claims", [{"sub": "7"}, {"username": "alice"}, {"sub": "abc", "username": "alice"}])
def test_incomplete_claims_rejected(credentials, claims):
    token = jwt.encode(claims, "unit-test-key", algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        credentials.verify_token(token)
