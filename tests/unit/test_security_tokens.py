import pytest

from staffline.config import get_settings
from staffline.core.errors import AuthenticationError
from staffline.core.security import create_access_token, decode_access_token, hash_password, verify_password


def test_password_hash_round_trip() -> None:
    hashed = hash_password("s3cret")
    assert hashed != "s3cret"
    assert verify_password(hashed, "s3cret")
    assert not verify_password(hashed, "wrong")


def test_token_carries_user_id() -> None:
    token = create_access_token(42, role="admin")
    assert decode_access_token(token) == 42


def test_tampered_token_is_rejected() -> None:
    token = create_access_token(7, role="manager")
    with pytest.raises(AuthenticationError):
        decode_access_token(token + "x")


def test_token_signed_with_other_key_is_rejected() -> None:
    other = get_settings().model_copy(update={"secret_key": "another-key"})
    token = create_access_token(7, role="manager", settings=other)
    with pytest.raises(AuthenticationError):
        decode_access_token(token)
